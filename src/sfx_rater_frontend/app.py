import logging
import os
from typing import Any

import requests
from flask import Flask, Response, jsonify, render_template_string, request

from sfx_rater.domain.models import AudioKind

logger = logging.getLogger(__name__)

app = Flask(__name__)


INDEX_TEMPLATE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>SFX Rater</title>
    <style>
      body { background: #000; color: #fff; font-family: sans-serif; display: flex; justify-content: center; }
      main { background: #1f2937; padding: 1.5rem; border-radius: 0.5rem; width: 600px; margin-top: 3rem; }
      button { background: #f97316; color: #fff; border: 0; border-radius: 0.25rem; padding: 0.5rem 1rem; }
      button:disabled { opacity: 0.5; }
      #error { background: #dc2626; padding: 0.75rem; border-radius: 0.25rem; display: none; }
      #track { position: relative; flex-grow: 1; margin: 0 1rem; height: 2.5rem; background: #374151; }
      #progress { position: absolute; top: 0; left: 0; height: 100%; background: #f97316; width: 0; }
      #slider { position: absolute; top: 0; left: 0; width: 100%; height: 100%; opacity: 0; cursor: pointer; margin: 0; }
      #marker { position: absolute; top: -1.25rem; transform: translateX(-50%); font-size: 0.8rem; }
    </style>
  </head>
  <body>
    <main>
      <header style="display: flex; justify-content: space-between; align-items: center;">
        <h1 id="title">Loading audio pairs...</h1>
        <div>
          <button id="prev" type="button">&larr;</button>
          <span id="position"></span>
          <button id="next" type="button">&rarr;</button>
        </div>
      </header>
      <div id="error"></div>
      <h2>Sound Effect</h2>
      <button id="play-sfx" type="button" disabled>Play Sound Effect</button>
      <audio id="sfx-audio"></audio>
      <h2>Music Track</h2>
      <div style="display: flex; align-items: center;">
        <button id="toggle-music" type="button" disabled>&#9654;</button>
        <div id="track">
          <div id="progress"></div>
          <input id="slider" type="range" min="0" max="100" step="0.1" value="0">
          <div id="marker" style="left: 0%;">0.00s</div>
        </div>
      </div>
      <audio id="music-audio"></audio>
      <button id="submit" type="button" style="width: 100%; margin-top: 1.5rem;" disabled>Submit Response (0.00s)</button>
    </main>
    <script>
      const MEDIA_TYPES = {{ media_types | tojson }};
      const state = { pairs: [], current: 0, timestamp: 0, urls: [] };
      const $ = (id) => document.getElementById(id);
      const sfxAudio = $("sfx-audio");
      const musicAudio = $("music-audio");

      function showError(message) {
        $("error").textContent = message;
        $("error").style.display = message ? "block" : "none";
      }

      async function readError(res, fallback) {
        try {
          const body = await res.json();
          return (body.detail && body.detail.message) || fallback;
        } catch (err) {
          return fallback;
        }
      }

      function toBlobUrl(b64, type) {
        const bytes = Uint8Array.from(atob(b64), (c) => c.charCodeAt(0));
        const url = URL.createObjectURL(new Blob([bytes], { type }));
        state.urls.push(url);
        return url;
      }

      function setTimestamp(seconds) {
        state.timestamp = seconds;
        const pct = musicAudio.duration ? (seconds / musicAudio.duration) * 100 : 0;
        $("progress").style.width = pct + "%";
        $("marker").style.left = pct + "%";
        $("marker").textContent = seconds.toFixed(2) + "s";
        $("slider").value = pct;
        $("submit").textContent = "Submit Response (" + seconds.toFixed(2) + "s)";
      }

      function render() {
        const pair = state.pairs[state.current];
        $("prev").disabled = $("next").disabled = state.pairs.length <= 1;
        if (!pair) {
          $("title").textContent = "No more audio pairs to rate!";
          $("position").textContent = "";
          ["play-sfx", "toggle-music", "submit"].forEach((id) => ($(id).disabled = true));
          return;
        }
        $("title").textContent = "Audio Pair " + pair.id;
        $("position").textContent = (state.current + 1) + " / " + state.pairs.length;
      }

      async function loadPair() {
        render();
        const pair = state.pairs[state.current];
        if (!pair) return;
        showError("");
        state.urls.forEach((url) => URL.revokeObjectURL(url));
        state.urls = [];
        musicAudio.pause();
        $("toggle-music").innerHTML = "&#9654;";
        ["play-sfx", "toggle-music", "submit"].forEach((id) => ($(id).disabled = true));
        const params = new URLSearchParams({ sfx_id: pair.sfx_id, music_id: pair.music_id });
        const res = await fetch("/api/audio?" + params);
        if (!res.ok) {
          showError(await readError(res, "Failed to load audio files"));
          return;
        }
        const data = await res.json();
        sfxAudio.src = toBlobUrl(data.sfx, MEDIA_TYPES.sfx);
        musicAudio.src = toBlobUrl(data.music, MEDIA_TYPES.music);
        setTimestamp(0);
        ["play-sfx", "toggle-music", "submit"].forEach((id) => ($(id).disabled = false));
      }

      async function loadPairs() {
        const res = await fetch("/api/available-pairs");
        if (!res.ok) {
          showError(await readError(res, "Failed to load audio pairs"));
          return;
        }
        const data = await res.json();
        state.pairs = data.pairs;
        state.current = 0;
        await loadPair();
      }

      function step(delta) {
        if (!state.pairs.length) return;
        state.current = (state.current + delta + state.pairs.length) % state.pairs.length;
        loadPair();
      }

      $("prev").addEventListener("click", () => step(-1));
      $("next").addEventListener("click", () => step(1));
      $("play-sfx").addEventListener("click", () => {
        sfxAudio.currentTime = 0;
        sfxAudio.play();
      });
      $("toggle-music").addEventListener("click", () => {
        if (musicAudio.paused) {
          musicAudio.play();
          $("toggle-music").innerHTML = "&#10074;&#10074;";
        } else {
          musicAudio.pause();
          $("toggle-music").innerHTML = "&#9654;";
        }
      });
      $("slider").addEventListener("input", (event) => {
        if (!musicAudio.duration) return;
        musicAudio.currentTime = (Number(event.target.value) / 100) * musicAudio.duration;
        setTimestamp(musicAudio.currentTime);
      });
      musicAudio.addEventListener("timeupdate", () => setTimestamp(musicAudio.currentTime));
      $("submit").addEventListener("click", async () => {
        const pair = state.pairs[state.current];
        if (!pair) return;
        $("submit").disabled = true;
        const res = await fetch("/api/submit-response", {
          method: "POST",
          headers: { "Content-Type": "application/json" },
          body: JSON.stringify({ sfx_id: pair.sfx_id, music_id: pair.music_id, timestamp: state.timestamp }),
        });
        if (!res.ok) {
          alert(await readError(res, "Failed to submit response"));
          $("submit").disabled = false;
          return;
        }
        state.pairs.splice(state.current, 1);
        if (state.current >= state.pairs.length) state.current = 0;
        alert("Response submitted successfully!");
        await loadPair();
      });

      loadPairs();
    </script>
  </body>
</html>
"""


HEALTH_TEMPLATE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <title>Health</title>
  </head>
  <body>
    <h1>API health status: {{ status }}</h1>
    <pre>{{ payload }}</pre>
    <p><a href="/">Back</a></p>
  </body>
</html>
"""


PROXIED_GET_ENDPOINTS = {"available-pairs", "audio", "get-audio-url"}


def _api_base_url() -> str:
    return os.getenv("SFX_RATER_API_BASE_URL", "http://127.0.0.1:8000").rstrip("/")


def _frontend_host() -> str:
    return os.getenv("SFX_RATER_FRONTEND_HOST", "0.0.0.0")


def _frontend_port() -> int:
    return int(os.getenv("SFX_RATER_FRONTEND_PORT", "5000"))


@app.get("/")
def index() -> str:
    return render_template_string(
        INDEX_TEMPLATE,
        media_types={kind.value: kind.media_type for kind in AudioKind},
    )


@app.get("/api/<endpoint>")
def proxy_get(endpoint: str) -> Response | tuple[Response, int]:
    if endpoint not in PROXIED_GET_ENDPOINTS:
        return jsonify({"detail": {"code": "not_found", "message": f"Unknown endpoint: {endpoint}"}}), 404

    try:
        upstream = requests.get(
            f"{_api_base_url()}/{endpoint}",
            params=request.args.to_dict(),
            headers=_forwarded_headers(),
            timeout=120,
        )
    except requests.RequestException as exc:
        return _unreachable(exc)
    return _relay(upstream)


@app.post("/api/submit-response")
def proxy_submit() -> Response | tuple[Response, int]:
    try:
        upstream = requests.post(
            f"{_api_base_url()}/submit-response",
            data=request.get_data(),
            headers={**_forwarded_headers(), "Content-Type": request.content_type or "application/json"},
            timeout=30,
        )
    except requests.RequestException as exc:
        return _unreachable(exc)
    return _relay(upstream)


@app.get("/health")
def health() -> tuple[str, int]:
    try:
        upstream = requests.get(f"{_api_base_url()}/health", timeout=30)
    except requests.RequestException as exc:
        payload = {"error": "Failed to contact API", "detail": str(exc)}
        return render_template_string(HEALTH_TEMPLATE, status="unavailable", payload=payload), 502

    try:
        payload = upstream.json()
    except ValueError:
        payload = {"error": "Upstream returned non-JSON payload", "body": upstream.text}

    status = payload.get("status", "unknown") if isinstance(payload, dict) else "unknown"
    return render_template_string(HEALTH_TEMPLATE, status=status, payload=payload), upstream.status_code


def _forwarded_headers() -> dict[str, str]:
    correlation_id = request.headers.get("X-Correlation-Id")
    return {"X-Correlation-Id": correlation_id} if correlation_id else {}


def _relay(upstream: requests.Response) -> Response:
    content_type = upstream.headers.get("content-type", "application/json")
    headers = {}
    if upstream.headers.get("X-Correlation-Id"):
        headers["X-Correlation-Id"] = upstream.headers["X-Correlation-Id"]
    return Response(upstream.content, status=upstream.status_code, content_type=content_type, headers=headers)


def _unreachable(exc: requests.RequestException) -> tuple[Response, int]:
    logger.warning("API request failed", exc_info=exc)
    payload: dict[str, Any] = {"detail": {"code": "api_unavailable", "message": "Failed to contact API"}}
    return jsonify(payload), 502


def main() -> None:
    app.run(host=_frontend_host(), port=_frontend_port(), debug=True)


if __name__ == "__main__":
    main()
