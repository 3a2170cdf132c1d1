"""FastAPI interface for SFX Rater."""

from __future__ import annotations

import base64
import logging
from typing import Any
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .domain.errors import AlreadySubmitted, ClientError, RaterError
from .interfaces.services import RaterServices, get_services
from .storage import StorageConfigError, load_cors_origins

logger = logging.getLogger(__name__)

app = FastAPI(title="SFX Rater API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_cors_origins(),
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-Id"],
    expose_headers=["X-Correlation-Id"],
)


class SubmissionPayload(BaseModel):
    """Body of ``POST /submit-response``; presence and shape are validated by the use case."""

    sfx_id: str | None = None
    music_id: str | None = None
    timestamp: Any = None


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get("X-Correlation-Id") or str(uuid4())
    request.state.correlation_id = correlation_id
    response = await call_next(request)
    response.headers["X-Correlation-Id"] = correlation_id
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, error: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "code": "invalid_request",
                "message": "Request body or parameters are malformed.",
                "errors": [
                    {"loc": list(item.get("loc", ())), "msg": item.get("msg", "")} for item in error.errors()
                ],
            }
        },
    )


@app.exception_handler(StorageConfigError)
async def storage_config_handler(request: Request, error: StorageConfigError) -> JSONResponse:
    logger.error("Storage configuration is invalid", extra={"error_code": error.code, "reason": str(error)})
    return JSONResponse(
        status_code=500,
        content={"detail": {"code": error.code, "message": "Service is misconfigured"}},
    )


def _http_error(error: RaterError, failure_message: str, correlation_id: str) -> HTTPException:
    if isinstance(error, ClientError):
        return HTTPException(status_code=400, detail={"code": error.code, "message": str(error)})
    if isinstance(error, AlreadySubmitted):
        return HTTPException(status_code=403, detail={"code": error.code, "message": "Already submitted"})

    logger.error(
        failure_message,
        exc_info=error,
        extra={"correlation_id": correlation_id, "error_code": error.code},
    )
    return HTTPException(status_code=500, detail={"code": error.code, "message": failure_message})


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok"}


@app.get("/available-pairs")
def available_pairs(request: Request, services: RaterServices = Depends(get_services)) -> dict:
    """List sfx/music pairs present in storage that have not been rated yet."""

    try:
        pairs = services.discover_pairs.run(correlation_id=request.state.correlation_id)
    except RaterError as error:
        raise _http_error(error, "Failed to fetch available pairs", request.state.correlation_id) from error

    return {"pairs": [pair.as_dict() for pair in pairs], "total": len(pairs)}


@app.get("/audio")
def audio(
    request: Request,
    sfx_id: str | None = Query(None, description="Sound effect identifier, e.g. sfx_7."),
    music_id: str | None = Query(None, description="Music identifier, e.g. music_7."),
    services: RaterServices = Depends(get_services),
) -> dict[str, str]:
    """Return both blobs of a pair as base64 strings."""

    if not sfx_id or not music_id:
        raise HTTPException(
            status_code=400,
            detail={"code": "missing_field", "message": "Missing sfx_id or music_id"},
        )

    try:
        pair = services.fetch_audio_pair.run(sfx_id, music_id, correlation_id=request.state.correlation_id)
    except RaterError as error:
        raise _http_error(error, "Failed to fetch audio", request.state.correlation_id) from error

    return {
        "sfx": base64.b64encode(pair.sfx.raw_bytes).decode("ascii"),
        "music": base64.b64encode(pair.music.raw_bytes).decode("ascii"),
    }


@app.post("/submit-response")
def submit_response(
    request: Request,
    payload: SubmissionPayload,
    services: RaterServices = Depends(get_services),
) -> dict[str, str]:
    """Record the timestamp a rater picked for a pair."""

    try:
        ack = services.submit_response.run(
            payload.sfx_id,
            payload.music_id,
            payload.timestamp,
            correlation_id=request.state.correlation_id,
        )
    except RaterError as error:
        raise _http_error(error, "Failed to submit response", request.state.correlation_id) from error

    return {"message": ack.message}


@app.get("/get-audio-url")
def get_audio_url(
    request: Request,
    kind: str | None = Query(None, alias="type", description="Asset kind: sfx or music."),
    asset_id: str | None = Query(None, alias="id", description="Asset identifier, e.g. sfx_7."),
    services: RaterServices = Depends(get_services),
) -> dict[str, str]:
    """Return a time-limited direct download URL for one asset."""

    if not kind or not asset_id:
        raise HTTPException(
            status_code=400,
            detail={"code": "missing_field", "message": "Missing type or id"},
        )

    try:
        url = services.sign_audio_url.run(kind, asset_id)
    except RaterError as error:
        raise _http_error(error, "Failed to generate URL", request.state.correlation_id) from error

    return {"url": url}
