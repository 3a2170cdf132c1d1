"""CLI-facing handlers that delegate to application services."""

from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

from sfx_rater.application.ledger_migration import MigrationSummary
from sfx_rater.domain.models import Pair
from sfx_rater.interfaces.services import get_services


def list_available_pairs() -> list[Pair]:
    return get_services().discover_pairs.run(correlation_id=str(uuid4()))


def export_responses(output_path: Path | None) -> tuple[int, str]:
    """Serialize every ledger record; write to ``output_path`` when given."""

    records = get_services().export_responses.run()
    payload = json.dumps([record.as_dict() for record in records], indent=2)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload + "\n", encoding="utf-8")
    return len(records), payload


def migrate_ledger() -> MigrationSummary:
    return get_services().migrate_ledger.run()


def run_server(host: str, port: int, reload: bool) -> None:
    import uvicorn

    uvicorn.run("sfx_rater.api:app", host=host, port=port, reload=reload)
