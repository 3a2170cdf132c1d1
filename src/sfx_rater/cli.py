"""CLI interface for SFX Rater."""

import logging
from pathlib import Path

import typer

from .domain.errors import RaterError
from .interfaces import cli_handlers
from .storage import StorageConfigError

app = typer.Typer(help="SFX Rater command line interface")


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Human rating tool for sound effect / music pairs."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("serve")
def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API server to."),
    port: int = typer.Option(8000, "--port", min=1, max=65535, help="Port to bind the API server to."),
    reload: bool = typer.Option(False, "--reload", help="Restart the server on code changes."),
) -> None:
    """Run the HTTP API."""

    cli_handlers.run_server(host=host, port=port, reload=reload)


@app.command("pairs")
def pairs_command() -> None:
    """Print the pairs that still need a rating."""

    try:
        pairs = cli_handlers.list_available_pairs()
    except (RaterError, StorageConfigError) as error:
        typer.echo(f"Failed to fetch available pairs: {error}", err=True)
        raise typer.Exit(code=1) from error

    for pair in pairs:
        typer.echo(f"{pair.id}\t{pair.sfx_id}\t{pair.music_id}")
    typer.echo(f"Total: {len(pairs)}")


@app.command("export-responses")
def export_responses_command(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the records to this JSON file instead of stdout.",
    ),
) -> None:
    """Dump every recorded response as a JSON array."""

    try:
        count, payload = cli_handlers.export_responses(output)
    except (RaterError, StorageConfigError) as error:
        typer.echo(f"Failed to export responses: {error}", err=True)
        raise typer.Exit(code=1) from error

    if output is None:
        typer.echo(payload)
    else:
        typer.echo(f"Exported {count} responses to: {output}")


@app.command("migrate-ledger")
def migrate_ledger_command() -> None:
    """Copy legacy shared-array submissions into per-record objects."""

    try:
        summary = cli_handlers.migrate_ledger()
    except (RaterError, StorageConfigError) as error:
        typer.echo(f"Ledger migration failed: {error}", err=True)
        raise typer.Exit(code=1) from error

    typer.echo(
        "Summary: "
        f"records_copied={summary.records_copied} "
        f"records_skipped={summary.records_skipped} "
        f"markers_written={summary.markers_written}"
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
