"""Interface adapters shared by the HTTP API and the CLI."""
