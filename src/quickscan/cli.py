from __future__ import annotations

import json
from typing import Optional

import typer

from quickscan.app import setup_logging
from quickscan.app.settings import get_app_settings
from quickscan.auth import get_auth_settings
from quickscan.files import get_file_settings
from quickscan.storage import get_storage_settings

app = typer.Typer(help="QuickScan API server commands", no_args_is_help=True)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address; defaults to APP_HOST."),
    port: Optional[int] = typer.Option(None, help="Bind port; defaults to APP_PORT."),
    reload: bool = typer.Option(False, help="Reload on code changes (development only)."),
):
    """Run the API with uvicorn."""
    import uvicorn

    setup_logging()
    settings = get_app_settings()
    uvicorn.run(
        "quickscan.api.fastapi:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command("show-config")
def show_config():
    """Print the effective settings as JSON; secrets are redacted."""
    try:
        config = {
            "app": get_app_settings().model_dump(mode="json"),
            "auth": get_auth_settings().model_dump(mode="json"),
            "storage": get_storage_settings().model_dump(mode="json"),
            "files": get_file_settings().model_dump(mode="json"),
        }
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(config, indent=2))


if __name__ == "__main__":
    app()
