"""accessguard CLI entry point."""

import click
import uvicorn

from accessguard.config import settings
from accessguard.logs import configure_logging


@click.group()  # type: ignore[untyped-decorator]
@click.version_option(version=settings.app_version)  # type: ignore[untyped-decorator]
def main() -> None:
    """accessguard - structured access logging and panic recovery for ASGI apps."""


@main.command()  # type: ignore[untyped-decorator]
@click.option("--host", default=settings.api_host, help="Demo server host")  # type: ignore[untyped-decorator]
@click.option("--port", default=settings.api_port, type=int, help="Demo server port")  # type: ignore[untyped-decorator]
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")  # type: ignore[untyped-decorator]
def serve(host: str, port: int, reload: bool) -> None:
    """Start the demo API server with both middlewares installed."""
    configure_logging(settings.log_level, settings.log_format)
    uvicorn.run(
        "accessguard.demo:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@main.command(name="settings")  # type: ignore[untyped-decorator]
def show_settings() -> None:
    """Show the effective configuration."""
    for key, value in settings.model_dump().items():
        click.echo(f"{key}: {value}")


if __name__ == "__main__":
    main()
