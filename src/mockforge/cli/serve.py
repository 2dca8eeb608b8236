import logging
import os
from typing import Annotated

import typer
from rich.console import Console

console = Console()

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def serve(
    host: Annotated[str, typer.Option(help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on.")] = 8000,
    log_level: Annotated[str | None, typer.Option(help="Log level (DEBUG, INFO, WARNING, ...).")] = None,
    store: Annotated[str | None, typer.Option(help="Record store backend: postgres or memory.")] = None,
) -> None:
    """Start the management and mock REST API server."""
    import uvicorn

    from mockforge.api.app import create_app

    level = (log_level or os.getenv("MOCKFORGE_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format=_LOG_FORMAT)
    if store is not None:
        os.environ["MOCKFORGE_STORE"] = store

    app = create_app()
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port, log_level=level.lower())
