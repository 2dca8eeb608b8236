from typing import Annotated

import typer
from rich.console import Console
from rich.syntax import Syntax

from mockforge.core.curl import resource_curls

console = Console()


def curl(
    project_id: Annotated[str, typer.Argument(help="Project the resource belongs to.")],
    version: Annotated[str, typer.Argument(help="API version segment, e.g. v1.")],
    resource: Annotated[str, typer.Argument(help="Resource name (slug).")],
    base_url: Annotated[str, typer.Option(help="Base URL of a running server.")] = "http://127.0.0.1:8000",
) -> None:
    """Print example curl commands for a resource's mock endpoints."""
    for operation, command in resource_curls(base_url, project_id, version, resource).items():
        console.print(f"[bold]{operation}[/bold]")
        console.print(Syntax(command, "bash"))
