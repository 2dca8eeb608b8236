import json
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console

from mockforge.core.registry import build_default_registry, create_faker
from mockforge.core.templates import build_template, compile_template, to_json_value
from mockforge.models import TemplateField

console = Console()

_FIELDS = TypeAdapter(list[TemplateField])


def _load_template(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        console.print(f"[red]{path} is not valid JSON: {exc}[/red]")
        raise typer.Exit(1) from exc

    if isinstance(raw, list):
        try:
            return build_template(_FIELDS.validate_python(raw))
        except ValidationError as exc:
            console.print(f"[red]Invalid field list:[/red]\n{exc}")
            raise typer.Exit(1) from exc
    if not isinstance(raw, dict):
        console.print("[red]Template must be a JSON object or a list of fields.[/red]")
        raise typer.Exit(1)
    return raw


def preview(
    template_file: Annotated[Path, typer.Argument(help="JSON template or field list.", exists=True, dir_okay=False)],
    count: Annotated[int, typer.Option(help="Number of records to generate.")] = 3,
    seed: Annotated[int | None, typer.Option(help="Faker seed for reproducible output.")] = None,
) -> None:
    """Compile a template locally and print the generated records."""
    template = _load_template(template_file)
    registry = build_default_registry(create_faker(seed))

    records = [{"id": i, **compile_template(template, registry)} for i in range(1, count + 1)]
    console.print_json(json.dumps(to_json_value(records)))
