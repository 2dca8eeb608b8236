import typer

from mockforge.cli.curl import curl
from mockforge.cli.db import db_app
from mockforge.cli.preview import preview
from mockforge.cli.serve import serve

app = typer.Typer(
    name="mockforge",
    help="MockForge CLI: template-driven mock REST APIs.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(db_app, name="db")
app.command("serve")(serve)
app.command("preview")(preview)
app.command("curl")(curl)


def main() -> None:
    app()
