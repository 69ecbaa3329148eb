"""ScreenFlow CLI -- Typer application."""
from __future__ import annotations

import typer

from screenflow import __version__
from screenflow.cli.check_cmd import check_predicate_cmd
from screenflow.cli.codebook_cmd import codebook_app
from screenflow.cli.compile_cmd import compile_app
from screenflow.cli.screen_cmd import screen_app

app = typer.Typer(
    name="screenflow",
    help="ScreenFlow: deterministic, auditable participant screening.",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context) -> None:
    """ScreenFlow: deterministic, auditable participant screening.

    Run without a subcommand to show this help.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


app.add_typer(screen_app, name="screen")
app.add_typer(compile_app, name="compile")
app.command("check-predicate")(check_predicate_cmd)
app.add_typer(codebook_app, name="codebook")


@app.command()
def version() -> None:
    """Print the installed ScreenFlow version."""
    typer.echo(f"screenflow {__version__}")
