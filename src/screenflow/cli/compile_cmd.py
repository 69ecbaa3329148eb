"""screenflow compile -- Compile screening configuration to a rule table."""
from __future__ import annotations

from pathlib import Path

import typer

from screenflow.cli._common import fail, load_dataset
from screenflow.core.exceptions import ScreenFlowError

compile_app = typer.Typer(help="Compile screening configuration into a rule table.")


@compile_app.callback(invoke_without_command=True)
def compile_config(
    ctx: typer.Context,  # noqa: ARG001
    data: Path = typer.Option(..., "--data", "-d", help="Dataset to compile against"),  # noqa: B008
    config: Path = typer.Option(..., "--config", "-c", help="screening.yaml"),  # noqa: B008
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Write the rule table (CSV/JSON/XLSX) instead of printing"
    ),
) -> None:
    """Compile and validate rules without applying them."""
    from screenflow.config import load_screening_config  # noqa: PLC0415
    from screenflow.io.writers import write_table  # noqa: PLC0415
    from screenflow.rules import compile_rules  # noqa: PLC0415

    dataset = load_dataset(data)
    try:
        rules = compile_rules(load_screening_config(config), dataset)
    except (FileNotFoundError, ScreenFlowError) as exc:
        raise fail(str(exc)) from exc

    frame = rules.to_frame()
    if output is not None:
        try:
            write_table(frame, output)
        except ScreenFlowError as exc:
            raise fail(str(exc)) from exc
        typer.echo(f"Compiled {len(rules)} rule(s) to {output}")
        return

    typer.echo(f"Compiled {len(rules)} rule(s)")
    for rule in rules.execution_order():
        typer.echo(f"  {rule.order:>3}  {rule.action:<9}  {rule.rule_id}: {rule.predicate}")
