"""screenflow check-predicate -- Validate a predicate expression."""
from __future__ import annotations

from pathlib import Path

import typer

from screenflow.cli._common import fail, load_dataset
from screenflow.core.exceptions import ScreenFlowError


def check_predicate_cmd(
    predicate: str = typer.Argument(..., help="Predicate text, e.g. \"age >= 18\""),
    data: Path | None = typer.Option(  # noqa: B008
        None, "--data", "-d", help="Also evaluate against this dataset"
    ),
) -> None:
    """Run the denylist and grammar checks; optionally count matching rows."""
    from screenflow.predicates import check_predicate, evaluate_predicate  # noqa: PLC0415
    from screenflow.predicates.nodes import referenced_columns  # noqa: PLC0415

    try:
        tree = check_predicate(predicate)
    except ScreenFlowError as exc:
        raise fail(str(exc)) from exc

    columns = referenced_columns(tree)
    typer.echo(f"OK: columns used: {', '.join(columns) if columns else '(none)'}")

    if data is not None:
        dataset = load_dataset(data)
        try:
            matches = evaluate_predicate(tree, dataset)
        except ScreenFlowError as exc:
            raise fail(str(exc)) from exc
        typer.echo(f"Matches {int(matches.sum())} of {len(dataset)} rows")
