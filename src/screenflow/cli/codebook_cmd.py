"""screenflow codebook -- Inventory raw variable metadata."""
from __future__ import annotations

from pathlib import Path

import typer

from screenflow.cli._common import fail, load_dataset
from screenflow.core.exceptions import ScreenFlowError

codebook_app = typer.Typer(help="Write a raw codebook for a dataset.")


@codebook_app.callback(invoke_without_command=True)
def codebook(
    ctx: typer.Context,  # noqa: ARG001
    data: Path = typer.Option(..., "--data", "-d", help="Dataset (CSV/XLSX/JSON)"),  # noqa: B008
    labels: Path | None = typer.Option(None, "--labels", "-l", help="Label sidecar"),  # noqa: B008
    output: Path = typer.Option(Path("raw_codebook.csv"), "--output", "-o"),  # noqa: B008
) -> None:
    """Describe each variable: labels, storage type, missingness."""
    from screenflow.audit.codebook import build_raw_codebook  # noqa: PLC0415
    from screenflow.audit.report import rows_to_frame  # noqa: PLC0415
    from screenflow.core.models import CodebookEntry  # noqa: PLC0415
    from screenflow.io.readers import load_labels  # noqa: PLC0415
    from screenflow.io.writers import write_table  # noqa: PLC0415

    dataset = load_dataset(data)
    try:
        label_set = load_labels(labels) if labels is not None else None
        entries = build_raw_codebook(dataset, label_set, source_file=str(data))
        write_table(rows_to_frame(entries, CodebookEntry), output)
    except (FileNotFoundError, ScreenFlowError) as exc:
        raise fail(str(exc)) from exc

    typer.echo(f"Wrote codebook for {len(entries)} variable(s) to {output}")
