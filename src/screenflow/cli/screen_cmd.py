"""screenflow screen -- Compile, apply and audit screening rules."""
from __future__ import annotations

from pathlib import Path

import structlog
import typer

from screenflow.cli._common import fail, load_dataset
from screenflow.core.exceptions import ScreenFlowError

logger = structlog.get_logger(__name__)

screen_app = typer.Typer(help="Screen a dataset and write the audit bundle.")


@screen_app.callback(invoke_without_command=True)
def screen(
    ctx: typer.Context,  # noqa: ARG001
    data: Path = typer.Option(..., "--data", "-d", help="Dataset (CSV/XLSX/JSON)"),  # noqa: B008
    config: Path | None = typer.Option(None, "--config", "-c", help="screening.yaml"),  # noqa: B008
    output_dir: Path = typer.Option(Path("screening"), "--output", "-o"),  # noqa: B008
    labels: Path | None = typer.Option(  # noqa: B008
        None, "--labels", "-l", help="Label sidecar (YAML/JSON) for the raw codebook"
    ),
    drop_excluded: bool = typer.Option(  # noqa: B008
        False, "--drop-excluded", help="Remove excluded rows from the exported data"
    ),
    excel: bool = typer.Option(  # noqa: B008
        False, "--excel", help="Also write all audit tables to one Excel workbook"
    ),
) -> None:
    """Screen a dataset with declared rules and write audit artifacts."""
    from screenflow.audit.codebook import build_raw_codebook  # noqa: PLC0415
    from screenflow.config import load_screening_config  # noqa: PLC0415
    from screenflow.io.readers import load_labels  # noqa: PLC0415
    from screenflow.io.writers import write_audit_bundle, write_audit_workbook  # noqa: PLC0415
    from screenflow.pipeline import run_screening  # noqa: PLC0415

    dataset = load_dataset(data)
    typer.echo(f"[screen] Loaded {len(dataset)} rows from {data}")

    try:
        screening_config = load_screening_config(config) if config else None
        result = run_screening(dataset, screening_config, drop_excluded=drop_excluded)
        codebook = None
        if labels is not None:
            codebook = build_raw_codebook(dataset, load_labels(labels), source_file=str(data))
    except FileNotFoundError as exc:
        raise fail(str(exc)) from exc
    except ScreenFlowError as exc:
        logger.error("screen_failed", error=str(exc))
        raise fail(str(exc)) from exc

    typer.echo(f"[screen] Rules: {len(result.rules)}")
    for line in result.report.summary:
        count = "" if line.n is None else f" {line.n}"
        typer.echo(f"  {line.line_text}{count}")
    for warning in result.report.warnings:
        typer.echo(f"  [{warning.severity}] {warning.message}")
    if result.n_dropped:
        typer.echo(f"[screen] Dropped {result.n_dropped} excluded rows from exported data")

    written = write_audit_bundle(
        result.screened, result.rules, result.report, output_dir, codebook=codebook
    )
    if excel:
        write_audit_workbook(result.report, output_dir / "audit_tables.xlsx")
    typer.echo(f"[screen] Wrote {len(written)} artifacts to {output_dir}/")
