"""Artifact writers -- tables and the audit bundle."""
from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pandas as pd
import structlog

from screenflow import __version__
from screenflow.audit import artifacts
from screenflow.audit.report import report_tables, rows_to_frame
from screenflow.core.exceptions import UnsupportedFormatError
from screenflow.core.models import AuditReport, CodebookEntry
from screenflow.rules.table import RuleTable

logger = structlog.get_logger(__name__)

SUPPORTED_WRITE_FORMATS = {".csv", ".json", ".xlsx"}


def write_table(frame: pd.DataFrame, path: Path, format_type: str | None = None) -> Path:
    """Write one table. Auto-detect format from extension if not given.

    Args:
        frame: Table to write.
        path: Output file path.
        format_type: Optional format override ("csv", "json", "excel").

    Returns:
        Path to the written file.

    Raises:
        UnsupportedFormatError: If format is not recognized.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fmt = format_type or _detect_format(path)

    if fmt == "csv":
        frame.to_csv(path, index=False, encoding="utf-8", lineterminator="\n")
    elif fmt == "json":
        path.write_text(frame.to_json(orient="records", indent=2), encoding="utf-8")
    elif fmt == "excel":
        frame.to_excel(path, index=False, engine="openpyxl")
    else:
        raise UnsupportedFormatError(fmt, ["csv", "json", "excel"])

    logger.info("write_table", path=str(path), format=fmt, n_rows=len(frame))
    return path


def _detect_format(path: Path) -> str:
    """Detect write format from file extension.

    Raises:
        UnsupportedFormatError: If extension not recognized.
    """
    ext = path.suffix.lower()
    mapping = {".csv": "csv", ".json": "json", ".xlsx": "excel"}
    if ext not in mapping:
        raise UnsupportedFormatError(ext, sorted(SUPPORTED_WRITE_FORMATS))
    return mapping[ext]


def _sha256(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def write_audit_bundle(
    screened: pd.DataFrame,
    rules: RuleTable,
    report: AuditReport,
    output_dir: Path,
    codebook: list[CodebookEntry] | None = None,
) -> dict[str, Path]:
    """Write screened data, rules and every audit table as CSV.

    A manifest (``audit_manifest.json``) lists each artifact with its row
    count and SHA-256 digest. Identical input produces identical bytes.

    Args:
        screened: Screened dataset to export.
        rules: Rule table used for screening.
        report: Audit report derived from the run.
        output_dir: Directory to write into (created if missing).
        codebook: Optional raw codebook entries.

    Returns:
        Mapping of artifact file name to written path, manifest included.
    """
    output_dir = Path(output_dir)
    tables: dict[str, pd.DataFrame] = {
        artifacts.SCREENED_DATA: screened,
        artifacts.SCREENING_RULES: rules.to_frame(),
        **report_tables(report),
    }
    if codebook is not None:
        tables[artifacts.RAW_CODEBOOK] = rows_to_frame(codebook, CodebookEntry)

    written: dict[str, Path] = {}
    manifest = []
    for name in sorted(tables):
        path = write_table(tables[name], output_dir / name, format_type="csv")
        written[name] = path
        manifest.append({"file": name, "n_rows": len(tables[name]), "sha256": _sha256(path)})

    manifest_path = output_dir / artifacts.MANIFEST
    manifest_path.write_text(
        json.dumps({"screenflow_version": __version__, "artifacts": manifest}, indent=2) + "\n",
        encoding="utf-8",
    )
    written[artifacts.MANIFEST] = manifest_path
    logger.info("write_audit_bundle", output_dir=str(output_dir), n_artifacts=len(written))
    return written


def write_audit_workbook(report: AuditReport, path: Path) -> Path:
    """Write all audit tables into one Excel workbook, one sheet per table.

    Args:
        report: Audit report to export.
        path: Output ``.xlsx`` path.

    Returns:
        Path to the written workbook.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, frame in report_tables(report).items():
            # Excel caps sheet names at 31 characters
            frame.to_excel(writer, sheet_name=Path(name).stem[:31], index=False)
    logger.info("write_audit_workbook", path=str(path))
    return path
