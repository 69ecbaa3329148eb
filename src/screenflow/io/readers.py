"""Dataset and label readers -- auto-detect format by extension."""
from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import structlog
import yaml
from pydantic import ValidationError

from screenflow.core.exceptions import ConfigValidationError, UnsupportedFormatError
from screenflow.core.models import DatasetLabels

logger = structlog.get_logger(__name__)

SUPPORTED_EXTENSIONS = {".csv", ".xlsx", ".json"}
LABEL_EXTENSIONS = {".yaml", ".yml", ".json"}


def read_dataset(path: Path) -> pd.DataFrame:
    """Read a tabular dataset, auto-detecting format by extension.

    Args:
        path: Path to a ``.csv``, ``.xlsx`` or ``.json`` (list of records) file.

    Returns:
        Dataset with one column per variable. Empty cells are missing.

    Raises:
        UnsupportedFormatError: If file extension is not recognized.
        FileNotFoundError: If file does not exist.
    """
    path = Path(path)
    ext = path.suffix.lower()

    # Check extension first so unsupported formats fail fast
    if ext not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(ext, sorted(SUPPORTED_EXTENSIONS))
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    if ext == ".csv":
        dataset = pd.read_csv(path, encoding="utf-8-sig")
    elif ext == ".xlsx":
        dataset = pd.read_excel(path, engine="openpyxl")
    else:
        dataset = _read_json(path)

    logger.info("read_dataset", path=str(path), n_rows=len(dataset), n_columns=dataset.shape[1])
    return dataset


def _read_json(path: Path) -> pd.DataFrame:
    """Read a JSON list of row objects.

    Args:
        path: Path to .json file.

    Returns:
        Dataset built from the records.
    """
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise UnsupportedFormatError("json (non-list)", ["json list of records"])
    return pd.DataFrame.from_records(records)


def load_labels(path: Path) -> DatasetLabels:
    """Load variable and value labels from a YAML or JSON sidecar file.

    Expected layout::

        variable_labels:
          attn_check: "Select 'agree' for this item"
        value_labels:
          attn_check: {1: Disagree, 2: Neutral, 3: Agree}

    Raises:
        UnsupportedFormatError: If file extension is not recognized.
        FileNotFoundError: If file does not exist.
        ConfigValidationError: If the content does not match the layout.
    """
    path = Path(path)
    if path.suffix.lower() not in LABEL_EXTENSIONS:
        raise UnsupportedFormatError(path.suffix.lower(), sorted(LABEL_EXTENSIONS))
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        labels = DatasetLabels.model_validate(raw)
    except (yaml.YAMLError, ValidationError) as exc:
        raise ConfigValidationError(f"Invalid label file {path}: {exc}", field=str(path)) from exc

    logger.info(
        "load_labels",
        path=str(path),
        n_variable_labels=len(labels.variable_labels),
        n_value_label_sets=len(labels.value_labels),
    )
    return labels
