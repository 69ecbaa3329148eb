"""Shared helpers for CLI commands."""
from __future__ import annotations

from pathlib import Path

import pandas as pd
import typer

from screenflow.core.exceptions import ScreenFlowError


def fail(message: str) -> typer.Exit:
    """Echo an error to stderr and return the exit to raise."""
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(code=1)


def load_dataset(path: Path) -> pd.DataFrame:
    from screenflow.io.readers import read_dataset  # noqa: PLC0415

    try:
        return read_dataset(path)
    except (FileNotFoundError, ScreenFlowError) as exc:
        raise fail(str(exc)) from exc
