"""ScreenFlow: deterministic, auditable participant screening.

Compiles declarative screening configuration into an ordered rule table,
applies it to a survey dataset, and derives CONSORT-style audit tables.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("screenflow")
except PackageNotFoundError:
    # Fallback for source-only usage before installation.
    __version__ = "0.3.0"
__author__ = "ScreenFlow contributors"
__license__ = "Apache-2.0"
