"""Bottle Wrangler - prebuilt bottle resolution for package build pipelines.

This package resolves the formulas a platform needs to precompiled bottles,
reusing local copies, downloading hosted ones and reporting the rest for a
fallback build.
"""

__version__ = "0.1.0"

from bottle_wrangler.models import (
    BottleRecord,
    Formula,
    ResolutionOutcome,
    ResolutionState,
)

__all__ = [
    "__version__",
    "BottleRecord",
    "Formula",
    "ResolutionOutcome",
    "ResolutionState",
]
