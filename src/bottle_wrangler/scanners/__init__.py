"""Scanners for the static inputs of a resolution run.

This module provides scanners for formula definition directories, the
hosted bottle manifest and per-platform formula manifests.
"""

from bottle_wrangler.scanners.base import BaseScanner
from bottle_wrangler.scanners.bottles import BottleManifestScanner, RowKind
from bottle_wrangler.scanners.formula import FormulaScanner, LineKind
from bottle_wrangler.scanners.platform import PlatformManifestScanner

__all__ = [
    "BaseScanner",
    "BottleManifestScanner",
    "FormulaScanner",
    "LineKind",
    "PlatformManifestScanner",
    "RowKind",
]
