"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from bottle_wrangler.config import WranglerConfig
from bottle_wrangler.index import AvailabilityIndex, FormulaIndex
from bottle_wrangler.models import BottleRecord, Formula
from bottle_wrangler.scanners import BottleManifestScanner, FormulaScanner

FIXTURES = Path(__file__).parent / "fixtures"

BOTTLE_HOST = "https://bottles.example.com/bottles"
MIRROR_HOST = "https://mirror.example.com/bottles"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the shared fixtures directory."""
    return FIXTURES


@pytest.fixture
def formula_dir() -> Path:
    """Return the path to the fixture formula definitions."""
    return FIXTURES / "formula"


@pytest.fixture
def bottle_manifest() -> Path:
    """Return the path to the fixture hosted bottle manifest."""
    return FIXTURES / "hosted-bottle-list.csv"


@pytest.fixture
def platform_manifest() -> Path:
    """Return the path to the fixture linux platform manifest."""
    return FIXTURES / "linux-formulas.csv"


@pytest.fixture
def zlib() -> Formula:
    """Return a plain formula with no revision or rebuild."""
    return Formula(
        name="zlib",
        version="1.2.11",
        bottle_hashes=(("x86_64_linux", "2" * 64),),
    )


@pytest.fixture
def formula_index(formula_dir: Path) -> FormulaIndex:
    """Return the formula index loaded from the fixture definitions."""
    return FormulaScanner(formula_dir).scan_index()


@pytest.fixture
def availability(bottle_manifest: Path) -> AvailabilityIndex:
    """Return the availability index loaded from the fixture manifest."""
    return BottleManifestScanner(bottle_manifest).scan()


@pytest.fixture
def zlib_record() -> BottleRecord:
    """Return the hosted record for the zlib linux bottle."""
    return BottleRecord(
        host="osquery",
        filename="zlib-1.2.11.x86_64_linux.bottle.tar.gz",
        hash="2" * 64,
    )


@pytest.fixture
def dest_dir(tmp_path: Path) -> Path:
    """Return an empty destination directory."""
    dest = tmp_path / "build"
    dest.mkdir()
    return dest


@pytest.fixture
def config(
    formula_index: FormulaIndex, availability: AvailabilityIndex, dest_dir: Path
) -> WranglerConfig:
    """Return a linux run configuration over the fixture inputs."""
    return WranglerConfig(
        formulas=formula_index,
        availability=availability,
        dest_dir=dest_dir,
        distros=("x86_64_linux",),
    )
