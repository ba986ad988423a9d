"""Tests for the build fallback."""

import subprocess
from pathlib import Path

from bottle_wrangler.builder import BuildFallback
from bottle_wrangler.models import Formula


def test_without_brew_only_reports(mocker, zlib: Formula):
    """Test that no command runs when brew is not configured."""
    run = mocker.patch("bottle_wrangler.builder.subprocess.run")

    assert not BuildFallback().build(zlib)
    run.assert_not_called()


def test_build_runs_brew_bottle(mocker, zlib: Formula):
    """Test the brew command line for a missing bottle."""
    run = mocker.patch("bottle_wrangler.builder.subprocess.run")

    assert BuildFallback(Path("/usr/local/edarr/bin/brew")).build(zlib)
    run.assert_called_once_with(
        ["/usr/local/edarr/bin/brew", "bottle", "--skip-relocation", "zlib"],
        check=True,
    )


def test_build_failure(mocker, zlib: Formula):
    """Test that a failing build is reported as False."""
    mocker.patch(
        "bottle_wrangler.builder.subprocess.run",
        side_effect=subprocess.CalledProcessError(1, ["brew"]),
    )

    assert not BuildFallback(Path("brew")).build(zlib)
