from pathlib import Path

import pytest
from aioresponses import aioresponses
from typer.testing import CliRunner

from bottle_wrangler.cli import app

runner = CliRunner()

BOTTLE_HOST = "https://bottles.example.com/bottles"
ZLIB_LINUX = "zlib-1.2.11.x86_64_linux.bottle.tar.gz"
OPENSSL_LINUX = "openssl-1.0.2o_2.x86_64_linux.bottle.1.tar.gz"


@pytest.fixture
def fetch_args(formula_dir: Path, bottle_manifest: Path, fixtures_dir: Path, dest_dir):
    """Return fetch arguments pointing at the fixture inputs."""
    return [
        "fetch",
        "--formula-dir",
        str(formula_dir),
        "--bottles",
        str(bottle_manifest),
        "--provision-dir",
        str(fixtures_dir),
        "--platform",
        "linux",
        "--dest",
        str(dest_dir),
    ]


def test_fetch_downloads_and_reports_missing(fetch_args, dest_dir: Path):
    """Test a full run: downloads hosted bottles, hands the rest to the fallback."""
    with aioresponses() as mock:
        mock.get(f"{BOTTLE_HOST}/{ZLIB_LINUX}", body=b"zlib bottle")
        mock.get(f"{BOTTLE_HOST}/{OPENSSL_LINUX}", body=b"openssl bottle")

        result = runner.invoke(app, fetch_args)

    assert result.exit_code == 0
    assert "platform:linux" in result.stdout
    assert "Building bottle llvm" in result.stdout
    assert "Building bottle zlib" not in result.stdout
    assert (dest_dir / ZLIB_LINUX).read_bytes() == b"zlib bottle"
    assert (dest_dir / OPENSSL_LINUX).read_bytes() == b"openssl bottle"


def test_fetch_uses_cache(fetch_args, dest_dir: Path):
    """Test that cached bottles are not downloaded again."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"cached")
    (dest_dir / OPENSSL_LINUX).write_bytes(b"cached")

    with aioresponses() as mock:
        result = runner.invoke(app, fetch_args)
        assert not mock.requests

    assert result.exit_code == 0
    assert "2 cached" in result.stdout


def test_fetch_fail_on_missing(fetch_args, dest_dir: Path):
    """Test the exit code when bottles are missing and --fail-on-missing is set."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"cached")
    (dest_dir / OPENSSL_LINUX).write_bytes(b"cached")

    result = runner.invoke(app, fetch_args + ["--fail-on-missing"])

    assert result.exit_code == 2


def test_fetch_writes_report(fetch_args, dest_dir: Path, tmp_path: Path):
    """Test that --report writes a Markdown report."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"cached")
    report = tmp_path / "report.md"

    with aioresponses() as mock:
        mock.get(f"{BOTTLE_HOST}/{OPENSSL_LINUX}", body=b"openssl bottle")
        result = runner.invoke(app, fetch_args + ["--report", str(report)])

    assert result.exit_code == 0
    content = report.read_text()
    assert "| zlib | 1.2.11 | cached |" in content
    assert "| nonexistent | - | unknown | - |" in content


def test_fetch_runs_platform_helper(mocker, fetch_args, dest_dir: Path):
    """Test that the platform comes from the helper when not given."""
    get_platform = mocker.patch("bottle_wrangler.cli.get_platform", return_value="linux")
    args = [a for a in fetch_args if a not in ("--platform", "linux")]

    with aioresponses():
        result = runner.invoke(app, args + ["--platform-cmd", "echo linux"])

    assert result.exit_code == 0
    get_platform.assert_called_once_with("echo linux")


def test_fetch_missing_formula_dir(fetch_args, tmp_path: Path):
    """Test that an unreadable formula directory aborts the run."""
    args = list(fetch_args)
    args[args.index("--formula-dir") + 1] = str(tmp_path / "nope")

    result = runner.invoke(app, args)

    assert result.exit_code == 1


def test_fetch_missing_platform_manifest(fetch_args):
    """Test that a platform without a manifest aborts the run."""
    args = list(fetch_args)
    args[args.index("--platform") + 1] = "freebsd"

    result = runner.invoke(app, args)

    assert result.exit_code == 1


def test_manifest_prints_rows(formula_dir: Path):
    """Test that the manifest command prints one row per declared bottle."""
    result = runner.invoke(app, ["manifest", "--formula-dir", str(formula_dir)])

    assert result.exit_code == 0
    assert f"osquery,{ZLIB_LINUX},{'2' * 64}" in result.stdout
    assert "_MISSING" not in result.stdout


def test_manifest_flags_unlisted(formula_dir: Path):
    """Test that rows absent from the bucket listing are flagged."""
    listing = f"<ListBucketResult><Key>bottles/{ZLIB_LINUX}</Key></ListBucketResult>"
    with aioresponses() as mock:
        mock.get("https://osquery-packages.s3.amazonaws.com", body=listing)

        result = runner.invoke(
            app,
            [
                "manifest",
                "--formula-dir",
                str(formula_dir),
                "--listing",
                "https://osquery-packages.s3.amazonaws.com/bottles",
            ],
        )

    assert result.exit_code == 1
    assert result.stdout.count("_MISSING,--^^^^--") == 3


def test_cache_command_show(dest_dir: Path):
    """Test the cache show command."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"1234")

    result = runner.invoke(app, ["cache", "show", "--dest", str(dest_dir)])

    assert result.exit_code == 0
    assert "Cache Location:" in result.stdout
    assert "Bottles: 1" in result.stdout


def test_cache_command_clear(dest_dir: Path):
    """Test the cache clear command."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"1234")

    result = runner.invoke(app, ["cache", "clear", "--dest", str(dest_dir)])

    assert result.exit_code == 0
    assert "Cache cleared" in result.stdout
    assert not (dest_dir / ZLIB_LINUX).exists()


def test_cache_command_unknown_action(dest_dir: Path):
    """Test that unknown cache actions are rejected."""
    result = runner.invoke(app, ["cache", "purge", "--dest", str(dest_dir)])

    assert result.exit_code == 1


def test_cache_command_clear_one_formula(dest_dir: Path, formula_dir: Path):
    """Test that clearing one formula keeps bottles of similarly named ones."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"1234")
    (dest_dir / "zlib-ng-2.0.7.x86_64_linux.bottle.tar.gz").write_bytes(b"1234")

    result = runner.invoke(
        app,
        ["cache", "clear", "zlib", "--dest", str(dest_dir), "--formula-dir", str(formula_dir)],
    )

    assert result.exit_code == 0
    assert "Cleared 1 bottles for:" in result.stdout
    assert not (dest_dir / ZLIB_LINUX).exists()
    assert (dest_dir / "zlib-ng-2.0.7.x86_64_linux.bottle.tar.gz").exists()


def test_cache_command_clear_unknown_formula(dest_dir: Path, formula_dir: Path):
    """Test that clearing a formula with no definition is rejected."""
    (dest_dir / ZLIB_LINUX).write_bytes(b"1234")

    result = runner.invoke(
        app,
        ["cache", "clear", "ghost", "--dest", str(dest_dir), "--formula-dir", str(formula_dir)],
    )

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert (dest_dir / ZLIB_LINUX).exists()


def test_fetch_dest_is_a_file(fetch_args, tmp_path: Path):
    """Test that a destination that cannot be a directory aborts cleanly."""
    not_a_dir = tmp_path / "build.tar"
    not_a_dir.write_text("occupied")
    args = list(fetch_args)
    args[args.index("--dest") + 1] = str(not_a_dir)

    result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "platform:" not in result.stdout
