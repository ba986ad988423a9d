"""Tests for the FormulaScanner."""

from pathlib import Path

import pytest

from bottle_wrangler.scanners.formula import FormulaScanner, LineKind, parse_line


class TestParseLine:
    """Test suite for line classification."""

    def test_recognized_tokens(self):
        """Test that leading tokens map to their line kinds."""
        assert parse_line('  version "1.0"\n').kind is LineKind.VERSION
        assert parse_line("  end").kind is LineKind.END
        assert parse_line('  sha256 "abc" => :sierra').kind is LineKind.SHA256

    def test_unrecognized_and_blank_lines(self):
        """Test that other lines map to IGNORED."""
        assert parse_line('  homepage "https://zlib.net/"').kind is LineKind.IGNORED
        assert parse_line("").kind is LineKind.IGNORED
        assert parse_line("   \n").kind is LineKind.IGNORED

    def test_value_is_rest_of_line(self):
        """Test that the value is everything after the leading token."""
        scanned = parse_line('  depends_on "cmake" => :build')
        assert scanned.value == '"cmake" => :build'


class TestFormulaScanner:
    """Test suite for FormulaScanner over the fixture directory."""

    @pytest.fixture
    def formulas(self, formula_dir: Path):
        """Return the fixture formulas keyed by name."""
        return {f.name: f for f in FormulaScanner(formula_dir).scan()}

    def test_scans_only_rb_files_in_order(self, formula_dir: Path):
        """Test that only .rb files are loaded, sorted by filename."""
        names = [f.name for f in FormulaScanner(formula_dir).scan()]
        assert names == ["llvm", "mystery", "openssl", "zlib"]

    def test_version_inferred_from_url(self, formulas):
        """Test that a missing version is inferred from the url."""
        zlib = formulas["zlib"]
        assert zlib.url == "https://zlib.net/zlib-1.2.11.tar.gz"
        assert zlib.version == "1.2.11"

    def test_first_version_wins(self, formulas):
        """Test that a later version line does not override the first."""
        assert formulas["openssl"].version == "1.0.2o"

    def test_revision_and_rebuild(self, formulas):
        """Test that revision and rebuild are captured."""
        openssl = formulas["openssl"]
        assert openssl.revision == "2"
        assert openssl.rebuild == "1"
        assert formulas["zlib"].revision is None
        assert formulas["zlib"].rebuild is None

    def test_build_dependencies_excluded(self, formulas):
        """Test that only build-only dependencies are dropped."""
        assert formulas["openssl"].dependencies == ("zlib", "perl")
        assert formulas["zlib"].dependencies == ()

    def test_bottle_hashes(self, formulas):
        """Test that bottle hashes are parsed and malformed ones skipped."""
        assert formulas["zlib"].bottle_hashes == (
            ("sierra", "1" * 64),
            ("x86_64_linux", "2" * 64),
        )
        assert formulas["openssl"].bottle_hashes == (("x86_64_linux", "3" * 64),)

    def test_description(self, formulas):
        """Test that the description is unquoted."""
        assert formulas["zlib"].description == (
            "General-purpose lossless data-compression library"
        )

    def test_placeholder_version_kept(self, formulas):
        """Test that placeholder versions are kept for later substitution."""
        assert formulas["llvm"].version == "llvm_version"

    def test_formula_without_version(self, formulas):
        """Test that a formula with no version or url is kept with version None."""
        assert formulas["mystery"].version is None

    def test_warns_about_formula_without_version(self, formula_dir: Path, caplog):
        """Test that a formula with no usable version is flagged at load."""
        FormulaScanner(formula_dir).scan()
        assert "mystery has no version" in caplog.text

    def test_scanning_stops_at_first_end(self, tmp_path: Path):
        """Test that lines after the first end are not scanned."""
        (tmp_path / "late.rb").write_text(
            'class Late < Formula\n'
            '  version "1.0"\n'
            '  bottle do\n'
            '    sha256 "aaa" => :sierra\n'
            '  end\n'
            '  depends_on "zlib"\n'
            '  revision 3\n'
            'end\n'
        )
        (formula,) = FormulaScanner(tmp_path).scan()
        assert formula.dependencies == ()
        assert formula.revision is None
        assert formula.bottle_hashes == (("sierra", "aaa"),)

    def test_repeated_version_in_branches(self, tmp_path: Path):
        """Test first-occurrence-wins for version declared twice."""
        (tmp_path / "branchy.rb").write_text(
            'class Branchy < Formula\n'
            '  if OS.mac?\n'
            '    version "1.0"\n'
            '  else\n'
            '    version "2.0"\n'
        )
        (formula,) = FormulaScanner(tmp_path).scan()
        assert formula.version == "1.0"

    def test_dependency_tags(self, tmp_path: Path):
        """Test that untagged and non-build tags are kept."""
        (tmp_path / "deps.rb").write_text(
            '  depends_on "a"\n'
            '  depends_on "b" => :build\n'
            '  depends_on "c" => :optional\n'
            '  depends_on "d" => [:build, :test]\n'
        )
        (formula,) = FormulaScanner(tmp_path).scan()
        assert formula.dependencies == ("a", "c", "d")

    def test_missing_directory(self, tmp_path: Path):
        """Test that a missing directory is fatal."""
        with pytest.raises(FileNotFoundError):
            FormulaScanner(tmp_path / "nope").scan()

    def test_not_a_directory(self, bottle_manifest: Path):
        """Test that a file path is rejected."""
        with pytest.raises(NotADirectoryError):
            FormulaScanner(bottle_manifest).scan()

    def test_requires_source_path(self):
        """Test that scanning without a path raises ValueError."""
        with pytest.raises(ValueError):
            FormulaScanner().scan()

    def test_scan_index(self, formula_dir: Path):
        """Test that scan_index wraps the formulas in an index."""
        index = FormulaScanner(formula_dir).scan_index()
        assert "zlib" in index
        assert len(index) == 4
