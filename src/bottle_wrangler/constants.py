"""Default locations and tool constants for bottle_wrangler."""

from pathlib import Path

# Tool version substituted for formulas whose version is the llvm placeholder
CURRENT_LLVM_VERSION = "6.0.0"
LLVM_VERSION_PLACEHOLDER = "llvm_version"

DEFAULT_FORMULA_DIR = Path("./provision/formula")
DEFAULT_BOTTLE_MANIFEST = Path("./provision/hosted-bottle-list.csv")
DEFAULT_PROVISION_DIR = Path("./provision")
DEFAULT_DEST_DIR = Path("./build")
DEFAULT_PLATFORM_COMMAND = "python3 ./get_platform.py --platform"
DEFAULT_FORMULA_TYPES = ("tool", "dep")
DEFAULT_HOST_KEY = "osquery"

DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_TIMEOUT_SECONDS = 300

DARWIN_DISTROS = ("sierra", "high_sierra", "mojave")
LINUX_DISTROS = ("x86_64_linux",)
ALL_DISTROS = DARWIN_DISTROS + LINUX_DISTROS

BUILD_ONLY_TAG = ":build"
HOST_ROW_MARKER = "HOST"
COMMENT_MARKER = "#"
