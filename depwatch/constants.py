"""depwatch constants and enumerations."""

from enum import Enum

# Configuration lives next to go.mod
CONFIG_DIR = ".depwatch"
CONFIG_FILE = "config.yaml"
LOG_FILE = "depwatch.log"

# Debounce
DEFAULT_QUIET_WINDOW_MS = 200
DEFAULT_POLL_INTERVAL_SECONDS = 0.25

# Toolchain
DEFAULT_GO_BINARY = "go"
DEFAULT_TEST_COMMAND = ("go", "test")

# Editor swap files, backups and atomic-save temporaries. 4913 is the scratch
# file vim creates to check directory writability.
DEFAULT_IGNORE_PATTERNS = (".*", "*~", "*.swp", "*.swx", "*.tmp", "4913")


class BatchOutcome(Enum):
    """Terminal state of one change batch."""

    NO_TESTS = "no_tests"
    PASSED = "passed"
    FAILED = "failed"
