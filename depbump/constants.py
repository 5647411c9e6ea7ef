"""
Centralized constants for depbump.

This module defines immutable configuration values used across depbump,
including configuration file names, manifest names and logging formats.
All values are intended to be treated as read-only.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

#: Dedicated configuration file name.
CONFIG_FILE_NAME: Final[str] = "depbump.toml"

#: Table name used in both ``depbump.toml`` and ``pyproject.toml``.
CONFIG_SECTION: Final[str] = "depbump"

#: Default package manager when neither config nor CLI name one.
DEFAULT_PACKAGE_MANAGER: Final[str] = "npm_and_yarn"

#: Whether dependencies are treated as library dependencies by default.
DEFAULT_LIBRARY: Final[bool] = False

# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

#: Manifest names understood by the file mutator, per package manager.
MANIFEST_FILE_PATTERNS: Final[Mapping[str, Sequence[str]]] = {
    "npm_and_yarn": ("package.json",),
    "composer": ("composer.json",),
    "cargo": ("Cargo.toml",),
    "dep": ("Gopkg.toml",),
    "pip": ("requirements*.txt", "Pipfile"),
    "terraform": ("*.tf",),
    "hex": ("mix.exs",),
    "maven": ("pom.xml",),
}

#: Maximum allowed file size (in bytes) when reading manifests.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
