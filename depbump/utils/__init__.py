"""
Utility helpers for depbump.

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Version change classification

Only symbols listed in ``__all__`` are part of the public API.
"""

from __future__ import annotations

from depbump.utils.console import (
    colorize_update_type,
    confirm,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from depbump.utils.filesystem import (
    create_backup,
    restore_backup,
    safe_read_file,
    safe_write_file,
)
from depbump.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)
from depbump.utils.version_utils import get_update_type

__all__ = [
    # Console
    "colorize_update_type",
    "confirm",
    "get_raw_console",
    "print_error",
    "print_info",
    "print_success",
    "print_table",
    "print_warning",
    "reconfigure_console",
    # Logging
    "disable_logging",
    "get_logger",
    "is_logging_configured",
    "level_for_verbosity",
    "setup_logging",
    # Filesystem
    "create_backup",
    "restore_backup",
    "safe_read_file",
    "safe_write_file",
    # Versions
    "get_update_type",
]
