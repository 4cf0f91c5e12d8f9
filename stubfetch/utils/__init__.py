"""
Utility helpers for stubfetch.

This package provides the reusable pieces the resolver and CLI are built on:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem helpers (atomic writes, merge, cleanup)
- Async HTTP client

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

from stubfetch.utils.filesystem import (
    atomic_binary_writer,
    ensure_directory,
    merge_tree,
    remove_tree,
    safe_read_file,
    validate_path,
    write_text_atomic,
)
from stubfetch.utils.logger import (
    TreeLogger,
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)
from stubfetch.utils.console import (
    get_raw_console,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from stubfetch.utils.http import HTTPClient

__all__ = [
    # Console
    "print_error",
    "print_json",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    # Logging
    "TreeLogger",
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "atomic_binary_writer",
    "ensure_directory",
    "merge_tree",
    "remove_tree",
    "safe_read_file",
    "validate_path",
    "write_text_atomic",
    # HTTP
    "HTTPClient",
]
