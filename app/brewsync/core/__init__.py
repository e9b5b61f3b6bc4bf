"""Core manifest, diff and exclusion logic.

These are the only functions the CLI and any installer layer call into.
"""

from brewsync.core.diff import DiffResult, diff, diff_by_type
from brewsync.core.ignore import (
    IgnoreFileError,
    IgnoreStore,
    InvalidPackageIdError,
    load_ignore_file,
    save_ignore_file,
)
from brewsync.core.parser import (
    ManifestError,
    ManifestNotFoundError,
    ManifestReadError,
    parse_file,
    parse_string,
)
from brewsync.core.writer import (
    ManifestWriteError,
    append_manifest,
    format_packages,
    write_manifest,
)

__all__ = [
    "DiffResult",
    "IgnoreFileError",
    "IgnoreStore",
    "InvalidPackageIdError",
    "ManifestError",
    "ManifestNotFoundError",
    "ManifestReadError",
    "ManifestWriteError",
    "append_manifest",
    "diff",
    "diff_by_type",
    "format_packages",
    "load_ignore_file",
    "parse_file",
    "parse_string",
    "save_ignore_file",
    "write_manifest",
]
