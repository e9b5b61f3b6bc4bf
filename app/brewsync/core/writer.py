"""Manifest writer.

This module renders a PackageSet as deterministic manifest text and
writes it to disk. Output is grouped by category in canonical order and
sorted by name within each group, so the same set always produces the
same bytes.
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from tempfile import NamedTemporaryFile

from brewsync.core.categories import CATEGORY_SPECS
from brewsync.core.parser import ManifestError
from brewsync.models.package import EXTENSION_HEADER, PackageRecord

logger = logging.getLogger(__name__)


class ManifestWriteError(ManifestError):
    """Raised when a manifest file cannot be written."""


def format_packages(packages: Iterable[PackageRecord]) -> str:
    """Format packages as manifest text.

    Args:
        packages: Records to render (a PackageSet or any iterable).

    Returns:
        Manifest text ending with a newline, or "" if there is nothing
        to write.
    """
    by_category: dict[object, list[PackageRecord]] = {}
    for record in packages:
        by_category.setdefault(record.category, []).append(record)

    sections: list[str] = []
    for category, spec in CATEGORY_SPECS.items():
        records = by_category.get(category)
        if not records:
            continue

        lines: list[str] = []
        if spec.is_extension:
            lines.append(f"# {EXTENSION_HEADER.format(category=category.value)}")
        for record in sorted(records, key=lambda r: r.name):
            if record.description:
                lines.append(f"# {record.description}")
            lines.append(spec.format(record))
        sections.append("\n".join(lines))

    if not sections:
        return ""
    return "\n\n".join(sections) + "\n"


def write_manifest(path: Path, packages: Iterable[PackageRecord]) -> Path:
    """Write packages to a manifest file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        path: Destination path. Parent directories are created.
        packages: Records to write.

    Returns:
        Path where the manifest was written.

    Raises:
        ManifestWriteError: If the file cannot be written.
    """
    content = format_packages(packages)

    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content)
        os.replace(str(tmp_path), str(path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ManifestWriteError(f"Failed to write manifest {path}: {e}") from e

    logger.debug("Wrote manifest %s", path)
    return path


def append_manifest(path: Path, packages: Iterable[PackageRecord]) -> Path:
    """Append packages to an existing manifest.

    A missing file is treated as empty. Existing content is kept as is,
    with a trailing newline added if needed.

    Raises:
        ManifestWriteError: If the file cannot be read or written.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        content = ""
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestWriteError(f"Failed to read manifest {path}: {e}") from e

    if content and not content.endswith("\n"):
        content += "\n"
    content += format_packages(packages)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ManifestWriteError(f"Failed to write manifest {path}: {e}") from e
    return path
