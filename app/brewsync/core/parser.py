"""Manifest parser.

This module reads Brewfile-style manifests into a PackageSet. Parsing is
line-oriented and lenient: lines that do not declare a known category are
dropped. Only I/O failures raise.

A comment directly above a declaration becomes that record's description.
Blank lines between the comment and the declaration are allowed; any other
line in between discards the comment. This is modeled as a two-state
scanner folded over the lines (see :func:`scan_line`).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from brewsync.core.categories import CATEGORY_SPECS
from brewsync.models.package import PackageRecord, PackageSet, is_extension_header

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """Base exception for manifest-related errors."""


class ManifestReadError(ManifestError):
    """Raised when a manifest file cannot be read."""


class ManifestNotFoundError(ManifestReadError):
    """Raised when a manifest file does not exist."""


@dataclass(frozen=True, slots=True)
class Idle:
    """Scanner state: no comment is waiting for a declaration."""


@dataclass(frozen=True, slots=True)
class PendingDescription:
    """Scanner state: a comment may become the next record's description.

    Attributes:
        text: Comment text with the leading '#' and whitespace removed.
    """

    text: str


ScannerState = Idle | PendingDescription

IDLE = Idle()


def parse_line(line: str) -> PackageRecord | None:
    """Parse one stripped, non-comment line.

    Categories are tried in table order and the first match wins.

    Returns:
        The declared record, or None if the line declares nothing known.
    """
    for spec in CATEGORY_SPECS.values():
        record = spec.match(line)
        if record is not None:
            return record
    return None


def scan_line(state: ScannerState, raw_line: str) -> tuple[ScannerState, PackageRecord | None]:
    """Advance the scanner by one line.

    Args:
        state: Current scanner state.
        raw_line: The next manifest line, unstripped.

    Returns:
        Tuple of (next state, record declared on this line or None).
    """
    line = raw_line.strip()

    if not line:
        return state, None

    if line.startswith("#"):
        text = line[1:].strip()
        if not text or is_extension_header(text):
            return IDLE, None
        return PendingDescription(text), None

    record = parse_line(line)
    if record is None:
        if isinstance(state, PendingDescription):
            logger.debug("Discarding comment %r before unparsed line %r", state.text, line)
        else:
            logger.debug("Skipping unrecognized manifest line: %r", line)
        return IDLE, None

    if isinstance(state, PendingDescription):
        record = PackageRecord(
            category=record.category,
            name=record.name,
            display_name=record.display_name,
            options=record.options,
            description=state.text,
        )
    return IDLE, record


def iter_records(lines: Iterable[str]) -> Iterator[PackageRecord]:
    """Yield the records declared by a sequence of manifest lines."""
    state: ScannerState = IDLE
    for raw_line in lines:
        state, record = scan_line(state, raw_line)
        if record is not None:
            yield record


def parse_string(content: str) -> PackageSet:
    """Parse manifest content from a string.

    Args:
        content: Manifest text.

    Returns:
        PackageSet of the declared records. A record declared twice keeps
        its last declaration.
    """
    return PackageSet(iter_records(content.splitlines()))


def parse_file(path: Path) -> PackageSet:
    """Parse a manifest file.

    Args:
        path: Path to the manifest.

    Returns:
        PackageSet of the declared records.

    Raises:
        ManifestNotFoundError: If the file does not exist.
        ManifestReadError: If the file cannot be read or decoded.
    """
    try:
        with open(path, encoding="utf-8") as f:
            packages = PackageSet(iter_records(f))
    except FileNotFoundError as e:
        raise ManifestNotFoundError(f"Manifest not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(f"Failed to read manifest {path}: {e}") from e

    logger.debug("Parsed %d packages from %s", len(packages), path)
    return packages
