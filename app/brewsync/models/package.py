"""Package models for manifest parsing and diffing.

This module defines the core data structures for representing
declared packages from the supported sources (Homebrew taps, formulae,
casks, Mac App Store apps, editor extensions and Go tools).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum

# Separator between category and name in an identity key ("cask:raycast")
KEY_SEPARATOR = ":"

# Comment text the writer puts above each extension category group
EXTENSION_HEADER = "{category} (brewsync extension)"
_EXTENSION_HEADER_PATTERN = re.compile(r"^(\w+) \(brewsync extension\)$")

# Option keys are bare identifiers in a declaration
_OPTION_KEY_PATTERN = re.compile(r"\w+")


class PackageCategory(str, Enum):
    """Closed set of package categories a manifest can declare.

    The declaration order is the canonical order used when writing
    manifests: taps first, then native Homebrew categories, then store
    apps, then editor extensions and other brewsync extensions.
    """

    TAP = "tap"
    BREW = "brew"
    CASK = "cask"
    MAS = "mas"
    VSCODE = "vscode"
    CURSOR = "cursor"
    ANTIGRAVITY = "antigravity"
    GO = "go"

    @property
    def is_extension(self) -> bool:
        """Check if this category is not understood by `brew bundle` itself."""
        return self in _EXTENSION_CATEGORIES

    @classmethod
    def parse(cls, value: str) -> PackageCategory:
        """Parse a category token case-insensitively.

        Args:
            value: Category token such as "brew" or "Cask".

        Returns:
            The matching PackageCategory.

        Raises:
            ValueError: If the token is not a known category.
        """
        token = value.strip().lower()
        for category in cls:
            if category.value == token:
                return category
        valid = ", ".join(c.value for c in cls)
        msg = f"Unknown package category '{value}' (valid: {valid})"
        raise ValueError(msg)


_EXTENSION_CATEGORIES = frozenset(
    {PackageCategory.CURSOR, PackageCategory.ANTIGRAVITY, PackageCategory.GO}
)


def is_extension_header(comment: str) -> bool:
    """Check if a comment's text is a writer-generated extension header."""
    match = _EXTENSION_HEADER_PATTERN.match(comment)
    return match is not None and match.group(1) in {c.value for c in PackageCategory}


class InvalidPackageIdError(ValueError):
    """Raised when a package identifier is not of the form 'category:name'."""


def make_key(category: PackageCategory | str, name: str) -> str:
    """Build the identity key for a category/name pair."""
    token = category.value if isinstance(category, PackageCategory) else category
    return f"{token}{KEY_SEPARATOR}{name}"


def split_key(package_id: str) -> tuple[str, str]:
    """Split a 'category:name' identifier into its two parts.

    The category part is lower-cased but not validated against the
    known categories, so callers can store entries for categories a
    newer version may add.

    Args:
        package_id: Identifier such as "cask:bluestacks".

    Returns:
        Tuple of (category, name).

    Raises:
        InvalidPackageIdError: If the identifier does not contain exactly
            one separator or either side is empty.
    """
    parts = package_id.split(KEY_SEPARATOR)
    if len(parts) != 2 or not parts[0].strip() or not parts[1].strip():
        msg = f"Invalid package ID format: '{package_id}' (expected category:name)"
        raise InvalidPackageIdError(msg)
    return parts[0].strip().lower(), parts[1].strip()


@dataclass(frozen=True, slots=True)
class PackageRecord:
    """A single package declared in (or observed for) a manifest.

    Two records describe the same package iff their category and name
    match. Options, display name and description are carried along but
    never take part in identity.

    Attributes:
        category: Package category (tap, brew, cask, ...).
        name: Primary identifier within the category.
        display_name: Human label when ``name`` is machine-oriented
            (e.g. a numeric App Store id).
        options: Declaration options such as ``link -> "true"``.
        description: Single-line description, written as a comment.
    """

    category: PackageCategory
    name: str
    display_name: str | None = field(default=None)
    options: Mapping[str, str] = field(default_factory=dict)
    description: str = field(default="")

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not isinstance(self.category, PackageCategory):
            object.__setattr__(self, "category", PackageCategory.parse(str(self.category)))
        if not self.name:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if '"' in self.name or "\n" in self.name or "\r" in self.name:
            msg = f"Package name cannot contain quotes or line breaks: {self.name!r}"
            raise ValueError(msg)
        description = (self.description or "").strip()
        if "\n" in description or "\r" in description:
            msg = "Package description must be a single line"
            raise ValueError(msg)
        if is_extension_header(description):
            msg = f"Package description would be read as a section header: {description!r}"
            raise ValueError(msg)
        for key, value in self.options.items():
            if not _OPTION_KEY_PATTERN.fullmatch(key):
                msg = f"Option key must be a bare identifier: {key!r}"
                raise ValueError(msg)
            if "\n" in value or "\r" in value:
                msg = f"Option {key!r} value cannot contain line breaks"
                raise ValueError(msg)
        object.__setattr__(self, "description", description)
        object.__setattr__(self, "options", dict(self.options))

    def __hash__(self) -> int:
        return hash(self.key)

    @property
    def key(self) -> str:
        """Identity key in 'category:name' form."""
        return make_key(self.category, self.name)

    @property
    def label(self) -> str:
        """Human-readable representation, including the display name if set."""
        if self.display_name:
            return f"{self.name} ({self.display_name})"
        return self.name

    def with_option(self, key: str, value: str) -> PackageRecord:
        """Return a copy of this record with an extra option set."""
        return PackageRecord(
            category=self.category,
            name=self.name,
            display_name=self.display_name,
            options={**self.options, key: value},
            description=self.description,
        )


class PackageSet:
    """Collection of package records keyed by identity.

    Records inserted later replace earlier ones with the same identity
    key, so the newer description and options win. Iteration follows
    insertion order; set operations never depend on it.
    """

    __slots__ = ("_records",)

    def __init__(self, records: Iterable[PackageRecord] = ()) -> None:
        self._records: dict[str, PackageRecord] = {}
        for record in records:
            self._records[record.key] = record

    def __iter__(self) -> Iterator[PackageRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, PackageRecord):
            return item.key in self._records
        if isinstance(item, str):
            return item in self._records
        return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageSet):
            return NotImplemented
        return self._records == other._records

    def __repr__(self) -> str:
        return f"PackageSet({sorted(self._records)!r})"

    def get(self, key: str) -> PackageRecord | None:
        """Look up a record by its identity key."""
        return self._records.get(key)

    def keys(self) -> set[str]:
        """Identity keys of all records."""
        return set(self._records)

    def names(self) -> list[str]:
        """Names of all records, in iteration order."""
        return [record.name for record in self._records.values()]

    def filter(self, categories: Iterable[PackageCategory | str]) -> PackageSet:
        """Return the records whose category is in ``categories``.

        An empty selection returns an equivalent set (no filtering).
        """
        wanted = {PackageCategory.parse(c) if isinstance(c, str) else c for c in categories}
        if not wanted:
            return PackageSet(self)
        return PackageSet(r for r in self._records.values() if r.category in wanted)

    def exclude_keys(self, keys: Iterable[str]) -> PackageSet:
        """Return the records whose identity key is not in ``keys``."""
        excluded = set(keys)
        return PackageSet(r for r in self._records.values() if r.key not in excluded)

    def by_category(self) -> dict[PackageCategory, list[PackageRecord]]:
        """Group records by category, keeping iteration order within groups."""
        result: dict[PackageCategory, list[PackageRecord]] = {}
        for record in self._records.values():
            result.setdefault(record.category, []).append(record)
        return result

    def merge(self, other: Iterable[PackageRecord]) -> PackageSet:
        """Return a new set with ``other``'s records layered over this one."""
        return PackageSet([*self._records.values(), *other])
