"""Diff engine for comparing two package sets.

This module compares a "source" set (the packages we want, e.g. another
machine's manifest) with a "current" set (the packages we have) and
classifies every package as an addition, a removal or common.

Identity is strictly ``(category, name)``: ``brew "python"`` and
``cask "python"`` are unrelated packages.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from brewsync.core.categories import canonical_order
from brewsync.models.package import PackageCategory, PackageRecord, PackageSet


@dataclass(frozen=True, slots=True)
class DiffResult:
    """Result of comparing a source package set with a current one.

    Attributes:
        additions: Packages in source but not in current.
        removals: Packages in current but not in source.
        common: Packages in both (source's copy).
    """

    additions: PackageSet = field(default_factory=PackageSet)
    removals: PackageSet = field(default_factory=PackageSet)
    common: PackageSet = field(default_factory=PackageSet)

    @property
    def is_empty(self) -> bool:
        """Check if there is nothing to install or remove.

        Common packages alone never count as a difference.
        """
        return not self.additions and not self.removals

    @property
    def total_changes(self) -> int:
        """Number of additions plus removals."""
        return len(self.additions) + len(self.removals)

    def additions_by_category(self) -> dict[PackageCategory, list[PackageRecord]]:
        """Additions grouped by category."""
        return self.additions.by_category()

    def removals_by_category(self) -> dict[PackageCategory, list[PackageRecord]]:
        """Removals grouped by category."""
        return self.removals.by_category()

    def filter_ignored(self, ignored_keys: Iterable[str]) -> DiffResult:
        """Drop additions and removals whose identity key is ignored.

        Common packages are kept: ignoring a package suppresses install
        and removal actions, it never uninstalls anything.

        Args:
            ignored_keys: Identity keys ('category:name') to drop.

        Returns:
            A new DiffResult.
        """
        keys = set(ignored_keys)
        return DiffResult(
            additions=self.additions.exclude_keys(keys),
            removals=self.removals.exclude_keys(keys),
            common=self.common,
        )

    def filter_machine_specific(self, pinned_keys: Iterable[str]) -> DiffResult:
        """Drop additions and removals of packages pinned to a single machine.

        Keeps sync and import from proposing to install another machine's
        pinned packages or to remove this machine's own.

        Args:
            pinned_keys: Identity keys pinned to some machine.

        Returns:
            A new DiffResult.
        """
        return self.filter_ignored(pinned_keys)

    def filter_categories(self, ignored_categories: Iterable[PackageCategory | str]) -> DiffResult:
        """Drop additions and removals belonging to fully ignored categories.

        Unknown category tokens are ignored.

        Returns:
            A new DiffResult.
        """
        tokens = {
            c.value if isinstance(c, PackageCategory) else c.lower() for c in ignored_categories
        }
        return DiffResult(
            additions=PackageSet(r for r in self.additions if r.category.value not in tokens),
            removals=PackageSet(r for r in self.removals if r.category.value not in tokens),
            common=self.common,
        )

    def summary(self) -> str:
        """Human-readable summary such as "2 additions, 1 removal"."""
        if self.is_empty:
            return "No differences"
        parts: list[str] = []
        if self.additions:
            parts.append(_format_count(len(self.additions), "addition"))
        if self.removals:
            parts.append(_format_count(len(self.removals), "removal"))
        return ", ".join(parts)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with names grouped by category for additions and
            removals, plus counts.
        """
        return {
            "empty": self.is_empty,
            "summary": {
                "additions": len(self.additions),
                "removals": len(self.removals),
                "common": len(self.common),
            },
            "additions": _names_by_category(self.additions),
            "removals": _names_by_category(self.removals),
        }


def _format_count(count: int, noun: str) -> str:
    if count == 1:
        return f"1 {noun}"
    return f"{count} {noun}s"


def _names_by_category(packages: PackageSet) -> dict[str, list[str]]:
    grouped = packages.by_category()
    return {
        category.value: sorted(r.name for r in grouped[category])
        for category in canonical_order()
        if category in grouped
    }


def diff(source: Iterable[PackageRecord], current: Iterable[PackageRecord]) -> DiffResult:
    """Compute the differences between a source and a current package set.

    Example:
        >>> from brewsync.core.parser import parse_string
        >>> result = diff(parse_string('brew "fzf"'), parse_string('brew "bat"'))
        >>> result.summary()
        '1 addition, 1 removal'

    Args:
        source: Packages we want to have.
        current: Packages we currently have.

    Returns:
        DiffResult with additions, removals and common packages.
    """
    source_set = source if isinstance(source, PackageSet) else PackageSet(source)
    current_set = current if isinstance(current, PackageSet) else PackageSet(current)

    additions: list[PackageRecord] = []
    common: list[PackageRecord] = []
    for record in source_set:
        if record.key in current_set:
            common.append(record)
        else:
            additions.append(record)

    removals = [record for record in current_set if record.key not in source_set]

    return DiffResult(
        additions=PackageSet(additions),
        removals=PackageSet(removals),
        common=PackageSet(common),
    )


def diff_by_type(
    source: Iterable[PackageRecord],
    current: Iterable[PackageRecord],
    categories: Iterable[PackageCategory | str],
) -> DiffResult:
    """Diff only the given categories.

    Both inputs are filtered to ``categories`` before diffing, so neither
    counts nor members include other categories. An empty selection
    compares every category.
    """
    selected = list(categories)
    return diff(PackageSet(source).filter(selected), PackageSet(current).filter(selected))
