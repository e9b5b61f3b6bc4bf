"""Ignore-file models for the two-layer exclusion policy.

This module defines the Pydantic models representing ignore.toml, which
excludes whole categories or single packages from sync and import,
either globally or for one machine. Global and machine scopes are merged
additively when queried.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brewsync.models.package import make_key, split_key

# Scope label used for the global layer in diagnostics
GLOBAL_SCOPE = "global"


class IgnoreScope(BaseModel):
    """Ignore rules of a single scope (global or one machine).

    Attributes:
        categories: Categories excluded entirely (e.g. "mas", "go").
        packages: Excluded package names, grouped by category.
    """

    model_config = ConfigDict(extra="forbid")

    categories: Annotated[
        list[str],
        Field(default_factory=list, description="Fully ignored categories"),
    ]
    packages: Annotated[
        dict[str, list[str]],
        Field(default_factory=dict, description="Ignored package names by category"),
    ]

    @field_validator("categories", mode="after")
    @classmethod
    def normalize_categories(cls, value: list[str]) -> list[str]:
        """Lower-case category tokens and drop duplicates, keeping order."""
        return list(dict.fromkeys(c.strip().lower() for c in value if c.strip()))

    @field_validator("packages", mode="after")
    @classmethod
    def normalize_packages(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        """Lower-case category keys and drop duplicate names."""
        result: dict[str, list[str]] = {}
        for category, names in value.items():
            bucket = result.setdefault(category.strip().lower(), [])
            for name in names:
                if name not in bucket:
                    bucket.append(name)
        return result

    def package_keys(self) -> set[str]:
        """Expand package entries to identity keys."""
        return {
            make_key(category, name) for category, names in self.packages.items() for name in names
        }

    @property
    def is_empty(self) -> bool:
        """Check if this scope ignores nothing."""
        return not self.categories and not any(self.packages.values())


@dataclass(frozen=True, slots=True)
class DeadIgnoreEntry:
    """A package ignore made redundant by a category ignore.

    Attributes:
        scope: "global" or the machine name holding the package entry.
        key: Identity key of the redundant package entry.
        category_scope: Scope whose category ignore covers it.
    """

    scope: str
    key: str
    category_scope: str


class IgnoreFile(BaseModel):
    """Complete ignore configuration: one global scope plus per-machine scopes.

    Category ignores and package ignores are tracked independently. A
    category ignore makes package entries of that category redundant,
    but those entries are preserved; see :meth:`dead_package_entries`.

    Attributes:
        global_: Rules applied to every machine (``global`` in the file).
        machines: Rules applied to a single machine, keyed by machine id.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    global_: Annotated[
        IgnoreScope,
        Field(default_factory=IgnoreScope, alias="global", description="Global ignores"),
    ]
    machines: Annotated[
        dict[str, IgnoreScope],
        Field(default_factory=dict, description="Per-machine ignores"),
    ]

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def _scopes_for(self, machine: str) -> list[IgnoreScope]:
        scopes = [self.global_]
        if machine and machine in self.machines:
            scopes.append(self.machines[machine])
        return scopes

    def effective_ignored_categories(self, machine: str) -> set[str]:
        """Union of global and machine-level ignored categories.

        Args:
            machine: Machine id. Unknown or empty ids get the global layer only.

        Returns:
            Set of ignored category tokens.
        """
        result: set[str] = set()
        for scope in self._scopes_for(machine):
            result.update(scope.categories)
        return result

    def effective_ignored_packages(self, machine: str) -> set[str]:
        """Union of global and machine-level ignored packages as identity keys.

        Packages of fully ignored categories are not added; callers that
        need the complete exclusion must also consult
        :meth:`effective_ignored_categories`.
        """
        result: set[str] = set()
        for scope in self._scopes_for(machine):
            result.update(scope.package_keys())
        return result

    def is_category_ignored(self, machine: str, category: str) -> bool:
        """Check if a whole category is ignored for a machine."""
        return category.lower() in self.effective_ignored_categories(machine)

    def is_package_ignored(self, machine: str, key: str) -> bool:
        """Check the package layer only (category ignores are not consulted)."""
        return key in self.effective_ignored_packages(machine)

    def dead_package_entries(self, machine: str | None = None) -> list[DeadIgnoreEntry]:
        """Find package entries already covered by a category ignore.

        A global package entry is dead when the global scope ignores its
        category. A machine package entry is dead when its own scope or
        the global scope ignores its category.

        Args:
            machine: Restrict the check to one machine scope (plus global).
                If None, all scopes are checked.

        Returns:
            Redundant entries, sorted by scope then key.
        """
        found: list[DeadIgnoreEntry] = []
        global_categories = set(self.global_.categories)

        for category, names in self.global_.packages.items():
            if category in global_categories:
                found.extend(
                    DeadIgnoreEntry(GLOBAL_SCOPE, make_key(category, n), GLOBAL_SCOPE)
                    for n in names
                )

        for machine_id, scope in self.machines.items():
            if machine is not None and machine_id != machine:
                continue
            own_categories = set(scope.categories)
            for category, names in scope.packages.items():
                if category in own_categories:
                    covering = machine_id
                elif category in global_categories:
                    covering = GLOBAL_SCOPE
                else:
                    continue
                found.extend(
                    DeadIgnoreEntry(machine_id, make_key(category, n), covering) for n in names
                )

        found.sort(key=lambda e: (e.scope != GLOBAL_SCOPE, e.scope, e.key))
        return found

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def _scope_for_write(self, machine: str, global_: bool) -> IgnoreScope:
        if global_ or not machine:
            return self.global_
        return self.machines.setdefault(machine, IgnoreScope())

    def _existing_scope(self, machine: str, global_: bool) -> IgnoreScope | None:
        if global_ or not machine:
            return self.global_
        return self.machines.get(machine)

    def add_category(self, category: str, machine: str = "", global_: bool = False) -> bool:
        """Ignore a whole category.

        An empty machine id targets the global scope, as does ``global_``.

        Returns:
            True if the entry was added, False if it was already present.
        """
        scope = self._scope_for_write(machine, global_)
        token = category.strip().lower()
        if token in scope.categories:
            return False
        scope.categories.append(token)
        return True

    def remove_category(self, category: str, machine: str = "", global_: bool = False) -> bool:
        """Stop ignoring a category. Removing an absent entry is a no-op.

        Returns:
            True if the entry was removed, False if it was not present.
        """
        scope = self._existing_scope(machine, global_)
        token = category.strip().lower()
        if scope is None or token not in scope.categories:
            return False
        scope.categories.remove(token)
        return True

    def add_package(self, package_id: str, machine: str = "", global_: bool = False) -> bool:
        """Ignore a single package given as 'category:name'.

        Returns:
            True if the entry was added, False if it was already present.

        Raises:
            InvalidPackageIdError: If ``package_id`` is malformed.
        """
        category, name = split_key(package_id)
        scope = self._scope_for_write(machine, global_)
        bucket = scope.packages.setdefault(category, [])
        if name in bucket:
            return False
        bucket.append(name)
        return True

    def remove_package(self, package_id: str, machine: str = "", global_: bool = False) -> bool:
        """Stop ignoring a single package. Removing an absent entry is a no-op.

        Returns:
            True if the entry was removed, False if it was not present.

        Raises:
            InvalidPackageIdError: If ``package_id`` is malformed.
        """
        category, name = split_key(package_id)
        scope = self._existing_scope(machine, global_)
        if scope is None or name not in scope.packages.get(category, []):
            return False
        scope.packages[category].remove(name)
        if not scope.packages[category]:
            del scope.packages[category]
        return True

    def clear_scope(self, machine: str = "", global_: bool = False) -> bool:
        """Drop every rule of one scope, or of all scopes.

        With ``global_`` only the global scope is emptied; with a machine
        id only that machine's entry is removed. With neither, the whole
        file is emptied.

        Returns:
            True if any rule was removed.
        """
        if global_:
            changed = not self.global_.is_empty
            self.global_ = IgnoreScope()
            return changed
        if machine:
            return self.machines.pop(machine, None) is not None
        changed = not self.global_.is_empty or bool(self.machines)
        self.global_ = IgnoreScope()
        self.machines = {}
        return changed
