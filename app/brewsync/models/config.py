"""Configuration models for brewsync.

This module defines the Pydantic models representing config.toml, which
describes the known machines, where their manifests live, and which
packages are pinned to a single machine.
"""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brewsync.models.package import PackageCategory, make_key

# Sentinel for "detect the current machine from the hostname"
AUTO_MACHINE = "auto"

DEFAULT_CATEGORIES: tuple[str, ...] = tuple(c.value for c in PackageCategory)


class MachineConfig(BaseModel):
    """A machine whose manifest brewsync keeps in sync.

    Attributes:
        hostname: Local hostname used for auto-detection; empty disables
            detection for this machine.
        brewfile: Path to this machine's manifest.
        description: Optional human description.
    """

    model_config = ConfigDict(extra="forbid")

    hostname: Annotated[str, Field(description="Local hostname of the machine")] = ""
    brewfile: Annotated[str, Field(description="Path to the machine's manifest")]
    description: Annotated[str | None, Field(description="Machine description")] = None

    @property
    def manifest_path(self) -> Path:
        """Manifest path with ~ expanded."""
        return Path(self.brewfile).expanduser()


class BrewsyncConfig(BaseModel):
    """Main brewsync configuration.

    Attributes:
        machines: Known machines keyed by machine id.
        current_machine: Machine id of this host, or "auto" to detect it.
        default_source: Machine id to diff against when none is given.
        default_categories: Categories considered by default.
        machine_specific: Packages pinned to one machine, grouped by
            machine id then category.
    """

    model_config = ConfigDict(extra="forbid")

    machines: Annotated[
        dict[str, MachineConfig],
        Field(default_factory=dict, description="Known machines"),
    ]
    current_machine: Annotated[str, Field(description="Current machine id")] = AUTO_MACHINE
    default_source: Annotated[str | None, Field(description="Default source machine")] = None
    default_categories: Annotated[
        list[str],
        Field(
            default_factory=lambda: list(DEFAULT_CATEGORIES),
            description="Categories to sync by default",
        ),
    ]
    machine_specific: Annotated[
        dict[str, dict[str, list[str]]],
        Field(default_factory=dict, description="Packages pinned to a single machine"),
    ]

    @field_validator("default_categories", mode="after")
    @classmethod
    def validate_categories(cls, value: list[str]) -> list[str]:
        """Validate that every default category is a known category."""
        return [PackageCategory.parse(c).value for c in value]

    def get_machine(self, name: str) -> MachineConfig | None:
        """Get a machine by id, or None if it is not configured."""
        return self.machines.get(name)

    def machine_specific_keys(self, machine: str | None = None) -> set[str]:
        """Expand machine-specific pins to identity keys.

        Args:
            machine: Only expand this machine's pins. If None, the pins of
                every machine are returned.

        Returns:
            Set of 'category:name' keys.
        """
        keys: set[str] = set()
        for machine_id, pins in self.machine_specific.items():
            if machine is not None and machine_id != machine:
                continue
            for category, names in pins.items():
                keys.update(make_key(category.lower(), name) for name in names)
        return keys

