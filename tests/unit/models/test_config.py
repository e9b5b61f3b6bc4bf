"""Unit tests for configuration models.

Tests for MachineConfig and BrewsyncConfig.
"""

from pathlib import Path

import pytest
from brewsync.models.config import AUTO_MACHINE, DEFAULT_CATEGORIES, BrewsyncConfig, MachineConfig
from pydantic import ValidationError


class TestMachineConfig:
    """Tests for MachineConfig model."""

    def test_required_fields(self) -> None:
        """brewfile is required."""
        with pytest.raises(ValidationError):
            MachineConfig.model_validate({"hostname": "mini"})

    def test_description_optional(self) -> None:
        """description defaults to None."""
        machine = MachineConfig(hostname="mini", brewfile="~/Brewfile")
        assert machine.description is None

    def test_hostname_optional(self) -> None:
        """hostname defaults to empty."""
        assert MachineConfig(brewfile="~/Brewfile").hostname == ""

    def test_manifest_path_expands_home(self) -> None:
        """manifest_path expands ~."""
        machine = MachineConfig(brewfile="~/Brewfile")
        assert machine.manifest_path == Path.home() / "Brewfile"


class TestBrewsyncConfig:
    """Tests for BrewsyncConfig model."""

    def test_defaults(self) -> None:
        """An empty config detects the machine and uses every category."""
        config = BrewsyncConfig()
        assert config.machines == {}
        assert config.current_machine == AUTO_MACHINE
        assert config.default_source is None
        assert tuple(config.default_categories) == DEFAULT_CATEGORIES
        assert config.machine_specific == {}

    def test_default_categories_normalized(self) -> None:
        """Default categories are parsed case-insensitively."""
        config = BrewsyncConfig(default_categories=["Brew", "CASK"])
        assert config.default_categories == ["brew", "cask"]

    def test_unknown_default_category(self) -> None:
        """Unknown default categories are rejected."""
        with pytest.raises(ValidationError, match="Unknown package category"):
            BrewsyncConfig(default_categories=["npm"])

    def test_rejects_unknown_fields(self) -> None:
        """Unknown top-level keys are rejected."""
        with pytest.raises(ValidationError):
            BrewsyncConfig.model_validate({"auto_dump": True})

    def test_get_machine(self) -> None:
        """get_machine returns the machine or None."""
        config = BrewsyncConfig.model_validate(
            {"machines": {"mini": {"hostname": "mini", "brewfile": "~/Brewfile"}}}
        )
        machine = config.get_machine("mini")
        assert machine is not None
        assert machine.hostname == "mini"
        assert config.get_machine("air") is None


class TestMachineSpecificKeys:
    """Tests for machine_specific_keys expansion."""

    @pytest.fixture
    def config(self) -> BrewsyncConfig:
        """Config with pins on two machines."""
        return BrewsyncConfig.model_validate(
            {
                "machine_specific": {
                    "mini": {"brew": ["postgresql"], "Cask": ["docker"]},
                    "air": {"cask": ["battery"]},
                }
            }
        )

    def test_all_machines(self, config: BrewsyncConfig) -> None:
        """Without a machine, pins of every machine are returned."""
        assert config.machine_specific_keys() == {
            "brew:postgresql",
            "cask:docker",
            "cask:battery",
        }

    def test_one_machine(self, config: BrewsyncConfig) -> None:
        """With a machine, only its pins are returned."""
        assert config.machine_specific_keys("air") == {"cask:battery"}

    def test_unknown_machine(self, config: BrewsyncConfig) -> None:
        """A machine without pins expands to nothing."""
        assert config.machine_specific_keys("studio") == set()
