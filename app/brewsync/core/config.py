"""Configuration loading and the per-invocation context.

This module loads config.toml, resolves which machine brewsync runs on,
and bundles the configuration with the ignore rules into a Context that
is passed explicitly to every operation instead of living in a global.
"""

import logging
import os
import socket
import tomllib
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w
from pydantic import ValidationError

from brewsync.core.diff import DiffResult
from brewsync.core.ignore import load_ignore_file
from brewsync.core.paths import get_config_path, get_ignore_path
from brewsync.models.config import (
    AUTO_MACHINE,
    DEFAULT_CATEGORIES,
    BrewsyncConfig,
    MachineConfig,
)
from brewsync.models.ignore import IgnoreFile

logger = logging.getLogger(__name__)

# Environment variables that override current_machine, in priority order
MACHINE_ENV_VARS: tuple[str, ...] = ("BREWSYNC_MACHINE", "MACHINE")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content is invalid."""


class MachineExistsError(ConfigError):
    """Raised when adding a machine id that is already configured."""


def load_config(path: Path | None = None) -> BrewsyncConfig:
    """Load and validate the configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated BrewsyncConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return BrewsyncConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def save_config(config: BrewsyncConfig, path: Path | None = None) -> Path:
    """Save the configuration to a TOML file atomically.

    Args:
        config: The configuration to save.
        path: Path to save to. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def format_config(config: BrewsyncConfig) -> str:
    """Render a configuration as the TOML text save_config would write."""
    return tomli_w.dumps(_config_to_dict(config))


def add_machine(name: str, machine: MachineConfig, path: Path | None = None) -> Path:
    """Add a machine to the config file, creating the file if needed.

    Args:
        name: New machine id, e.g. "mini".
        machine: Settings of the new machine.
        path: Config file path. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigValidationError: If the machine id is empty or contains
            whitespace or slashes.
        MachineExistsError: If the machine id is already configured.
        ConfigError: If the existing config cannot be loaded or saved.
    """
    if not name or any(ch.isspace() or ch in "/\\" for ch in name):
        raise ConfigValidationError(f"Invalid machine name: '{name}'")

    config_path = path or get_config_path()
    try:
        config = load_config(config_path)
    except ConfigNotFoundError:
        config = BrewsyncConfig()

    if name in config.machines:
        raise MachineExistsError(f"Machine '{name}' already exists")

    config.machines[name] = machine
    saved = save_config(config, config_path)
    logger.debug("Added machine %s to %s", name, saved)
    return saved


def _config_to_dict(config: BrewsyncConfig) -> dict[str, Any]:
    """Convert a BrewsyncConfig to a dictionary for TOML serialization.

    Only non-default values are written for optional settings.
    """
    result: dict[str, Any] = {"current_machine": config.current_machine}

    if config.default_source is not None:
        result["default_source"] = config.default_source

    if tuple(config.default_categories) != DEFAULT_CATEGORIES:
        result["default_categories"] = list(config.default_categories)

    result["machines"] = {
        name: machine.model_dump(exclude_none=True) for name, machine in config.machines.items()
    }

    if config.machine_specific:
        result["machine_specific"] = config.machine_specific

    return result


def get_local_hostname() -> str:
    """Return the local hostname."""
    return socket.gethostname()


def detect_machine(config: BrewsyncConfig, hostname: str | None = None) -> str | None:
    """Find the configured machine whose hostname matches this host.

    Both the full hostname and its first label are compared, so
    "mini.local" matches a machine configured as "mini".

    Args:
        config: Loaded configuration.
        hostname: Hostname to match. If None, the local hostname is used.

    Returns:
        Machine id, or None if no machine matches.
    """
    host = hostname if hostname is not None else get_local_hostname()
    candidates = {host.lower(), host.split(".")[0].lower()}

    for name, machine in config.machines.items():
        configured = machine.hostname.lower()
        if not configured:
            continue
        if configured in candidates or configured.split(".")[0] in candidates:
            return name
    return None


def resolve_current_machine(config: BrewsyncConfig) -> str | None:
    """Resolve the current machine id.

    Priority:
    1. BREWSYNC_MACHINE / MACHINE environment variables
    2. current_machine from the config (unless "auto" or empty)
    3. Hostname auto-detection

    Returns:
        Machine id, or None if it cannot be determined.
    """
    for env_var in MACHINE_ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            return value

    if config.current_machine and config.current_machine != AUTO_MACHINE:
        return config.current_machine

    detected = detect_machine(config)
    if detected is None:
        logger.debug("No configured machine matches hostname %s", get_local_hostname())
    else:
        logger.debug("Detected current machine: %s", detected)
    return detected


@dataclass(slots=True)
class Context:
    """Everything one brewsync invocation needs, loaded once up front.

    Attributes:
        config: Loaded configuration (defaults if no file exists).
        ignore: Loaded ignore rules.
        machine: Resolved current machine id, if known.
        config_path: Path the configuration was loaded from.
        ignore_path: Path the ignore rules were loaded from.
    """

    config: BrewsyncConfig
    ignore: IgnoreFile
    machine: str | None
    config_path: Path
    ignore_path: Path

    def manifest_path(self, machine: str) -> Path | None:
        """Manifest path of a configured machine, or None if unknown."""
        machine_config = self.config.get_machine(machine)
        if machine_config is None:
            return None
        return machine_config.manifest_path

    def ignored_categories(self) -> set[str]:
        """Categories ignored for the current machine."""
        return self.ignore.effective_ignored_categories(self.machine or "")

    def ignored_packages(self) -> set[str]:
        """Package keys ignored for the current machine."""
        return self.ignore.effective_ignored_packages(self.machine or "")

    def pinned_packages(self) -> set[str]:
        """Package keys pinned to any machine."""
        return self.config.machine_specific_keys()

    def apply_exclusions(self, result: DiffResult) -> DiffResult:
        """Apply category ignores, package ignores and machine pins to a diff."""
        return (
            result.filter_categories(self.ignored_categories())
            .filter_ignored(self.ignored_packages())
            .filter_machine_specific(self.pinned_packages())
        )


def load_context(
    config_path: Path | None = None,
    ignore_path: Path | None = None,
) -> Context:
    """Load configuration and ignore rules into a Context.

    A missing config file is not an error; defaults are used.

    Raises:
        ConfigError: If the config file exists but cannot be loaded.
        IgnoreFileError: If the ignore file exists but cannot be loaded.
    """
    resolved_config_path = config_path or get_config_path()
    resolved_ignore_path = ignore_path or get_ignore_path()

    try:
        config = load_config(resolved_config_path)
    except ConfigNotFoundError:
        logger.debug("No config at %s, using defaults", resolved_config_path)
        config = BrewsyncConfig()

    return Context(
        config=config,
        ignore=load_ignore_file(resolved_ignore_path),
        machine=resolve_current_machine(config),
        config_path=resolved_config_path,
        ignore_path=resolved_ignore_path,
    )
