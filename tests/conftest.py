"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temp dir and clear machine overrides."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("BREWSYNC_MACHINE", raising=False)
    monkeypatch.delenv("MACHINE", raising=False)
    return config_home / "brewsync"


@pytest.fixture
def sample_manifest() -> str:
    """A manifest using every category, with descriptions and options."""
    return """tap "homebrew/bundle"

# Fast file finder
brew "fd"
# Fast grep
brew "rg"
brew "libpq", link: true
brew "git"

cask "raycast"
mas "Xcode", id: 497799835
vscode "golang.go"

# cursor (brewsync extension)
cursor "golang.go"

# go (brewsync extension)
go "golang.org/x/tools/gopls"
"""


@pytest.fixture
def write_config(isolated_env: Path):
    """Write config.toml into the isolated config dir.

    Returns:
        Callable taking the TOML text and returning the written path.
    """

    def _write(content: str) -> Path:
        isolated_env.mkdir(parents=True, exist_ok=True)
        path = isolated_env / "config.toml"
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def two_machines(tmp_path: Path, write_config) -> dict[str, Path]:
    """Configure machines "mini" and "air" with their manifest paths.

    The current machine is "air" and the default source is "mini". No
    manifest files are created.
    """
    mini = tmp_path / "Brewfile.mini"
    air = tmp_path / "Brewfile.air"
    write_config(
        f"""current_machine = "air"
default_source = "mini"

[machines.mini]
hostname = "mini"
brewfile = "{mini}"

[machines.air]
hostname = "air"
brewfile = "{air}"
"""
    )
    return {"mini": mini, "air": air}
