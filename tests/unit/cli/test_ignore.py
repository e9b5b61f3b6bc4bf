"""Unit tests for ignore commands.

Tests for adding, removing and listing ignore rules from the CLI.
"""

from pathlib import Path

import pytest
from brewsync.cli.main import app
from brewsync.core.ignore import load_ignore_file
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def ignore_path(isolated_env: Path) -> Path:
    """Location of the ignore file the CLI writes."""
    return isolated_env / "ignore.toml"


class TestIgnorePackage:
    """Tests for brewsync ignore add/remove."""

    def test_add_for_current_machine(
        self, two_machines: dict[str, Path], ignore_path: Path
    ) -> None:
        """By default the current machine's scope is used."""
        result = runner.invoke(app, ["ignore", "add", "cask:bluestacks"])
        assert result.exit_code == 0
        assert "Ignoring cask:bluestacks (air)" in result.output
        assert load_ignore_file(ignore_path).machines["air"].packages == {"cask": ["bluestacks"]}

    def test_add_twice(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """Adding twice reports the existing entry."""
        runner.invoke(app, ["ignore", "add", "cask:bluestacks"])
        result = runner.invoke(app, ["ignore", "add", "cask:bluestacks"])
        assert result.exit_code == 0
        assert "already ignored" in result.output
        assert load_ignore_file(ignore_path).machines["air"].packages == {"cask": ["bluestacks"]}

    def test_add_global(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """--global targets the global scope."""
        result = runner.invoke(app, ["ignore", "add", "cask:zoom", "--global"])
        assert result.exit_code == 0
        ignore_file = load_ignore_file(ignore_path)
        assert ignore_file.global_.packages == {"cask": ["zoom"]}
        assert ignore_file.machines == {}

    def test_add_for_other_machine(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """--machine targets that machine."""
        result = runner.invoke(app, ["ignore", "add", "brew:postgresql", "-m", "mini"])
        assert result.exit_code == 0
        assert load_ignore_file(ignore_path).is_package_ignored("mini", "brew:postgresql")

    def test_add_without_machine_is_global(self, ignore_path: Path) -> None:
        """Without a known current machine, the global scope is used."""
        result = runner.invoke(app, ["ignore", "add", "cask:zoom"], env={"MACHINE": ""})
        assert result.exit_code == 0
        assert "(global)" in result.output
        assert load_ignore_file(ignore_path).global_.packages == {"cask": ["zoom"]}

    def test_machine_and_global_conflict(self, two_machines: dict[str, Path]) -> None:
        """--machine and --global cannot be combined."""
        result = runner.invoke(app, ["ignore", "add", "cask:zoom", "-m", "mini", "--global"])
        assert result.exit_code == 1
        assert "not both" in result.output

    def test_invalid_id(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """Malformed ids are rejected."""
        result = runner.invoke(app, ["ignore", "add", "bluestacks"])
        assert result.exit_code == 1
        assert "Invalid package ID format" in result.output
        assert not ignore_path.exists()

    def test_remove(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """remove drops the entry."""
        runner.invoke(app, ["ignore", "add", "cask:zoom"])
        result = runner.invoke(app, ["ignore", "remove", "cask:zoom"])
        assert result.exit_code == 0
        assert "No longer ignoring cask:zoom" in result.output
        assert not load_ignore_file(ignore_path).is_package_ignored("air", "cask:zoom")

    def test_remove_missing(self, two_machines: dict[str, Path]) -> None:
        """Removing an absent entry is not an error."""
        result = runner.invoke(app, ["ignore", "remove", "cask:zoom"])
        assert result.exit_code == 0
        assert "was not ignored" in result.output


class TestIgnoreCategory:
    """Tests for brewsync ignore category add/remove."""

    def test_add_global(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """A global category ignore applies to every machine."""
        result = runner.invoke(app, ["ignore", "category", "add", "MAS", "--global"])
        assert result.exit_code == 0
        assert "Ignoring category mas (global)" in result.output
        ignore_file = load_ignore_file(ignore_path)
        assert ignore_file.is_category_ignored("mini", "mas")
        assert ignore_file.is_category_ignored("air", "mas")

    def test_unknown_category(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """Unknown categories are rejected."""
        result = runner.invoke(app, ["ignore", "category", "add", "npm"])
        assert result.exit_code == 1
        assert "Unknown package category" in result.output
        assert not ignore_path.exists()

    def test_remove(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """remove stops ignoring the category."""
        runner.invoke(app, ["ignore", "category", "add", "go"])
        result = runner.invoke(app, ["ignore", "category", "remove", "go"])
        assert result.exit_code == 0
        assert not load_ignore_file(ignore_path).is_category_ignored("air", "go")

    def test_remove_missing(self, two_machines: dict[str, Path]) -> None:
        """Removing an absent category is not an error."""
        result = runner.invoke(app, ["ignore", "category", "remove", "go"])
        assert result.exit_code == 0
        assert "was not ignored" in result.output

    def test_package_entries_kept(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """Ignoring a category keeps existing package entries of it."""
        runner.invoke(app, ["ignore", "add", "mas:Xcode"])
        runner.invoke(app, ["ignore", "category", "add", "mas"])
        assert load_ignore_file(ignore_path).machines["air"].packages == {"mas": ["Xcode"]}


class TestIgnoreList:
    """Tests for brewsync ignore list."""

    def test_nothing_ignored(self, two_machines: dict[str, Path]) -> None:
        """An empty ignore file is reported."""
        result = runner.invoke(app, ["ignore", "list"])
        assert result.exit_code == 0
        assert "Nothing is ignored" in result.output

    def test_lists_scopes(self, two_machines: dict[str, Path]) -> None:
        """Global and machine entries are listed."""
        runner.invoke(app, ["ignore", "category", "add", "mas", "--global"])
        runner.invoke(app, ["ignore", "add", "cask:zoom", "-m", "mini"])
        result = runner.invoke(app, ["ignore", "list"])
        assert result.exit_code == 0
        assert "global" in result.output
        assert "mas" in result.output
        assert "mini" in result.output
        assert "zoom" in result.output

    def test_filter_by_machine(self, two_machines: dict[str, Path]) -> None:
        """--machine hides other machines."""
        runner.invoke(app, ["ignore", "add", "cask:zoom", "-m", "mini"])
        runner.invoke(app, ["ignore", "add", "cask:battery", "-m", "air"])
        result = runner.invoke(app, ["ignore", "list", "-m", "air"])
        assert "battery" in result.output
        assert "zoom" not in result.output


class TestIgnoreClear:
    """Tests for brewsync ignore clear."""

    @pytest.fixture
    def rules(self, two_machines: dict[str, Path]) -> None:
        """Global, mini and air rules."""
        runner.invoke(app, ["ignore", "category", "add", "mas", "--global"])
        runner.invoke(app, ["ignore", "add", "brew:postgresql", "-m", "mini"])
        runner.invoke(app, ["ignore", "add", "cask:bluestacks"])

    @pytest.mark.usefixtures("rules")
    def test_clear_all(self, ignore_path: Path) -> None:
        """--yes clears every scope without prompting."""
        result = runner.invoke(app, ["ignore", "clear", "--yes"])
        assert result.exit_code == 0
        assert "Cleared ignore rules (all scopes)" in result.output
        ignore_file = load_ignore_file(ignore_path)
        assert ignore_file.global_.is_empty
        assert ignore_file.machines == {}

    @pytest.mark.usefixtures("rules")
    def test_clear_machine(self, ignore_path: Path) -> None:
        """-m only drops that machine's rules."""
        result = runner.invoke(app, ["ignore", "clear", "-m", "mini", "-y"])
        assert result.exit_code == 0
        assert "(mini)" in result.output
        ignore_file = load_ignore_file(ignore_path)
        assert set(ignore_file.machines) == {"air"}
        assert ignore_file.global_.categories == ["mas"]

    @pytest.mark.usefixtures("rules")
    def test_clear_global(self, ignore_path: Path) -> None:
        """--global only drops the global rules."""
        result = runner.invoke(app, ["ignore", "clear", "--global", "-y"])
        assert result.exit_code == 0
        ignore_file = load_ignore_file(ignore_path)
        assert ignore_file.global_.is_empty
        assert set(ignore_file.machines) == {"mini", "air"}

    def test_machine_and_global_conflict(self, two_machines: dict[str, Path]) -> None:
        """--machine and --global cannot be combined."""
        result = runner.invoke(app, ["ignore", "clear", "-m", "mini", "--global", "-y"])
        assert result.exit_code == 1
        assert "not both" in result.output

    @pytest.mark.usefixtures("rules")
    def test_declined_prompt_keeps_rules(self, ignore_path: Path) -> None:
        """Answering no to the prompt changes nothing."""
        result = runner.invoke(app, ["ignore", "clear"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert load_ignore_file(ignore_path).global_.categories == ["mas"]

    @pytest.mark.usefixtures("rules")
    def test_confirmed_prompt_clears(self, ignore_path: Path) -> None:
        """Answering yes to the prompt clears the rules."""
        result = runner.invoke(app, ["ignore", "clear"], input="y\n")
        assert result.exit_code == 0
        assert load_ignore_file(ignore_path).machines == {}

    def test_nothing_to_clear(self, two_machines: dict[str, Path], ignore_path: Path) -> None:
        """An empty ignore file is reported and not created."""
        result = runner.invoke(app, ["ignore", "clear", "-y"])
        assert result.exit_code == 0
        assert "No ignore rules to clear" in result.output
        assert not ignore_path.exists()
