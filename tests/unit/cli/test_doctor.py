"""Unit tests for doctor command.

Tests for the individual checks and the CLI exit codes.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from brewsync.cli.commands.doctor import (
    CheckStatus,
    check_current_machine,
    check_default_source,
    check_ignore_rules,
    check_manifests,
    run_checks,
)
from brewsync.cli.main import app
from brewsync.core.config import Context, load_context
from typer.testing import CliRunner

runner = CliRunner()


@pytest.fixture
def context(two_machines: dict[str, Path]) -> Context:
    """Context for the two-machine config with both manifests present."""
    for path in two_machines.values():
        path.write_text('brew "git"\n')
    return load_context()


class TestChecks:
    """Tests for individual doctor checks."""

    def test_all_ok(self, context: Context) -> None:
        """A complete setup passes every check."""
        assert all(r.status == CheckStatus.OK for r in run_checks(context))

    def test_missing_current_manifest_fails(
        self, context: Context, two_machines: dict[str, Path]
    ) -> None:
        """The current machine's manifest must exist."""
        two_machines["air"].unlink()
        statuses = {r.name: r.status for r in check_manifests(context)}
        assert statuses["Manifest (air)"] == CheckStatus.FAIL
        assert statuses["Manifest (mini)"] == CheckStatus.OK

    def test_missing_other_manifest_warns(
        self, context: Context, two_machines: dict[str, Path]
    ) -> None:
        """Other machines' manifests only warn."""
        two_machines["mini"].unlink()
        statuses = {r.name: r.status for r in check_manifests(context)}
        assert statuses["Manifest (mini)"] == CheckStatus.WARNING

    def test_unknown_current_machine(self, context: Context) -> None:
        """A current machine missing from the config fails."""
        context.machine = "studio"
        assert check_current_machine(context).status == CheckStatus.FAIL

    def test_undetected_machine(self, context: Context) -> None:
        """An undetected machine fails."""
        context.machine = None
        result = check_current_machine(context)
        assert result.status == CheckStatus.FAIL
        assert "Not detected" in result.message

    def test_unknown_default_source(self, context: Context) -> None:
        """default_source must name a configured machine."""
        context.config.default_source = "studio"
        assert check_default_source(context).status == CheckStatus.FAIL

    def test_no_default_source(self, context: Context) -> None:
        """A missing default_source only warns."""
        context.config.default_source = None
        assert check_default_source(context).status == CheckStatus.WARNING

    def test_dead_ignore_entries(self, context: Context) -> None:
        """Package entries under an ignored category are reported."""
        context.ignore.add_package("mas:Xcode", machine="mini")
        context.ignore.add_category("mas", global_=True)
        results = check_ignore_rules(context)
        assert len(results) == 1
        assert results[0].status == CheckStatus.WARNING
        assert results[0].name == "Ignore rules (mini)"
        assert "mas:Xcode has no effect" in results[0].message

    def test_unknown_ignored_category(self, context: Context) -> None:
        """Unknown category tokens in the ignore file are reported."""
        context.ignore.add_category("npm", machine="air")
        results = check_ignore_rules(context)
        assert [r.status for r in results] == [CheckStatus.WARNING]
        assert "npm" in results[0].message


class TestDoctorCommand:
    """Tests for brewsync doctor exit codes."""

    def test_healthy(self, context: Context) -> None:
        """A healthy setup exits 0."""
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 0
        assert "No issues found" in result.output

    def test_failure_exit_code(self, context: Context, two_machines: dict[str, Path]) -> None:
        """Any failing check exits 1."""
        two_machines["air"].unlink()
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 1
        assert "1 issue(s) found" in result.output

    def test_warnings_only(self, context: Context, isolated_env: Path) -> None:
        """Warnings alone keep exit code 0."""
        (isolated_env / "ignore.toml").write_text(
            '[global]\ncategories = ["mas"]\n\n[global.packages]\nmas = ["Xcode"]\n'
        )
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 0
        assert "1 warning(s)" in result.output

    def test_no_config(self) -> None:
        """Without a config the machine cannot be detected."""
        with patch("brewsync.core.config.get_local_hostname", return_value="studio"):
            result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 1

    def test_broken_ignore_file(self, context: Context, isolated_env: Path) -> None:
        """An unreadable ignore file is reported."""
        (isolated_env / "ignore.toml").write_text("[global\n")
        result = runner.invoke(app, ["doctor"])
        assert result.exit_code == 1
        assert "Failed to parse ignore file" in result.output
