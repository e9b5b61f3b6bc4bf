"""Doctor command implementation.

Checks the configuration, manifest paths and ignore rules for problems
without touching anything.
"""

from dataclasses import dataclass
from enum import Enum

import typer
from rich.markup import escape
from rich.table import Table

from brewsync.core.config import ConfigError, Context, load_context
from brewsync.core.ignore import IgnoreFileError
from brewsync.models.package import PackageCategory
from brewsync.utils.formatting import console, print_error, print_success, print_warning


class CheckStatus(str, Enum):
    """Outcome of a single doctor check."""

    OK = "ok"
    WARNING = "warning"
    FAIL = "fail"


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Result of a single doctor check.

    Attributes:
        name: Short check name.
        status: Outcome of the check.
        message: Human-readable detail.
    """

    name: str
    status: CheckStatus
    message: str


_STATUS_MARKERS: dict[CheckStatus, str] = {
    CheckStatus.OK: "[success]ok[/]",
    CheckStatus.WARNING: "[warning]warn[/]",
    CheckStatus.FAIL: "[error]fail[/]",
}


def check_config_file(context: Context) -> CheckResult:
    if context.config_path.exists():
        return CheckResult("Config file", CheckStatus.OK, str(context.config_path))
    return CheckResult(
        "Config file",
        CheckStatus.WARNING,
        f"Not found at {context.config_path}, using defaults.",
    )


def check_current_machine(context: Context) -> CheckResult:
    if not context.machine:
        return CheckResult(
            "Current machine",
            CheckStatus.FAIL,
            "Not detected. Check hostname configuration or set BREWSYNC_MACHINE.",
        )
    if context.config.get_machine(context.machine) is None:
        return CheckResult(
            "Current machine",
            CheckStatus.FAIL,
            f"'{context.machine}' is not a configured machine.",
        )
    return CheckResult("Current machine", CheckStatus.OK, context.machine)


def check_manifests(context: Context) -> list[CheckResult]:
    """Check each machine's manifest path.

    A missing manifest fails only for the current machine; other machines
    may not have synced their manifest yet.
    """
    results: list[CheckResult] = []
    for name, machine_config in sorted(context.config.machines.items()):
        check = f"Manifest ({name})"
        path = machine_config.manifest_path
        if path.is_file():
            results.append(CheckResult(check, CheckStatus.OK, str(path)))
        elif path.exists():
            results.append(CheckResult(check, CheckStatus.FAIL, f"{path} is not a file."))
        elif name == context.machine:
            results.append(CheckResult(check, CheckStatus.FAIL, f"Not found at {path}."))
        else:
            results.append(CheckResult(check, CheckStatus.WARNING, f"Not found at {path}."))
    return results


def check_default_source(context: Context) -> CheckResult:
    source = context.config.default_source
    if not source:
        return CheckResult("Default source", CheckStatus.WARNING, "Not set.")
    if context.config.get_machine(source) is None:
        return CheckResult(
            "Default source",
            CheckStatus.FAIL,
            f"'{source}' is not a configured machine.",
        )
    return CheckResult("Default source", CheckStatus.OK, source)


def check_ignore_rules(context: Context) -> list[CheckResult]:
    """Report unknown categories and package entries made redundant by category ignores."""
    results: list[CheckResult] = []
    known = {c.value for c in PackageCategory}

    scopes = [("global", context.ignore.global_), *sorted(context.ignore.machines.items())]
    for label, scope in scopes:
        unknown = sorted((set(scope.categories) | set(scope.packages)) - known)
        if unknown:
            results.append(
                CheckResult(
                    f"Ignore rules ({label})",
                    CheckStatus.WARNING,
                    f"Unknown categories: {', '.join(unknown)}",
                )
            )

    for entry in context.ignore.dead_package_entries():
        results.append(
            CheckResult(
                f"Ignore rules ({entry.scope})",
                CheckStatus.WARNING,
                f"{entry.key} has no effect: category ignored ({entry.category_scope}).",
            )
        )

    if not results:
        results.append(CheckResult("Ignore rules", CheckStatus.OK, str(context.ignore_path)))
    return results


def run_checks(context: Context) -> list[CheckResult]:
    """Run every check against a loaded context."""
    return [
        check_config_file(context),
        check_current_machine(context),
        *check_manifests(context),
        check_default_source(context),
        *check_ignore_rules(context),
    ]


def _print_results(results: list[CheckResult]) -> None:
    table = Table(
        title="brewsync doctor",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=4)
    table.add_column("Check", style="text")
    table.add_column("Details", style="muted")
    for result in results:
        table.add_row(_STATUS_MARKERS[result.status], result.name, escape(result.message))
    console.print(table)


def doctor_command() -> None:
    """Check configuration, manifests and ignore rules for problems.

    Exits with code 1 if any check fails. Warnings do not change the
    exit code.
    """
    try:
        context = load_context()
    except (ConfigError, IgnoreFileError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    results = run_checks(context)
    _print_results(results)

    failures = sum(1 for r in results if r.status == CheckStatus.FAIL)
    warnings = sum(1 for r in results if r.status == CheckStatus.WARNING)
    if failures:
        print_error(f"{failures} issue(s) found.")
        raise typer.Exit(code=1)
    if warnings:
        print_warning(f"No issues found, {warnings} warning(s).")
        return
    print_success("No issues found.")
