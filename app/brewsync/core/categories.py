"""Per-category declaration table for the manifest format.

Each package category maps to a matcher (how a manifest line declaring
it is recognized) and a formatter (how a record is written back). The
parser and writer only consult this table, so supporting a new category
means adding a row here.

Declarations look like::

    brew "libpq", link: true
    mas "Xcode", id: 497799835
    cursor "golang.go"
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from brewsync.models.package import PackageCategory, PackageRecord

# key: value pairs; values may be quoted strings, [arrays] or bare words
_OPTION_PATTERN = re.compile(
    r"""(\w+):\s*("(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|\[[^\]]*\]|[^,]+)"""
)
_ESCAPE_PATTERN = re.compile(r"\\(.)")

# Values written without quotes
_BOOLEAN_VALUES = frozenset({"true", "false"})
_NUMERIC_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")
_SYMBOL_PATTERN = re.compile(r":[A-Za-z_]\w*")
_ARRAY_PATTERN = re.compile(r"\[[^\]]*\]")


def parse_options(text: str) -> dict[str, str]:
    """Parse a declaration's option list into a string mapping.

    Values are kept as strings; quoted values lose one pair of quotes
    and their backslash escapes. Type interpretation is left to the
    writer.

    Args:
        text: Everything after the first comma of a declaration,
            e.g. ``link: true, args: ["--HEAD"]``.

    Returns:
        Mapping of option key to raw string value.
    """
    options: dict[str, str] = {}
    for match in _OPTION_PATTERN.finditer(text):
        options[match.group(1)] = _unquote(match.group(2).strip())
    return options


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return _ESCAPE_PATTERN.sub(r"\1", value[1:-1])
    return value


def format_option_value(value: str) -> str:
    """Format an option value, quoting it unless it is a literal.

    Booleans, numbers, Ruby symbols and arrays are written bare;
    everything else is double-quoted with escapes.
    """
    if (
        value in _BOOLEAN_VALUES
        or _NUMERIC_PATTERN.fullmatch(value)
        or _SYMBOL_PATTERN.fullmatch(value)
        or _ARRAY_PATTERN.fullmatch(value)
    ):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def format_options(options: Mapping[str, str]) -> str:
    """Format options as ``key: value`` pairs sorted by key."""
    return ", ".join(f"{key}: {format_option_value(options[key])}" for key in sorted(options))


def format_declaration(record: PackageRecord) -> str:
    """Format a record as a single manifest line (without description)."""
    line = f'{record.category.value} "{record.name}"'
    if record.options:
        line += f", {format_options(record.options)}"
    return line


@dataclass(frozen=True, slots=True)
class CategorySpec:
    """How one package category is read from and written to a manifest.

    Attributes:
        category: The category this row describes.
        pattern: Matcher for a declaration line of this category.
        formatter: Renders a record of this category as a line.
    """

    category: PackageCategory
    pattern: re.Pattern[str]
    formatter: Callable[[PackageRecord], str] = format_declaration

    @property
    def is_extension(self) -> bool:
        """Whether a section header is written above this category's group."""
        return self.category.is_extension

    def match(self, line: str) -> PackageRecord | None:
        """Try to read a declaration of this category from a stripped line.

        Returns:
            The declared record (without description), or None if the
            line does not declare this category.
        """
        match = self.pattern.match(line)
        if match is None:
            return None
        options = parse_options(match.group(2)) if match.group(2) else {}
        return PackageRecord(category=self.category, name=match.group(1), options=options)

    def format(self, record: PackageRecord) -> str:
        """Render a record of this category as a declaration line."""
        return self.formatter(record)


def _declaration_pattern(token: str) -> re.Pattern[str]:
    return re.compile(rf'^{re.escape(token)}\s+"([^"]+)"(?:\s*,\s*(.+))?')


# Canonical order: taps, native formulae/casks, store apps, extensions last
CATEGORY_SPECS: dict[PackageCategory, CategorySpec] = {
    category: CategorySpec(category=category, pattern=_declaration_pattern(category.value))
    for category in PackageCategory
}


def get_spec(category: PackageCategory) -> CategorySpec:
    """Get the table row for a category."""
    return CATEGORY_SPECS[category]


def canonical_order() -> tuple[PackageCategory, ...]:
    """Categories in the order the writer emits them."""
    return tuple(CATEGORY_SPECS)

