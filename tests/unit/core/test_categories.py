"""Unit tests for the category declaration table.

Tests for option parsing, value formatting and per-category matching.
"""

import pytest
from brewsync.core.categories import (
    CATEGORY_SPECS,
    canonical_order,
    format_declaration,
    format_option_value,
    format_options,
    get_spec,
    parse_options,
)
from brewsync.models.package import PackageCategory, PackageRecord


class TestParseOptions:
    """Tests for parse_options."""

    def test_bare_values(self) -> None:
        """Bare booleans and numbers are kept as strings."""
        assert parse_options("link: true, id: 497799835") == {
            "link": "true",
            "id": "497799835",
        }

    def test_double_quoted_value(self) -> None:
        """One pair of double quotes is removed."""
        assert parse_options('restart_service: "changed"') == {"restart_service": "changed"}

    def test_single_quoted_value(self) -> None:
        """One pair of single quotes is removed."""
        assert parse_options("conflicts_with: 'mysql'") == {"conflicts_with": "mysql"}

    def test_escaped_quotes(self) -> None:
        """Backslash escapes inside quotes are undone."""
        assert parse_options(r'note: "say \"hi\""') == {"note": 'say "hi"'}

    def test_quoted_value_with_comma(self) -> None:
        """Commas inside quoted values do not split options."""
        assert parse_options('args: "a,b", link: false') == {"args": "a,b", "link": "false"}

    def test_array_value(self) -> None:
        """Bracketed arrays are kept whole, brackets included."""
        assert parse_options('args: ["--HEAD", "--with-x"]') == {
            "args": '["--HEAD", "--with-x"]'
        }

    def test_symbol_value(self) -> None:
        """Ruby symbols are kept as written."""
        assert parse_options("restart_service: :changed") == {"restart_service": ":changed"}

    def test_garbage_yields_nothing(self) -> None:
        """Text without key: value pairs yields no options."""
        assert parse_options("just words") == {}


class TestFormatOptionValue:
    """Tests for format_option_value."""

    @pytest.mark.parametrize(
        "value",
        ["true", "false", "42", "-1", "3.14", ":changed", '["--HEAD"]'],
    )
    def test_literals_unquoted(self, value: str) -> None:
        """Booleans, numbers, symbols and arrays are written bare."""
        assert format_option_value(value) == value

    def test_strings_quoted(self) -> None:
        """Other values are double-quoted."""
        assert format_option_value("changed") == '"changed"'
        assert format_option_value("True") == '"True"'

    def test_escaping(self) -> None:
        """Quotes and backslashes are escaped."""
        assert format_option_value('a"b\\c') == r'"a\"b\\c"'

    def test_format_options_sorted(self) -> None:
        """Options are rendered sorted by key."""
        assert format_options({"link": "true", "args": "x"}) == 'args: "x", link: true'


class TestFormatDeclaration:
    """Tests for format_declaration."""

    def test_without_options(self) -> None:
        """A record without options is category and quoted name."""
        record = PackageRecord(category=PackageCategory.CASK, name="raycast")
        assert format_declaration(record) == 'cask "raycast"'

    def test_with_options(self) -> None:
        """Options follow the name after a comma."""
        record = PackageRecord(
            category=PackageCategory.MAS, name="Xcode", options={"id": "497799835"}
        )
        assert format_declaration(record) == 'mas "Xcode", id: 497799835'

    def test_display_name_not_written(self) -> None:
        """The display name never replaces the name."""
        record = PackageRecord(category=PackageCategory.MAS, name="Xcode", display_name="Xcode 16")
        assert format_declaration(record) == 'mas "Xcode"'


class TestCategorySpec:
    """Tests for CategorySpec matching."""

    def test_table_covers_every_category(self) -> None:
        """Every category has a row, in canonical order."""
        assert tuple(CATEGORY_SPECS) == tuple(PackageCategory)
        assert canonical_order() == tuple(PackageCategory)

    def test_match(self) -> None:
        """A declaration of the row's category is matched."""
        record = get_spec(PackageCategory.BREW).match('brew "libpq", link: true')
        assert record is not None
        assert record.name == "libpq"
        assert record.options == {"link": "true"}

    def test_match_other_category(self) -> None:
        """Declarations of other categories are not matched."""
        assert get_spec(PackageCategory.BREW).match('cask "raycast"') is None

    def test_token_prefix_not_matched(self) -> None:
        """"brewfoo" is not a brew declaration."""
        assert get_spec(PackageCategory.BREW).match('brewfoo "x"') is None

    def test_unquoted_name_not_matched(self) -> None:
        """Names must be double-quoted."""
        assert get_spec(PackageCategory.BREW).match("brew git") is None

    def test_extension_flag(self) -> None:
        """Extension rows report is_extension."""
        assert get_spec(PackageCategory.GO).is_extension
        assert not get_spec(PackageCategory.VSCODE).is_extension

