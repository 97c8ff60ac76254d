"""
Tests for the pattern catalog.
"""

import pytest

from chatstamp.catalog import (
    MalformedPatternError, Pattern, PatternCatalog, default_catalog,
)
from chatstamp.grammar import Grammar, Literal, DAY, MONTH, HOUR24


class TestDefaultCatalog:
    """Tests for the built-in catalog."""

    def test_size_and_order(self):
        ids = [pattern.id for pattern in default_catalog]
        assert len(ids) == 19
        assert ids[0] == "iso_datetime"
        assert ids[-1] == "time24"
        assert len(set(ids)) == len(ids)

    @pytest.mark.parametrize("pattern", list(default_catalog), ids=lambda p: p.id)
    def test_example_matches_expression(self, pattern):
        assert pattern.regex.fullmatch(pattern.example)

    def test_display_formats(self):
        assert default_catalog.get("time24").display_format == "HH:mm"
        assert default_catalog.get("at_time_on_day_month").display_format == "[at] HH:mm [on] DD/MM"
        assert default_catalog.get("at_hour12").display_format == "[at] h[ ]A"

    def test_index(self):
        assert default_catalog.index("iso_datetime") == 0
        assert default_catalog.index("day_month") < default_catalog.index("month_day")
        assert default_catalog.index("unknown") == len(default_catalog)

    def test_contains(self):
        assert "time24" in default_catalog
        assert "unknown" not in default_catalog

    def test_formats_in_catalog_order(self):
        formats = default_catalog.formats()
        assert formats[0] == "%Y-%m-%d %H:%M"
        assert formats[-1] == "%H:%M"
        assert formats.index("%d/%m/%Y") < formats.index("%m/%d/%Y")
        assert formats.index("%Y-%m-%d %H:%M") < formats.index("%Y-%m-%d")

    def test_meridiem_formats_have_both_spacings(self):
        assert default_catalog.get("hour12").formats == ("%I %p", "%I%p")


class TestExtension:
    """Tests for derived extension matchers."""

    def test_time_into_seconds(self):
        inner = default_catalog.get("time24")
        outer = default_catalog.get("time24_seconds")
        matcher = default_catalog.extension(inner, outer)
        assert matcher.fullmatch("?:45")

    def test_time_into_time_on_date(self):
        inner = default_catalog.get("time24")
        outer = default_catalog.get("time_on_day_month")
        assert default_catalog.extension(inner, outer).fullmatch("? on 21/03")

    def test_date_into_date_with_year(self):
        inner = default_catalog.get("day_month")
        outer = default_catalog.get("day_month_year")
        assert default_catalog.extension(inner, outer).fullmatch("?/2024")

    def test_not_a_sub_grammar(self):
        inner = default_catalog.get("time24")
        outer = default_catalog.get("day_month")
        assert default_catalog.extension(inner, outer) is None

    def test_twelve_hour_time_is_not_inside_seconds_variant(self):
        inner = default_catalog.get("time12")
        outer = default_catalog.get("time12_seconds")
        assert default_catalog.extension(inner, outer) is None

    def test_cached(self):
        inner = default_catalog.get("time24")
        outer = default_catalog.get("time24_seconds")
        assert default_catalog.extension(inner, outer) is default_catalog.extension(inner, outer)

    def test_marker_is_part_of_the_key(self):
        inner = default_catalog.get("time24")
        outer = default_catalog.get("time24_seconds")
        assert default_catalog.extension(inner, outer, "#").fullmatch("#:45")
        assert default_catalog.extension(inner, outer, "?").fullmatch("#:45") is None


class TestValidation:
    """Tests for malformed catalog entries."""

    def test_example_not_matched(self):
        with pytest.raises(MalformedPatternError):
            PatternCatalog([Pattern("bad", Grammar.of(HOUR24), "99")])

    def test_example_not_parsed(self):
        # Matches the expression, but no strict format accepts 31 February
        with pytest.raises(MalformedPatternError):
            PatternCatalog([Pattern("bad", Grammar.of(DAY, Literal("/"), MONTH), "31/02")])

    def test_duplicate_id(self):
        pattern = Pattern("dup", Grammar.of(HOUR24), "13")
        with pytest.raises(MalformedPatternError):
            PatternCatalog([pattern, pattern])

    def test_malformed_is_value_error(self):
        assert issubclass(MalformedPatternError, ValueError)
