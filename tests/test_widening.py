"""
Tests for span widening.
"""

import logging
from datetime import datetime

from chatstamp.catalog import default_catalog
from chatstamp.detection import SpanRegistry, WideningEngine
from chatstamp.resolver import TimeResolver
from chatstamp.spans import ExtendedSpan, FreshSpan, ResolvedSpan


def _anchor(start, pattern_id, text, marker="?"):
    return ResolvedSpan(
        start=start,
        source_text=marker,
        pattern_id=pattern_id,
        text=text,
        timestamp=datetime(2024, 6, 15, 13, 30),
    )


class TestWiden:
    """Tests for growing anchors into enclosing expressions."""

    def test_anchor_followed_by_seconds(self):
        registry = SpanRegistry()
        registry.insert(_anchor(0, "time24", "13:30"))
        engine = WideningEngine(default_catalog)

        inserted = engine.widen("?:45", registry)

        assert len(inserted) == 1
        extended = inserted[0]
        assert isinstance(extended, ExtendedSpan)
        assert extended.display_text == "13:30:45"
        assert extended.source_text == "?:45"
        assert extended.pattern_id == "time24_seconds"
        assert registry.spans == [extended]

    def test_anchor_followed_by_date(self):
        text = "? on 21/03"
        registry = SpanRegistry()
        anchor = _anchor(0, "time24", "13:30")
        registry.insert(anchor)
        registry.scan(text)
        assert len(registry) == 2

        inserted = WideningEngine(default_catalog).widen(text, registry)

        assert [span.display_text for span in inserted] == ["13:30 on 21/03"]
        assert inserted[0].pattern_id == "time_on_day_month"
        assert inserted[0].inner is anchor
        assert registry.spans == inserted

    def test_anchor_inside_sentence(self):
        text = "meet ? on 21/03"
        registry = SpanRegistry()
        registry.insert(_anchor(5, "time24", "13:30"))
        registry.scan(text)

        inserted = WideningEngine(default_catalog).widen(text, registry)

        assert len(inserted) == 1
        assert inserted[0].start == 5
        assert inserted[0].end == len(text)

    def test_date_followed_by_year(self):
        registry = SpanRegistry()
        registry.insert(_anchor(0, "day_month", "21/03"))
        inserted = WideningEngine(default_catalog).widen("?/2024", registry)
        assert [span.display_text for span in inserted] == ["21/03/2024"]
        assert inserted[0].pattern_id == "day_month_year"

    def test_nothing_to_widen(self):
        registry = SpanRegistry()
        registry.scan("13:30 xyz")
        inserted = WideningEngine(default_catalog).widen("13:30 xyz", registry)
        assert inserted == []
        assert [span.source_text for span in registry] == ["13:30"]

    def test_match_must_enclose_the_span(self):
        # "?:45" further along the text must not extend the anchor at 0
        registry = SpanRegistry()
        registry.insert(_anchor(0, "time24", "13:30"))
        inserted = WideningEngine(default_catalog).widen("? and ?:45", registry)
        assert inserted == []

    def test_idempotent(self):
        registry = SpanRegistry()
        registry.insert(_anchor(0, "time24", "13:30"))
        engine = WideningEngine(default_catalog)
        first = engine.widen("?:45", registry)
        assert engine.widen("?:45", registry) == []
        assert registry.spans == first

    def test_custom_marker(self):
        registry = SpanRegistry()
        registry.insert(_anchor(0, "time24", "13:30", marker="#"))
        engine = WideningEngine(default_catalog, marker="#")
        inserted = engine.widen("#:45", registry)
        assert [span.display_text for span in inserted] == ["13:30:45"]

    def test_unresolvable_extension_is_not_proposed(self, base):
        registry = SpanRegistry()
        anchor = _anchor(0, "day_month", "29/02")
        registry.insert(anchor)
        resolver = TimeResolver(settings={"RELATIVE_BASE": base})
        engine = WideningEngine(default_catalog, resolver=resolver)

        assert engine.widen("?/2023", registry) == []
        assert registry.spans == [anchor]

    def test_resolvable_extension_with_resolver(self, base):
        registry = SpanRegistry()
        registry.insert(_anchor(0, "day_month", "29/02"))
        resolver = TimeResolver(settings={"RELATIVE_BASE": base})
        engine = WideningEngine(default_catalog, resolver=resolver)

        inserted = engine.widen("?/2028", registry)
        assert [span.display_text for span in inserted] == ["29/02/2028"]

    def test_attempt_limit(self, caplog):
        text = "? on 21/03"
        registry = SpanRegistry()
        registry.insert(_anchor(0, "time24", "13:30"))
        registry.scan(text)
        engine = WideningEngine(default_catalog, max_attempts=1)

        with caplog.at_level(logging.WARNING, logger="chatstamp.detection.widening"):
            inserted = engine.widen(text, registry)

        assert inserted == []
        assert len(registry) == 2
        assert "Widening stopped after 1 attempts" in caplog.text


class TestCandidates:
    """Tests for which spans are eligible."""

    def test_fresh_and_resolved_are_candidates(self):
        assert WideningEngine.is_candidate(FreshSpan(0, "13:30", "time24"))
        assert WideningEngine.is_candidate(_anchor(0, "time24", "13:30"))

    def test_extended_is_not_a_candidate(self):
        span = ExtendedSpan(0, "?:45", "time24_seconds", extended_text="13:30:45")
        assert not WideningEngine.is_candidate(span)

    def test_unknown_pattern_is_skipped(self):
        registry = SpanRegistry()
        registry.insert(_anchor(0, "not_in_catalog", "13:30"))
        assert WideningEngine(default_catalog).widen("?:45", registry) == []
