"""
Span Registry

Holds the best known set of non-overlapping spans over one input buffer.

Spans compete on the length of the text they stand for (``display_text``):
a candidate is only inserted if no intersecting span is longer, and when it
is inserted every intersecting span is evicted. Intersection is
boundary-inclusive, so spans sharing an endpoint conflict too. Equal lengths
are settled by catalog order: the pattern that comes first in the catalog
keeps its place.

A registry belongs to one editing session. Between passes it only holds
resolved spans "anchored" on a placeholder marker; ``reconcile`` drops the
anchors whose marker is no longer where it was.
"""

import logging
from typing import Iterator, List, Optional

from ..catalog import PatternCatalog, default_catalog
from ..spans import FreshSpan, ResolvedSpan, Span, StaleSpan

logger = logging.getLogger(__name__)


class SpanRegistry:
    """Sorted, pairwise non-overlapping collection of spans."""

    def __init__(self, catalog: Optional[PatternCatalog] = None):
        self.catalog = catalog or default_catalog
        self._spans: List[Span] = []

    def __iter__(self) -> Iterator[Span]:
        return iter(list(self._spans))

    def __len__(self) -> int:
        return len(self._spans)

    def __contains__(self, span: Span) -> bool:
        return any(held is span for held in self._spans)

    def __repr__(self) -> str:
        return f"SpanRegistry({self._spans!r})"

    @property
    def spans(self) -> List[Span]:
        return list(self._spans)

    def fresh(self) -> List[FreshSpan]:
        return [span for span in self._spans if isinstance(span, FreshSpan)]

    def anchors(self) -> List[ResolvedSpan]:
        """Resolved spans carried over from a previous pass."""
        return [span for span in self._spans if isinstance(span, ResolvedSpan)]

    # =========================================================================
    # Conflict resolution
    # =========================================================================

    def query(self, index: int, length: int = 0) -> List[Span]:
        """Return every held span intersecting ``[index, index + length]``."""
        return [span for span in self._spans if span.intersects(index, length)]

    def _beats(self, held: Span, candidate: Span) -> bool:
        held_length = len(held.display_text)
        candidate_length = len(candidate.display_text)
        if held_length != candidate_length:
            return held_length > candidate_length
        return self.catalog.index(held.pattern_id) <= self.catalog.index(candidate.pattern_id)

    def insert(self, candidate: Span) -> bool:
        """
        Propose a span.

        Args:
            candidate: The span to insert.

        Returns:
            True if the candidate was inserted, False if an intersecting span
            beat it (the registry is then unchanged).
        """
        intersecting = self.query(candidate.start, candidate.length)

        for held in intersecting:
            if self._beats(held, candidate):
                logger.debug(
                    f"Discarding '{candidate.display_text}' at {candidate.start}: "
                    f"'{held.display_text}' at {held.start} takes precedence"
                )
                return False

        for held in intersecting:
            logger.debug(f"Evicting '{held.display_text}' at {held.start} for '{candidate.display_text}'")

        self._spans = [span for span in self._spans if not any(span is held for held in intersecting)]
        self._spans.append(candidate)
        self._spans.sort(key=lambda s: s.start)
        return True

    def replace(self, old: Span, new: Span) -> None:
        """Swap a held span for its next state at the same position."""
        for index, held in enumerate(self._spans):
            if held is old:
                self._spans[index] = new
                self._spans.sort(key=lambda s: s.start)
                return
        raise KeyError(f"Span not held by this registry: {old!r}")

    def remove(self, span: Span) -> None:
        self._spans = [held for held in self._spans if held is not span]

    def clear(self) -> None:
        self._spans = []

    # =========================================================================
    # Scanning
    # =========================================================================

    def scan(self, text: str) -> int:
        """
        Run every catalog pattern over ``text`` and insert each match.

        Every pattern is tried exhaustively, so the longest match wins no
        matter which pattern finds it first.

        Returns:
            Number of matches inserted (some may have been evicted since).
        """
        inserted = 0
        for pattern in self.catalog:
            for match in pattern.regex.finditer(text):
                span = FreshSpan(start=match.start(), source_text=match.group(), pattern_id=pattern.id)
                if self.insert(span):
                    inserted += 1
        return inserted

    # =========================================================================
    # Placeholder handling between passes
    # =========================================================================

    def reconcile(self, text: str, marker: str = "?") -> List[StaleSpan]:
        """
        Keep the anchors still sitting on a placeholder marker in ``text``.

        If ``text`` contains no marker at all, every held span is dropped.
        Otherwise spans whose start no longer holds a marker are dropped:
        their context changed and they can't be trusted.

        Returns:
            The dropped spans, as ``StaleSpan`` objects.
        """
        if marker not in text:
            stale = [self._stale(span, "no placeholder in input") for span in self._spans]
            self._spans = []
        else:
            stale = []
            kept = []
            for span in self._spans:
                if text[span.start:span.start + 1] == marker:
                    kept.append(span)
                else:
                    stale.append(self._stale(span, f"no placeholder at {span.start}"))
            self._spans = kept

        for span in stale:
            logger.debug(f"Dropping stale span '{span.text}' at {span.start}: {span.reason}")
        return stale

    @staticmethod
    def _stale(span: Span, reason: str) -> StaleSpan:
        return StaleSpan(
            start=span.start,
            source_text=span.source_text,
            pattern_id=span.pattern_id,
            text=span.display_text,
            reason=reason,
        )

    def anchor(self, marker: str = "?") -> None:
        """
        Re-base resolved spans onto the text the host sends next.

        The host replaces every rendered span with a single ``marker``, which
        shifts everything after it. Each resolved span becomes an anchor of
        length one at its position in that collapsed text; anything else is
        dropped.
        """
        anchored: List[Span] = []
        shift = 0
        for span in self._spans:
            if not isinstance(span, ResolvedSpan):
                continue
            anchored.append(ResolvedSpan(
                start=span.start - shift,
                source_text=marker,
                pattern_id=span.pattern_id,
                text=span.text,
                timestamp=span.timestamp,
            ))
            shift += span.length - 1
        self._spans = anchored
