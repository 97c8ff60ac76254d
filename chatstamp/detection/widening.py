"""
Span Widening

Grows a recognised span into a larger expression that encloses it, e.g. an
already rendered "13:30" (shown to us as "?" in the host's text) followed by
":45" becomes "13:30:45", and "? on 21/03" becomes "13:30 on 21/03".

For a span S found by pattern P, every other pattern P' that contains P's
grammar is turned into an extension matcher where P's part is a single
placeholder token. The input is masked so that S occupies exactly one
placeholder, and the matcher must match starting at S's own start: a match
anywhere else does not enclose S. A successful match is proposed to the
registry as an ``ExtendedSpan`` and competes on length like any other span.

Inserting an extension evicts S, so with a resolver configured a match is
only proposed when its text resolves; otherwise S is left in place.
"""

import logging
from typing import Iterable, List, Optional

from ..catalog import PatternCatalog
from ..grammar import PLACEHOLDER_GROUP
from ..resolver import TimeResolver
from ..spans import ExtendedSpan, FreshSpan, ResolvedSpan, Span
from .registry import SpanRegistry

logger = logging.getLogger(__name__)


class WideningEngine:
    """
    Proposes enclosing spans for fresh and anchored spans.

    Args:
        catalog: Pattern catalog the extension matchers are derived from.
        marker: The placeholder character.
        max_attempts: Extension matchers tried per pass before giving up.
        resolver: If given, extensions whose text does not resolve are
            not proposed.
    """

    def __init__(self, catalog: PatternCatalog, marker: str = "?", max_attempts: int = 1000,
                 resolver: Optional[TimeResolver] = None):
        self.catalog = catalog
        self.marker = marker
        self.max_attempts = max_attempts
        self.resolver = resolver

    @staticmethod
    def is_candidate(span: Span) -> bool:
        # Extended spans are never widened again in the same pass
        return isinstance(span, (FreshSpan, ResolvedSpan))

    def widen(self, text: str, registry: SpanRegistry, candidates: Optional[Iterable[Span]] = None) -> List[ExtendedSpan]:
        """
        Run one widening pass.

        Args:
            text: The current input.
            registry: Registry holding the candidates; extensions are inserted into it.
            candidates: Spans to widen; defaults to every eligible held span.

        Returns:
            The extended spans that were inserted.
        """
        if candidates is None:
            candidates = registry.spans

        inserted: List[ExtendedSpan] = []
        attempts = 0

        for span in list(candidates):
            if not self.is_candidate(span) or span not in registry:
                # Displaced by an earlier extension
                continue
            if span.pattern_id not in self.catalog:
                continue

            inner = self.catalog.get(span.pattern_id)
            masked = text[:span.start] + self.marker + text[span.end:]

            for outer in self.catalog:
                if outer.id == inner.id:
                    continue
                matcher = self.catalog.extension(inner, outer, self.marker)
                if matcher is None:
                    continue

                if attempts >= self.max_attempts:
                    logger.warning(
                        f"Widening stopped after {attempts} attempts; "
                        f"remaining spans are left as they are"
                    )
                    return inserted
                attempts += 1

                match = matcher.match(masked, span.start)
                if not match or match.start(PLACEHOLDER_GROUP) != span.start:
                    continue

                extended = self._extend(text, span, outer.id, match)
                if self.resolver and self.resolver.resolve(extended.display_text) is None:
                    logger.debug(
                        f"Not widening '{span.display_text}' at {span.start}: "
                        f"'{extended.display_text}' does not resolve"
                    )
                    continue
                if registry.insert(extended):
                    logger.debug(
                        f"Widened '{span.display_text}' at {span.start} "
                        f"into '{extended.display_text}' ({outer.id})"
                    )
                    inserted.append(extended)
                    if span not in registry:
                        break

        return inserted

    def _extend(self, text: str, span: Span, pattern_id: str, match) -> ExtendedSpan:
        placeholder_start, placeholder_end = match.span(PLACEHOLDER_GROUP)
        matched = match.group()
        offset = placeholder_start - match.start()

        # Map the masked match back onto the real input
        end = match.end() - 1 + span.length
        extended_text = (
            matched[:offset]
            + span.display_text
            + matched[offset + placeholder_end - placeholder_start:]
        )
        return ExtendedSpan(
            start=match.start(),
            source_text=text[match.start():end],
            pattern_id=pattern_id,
            extended_text=extended_text,
            inner=span,
        )
