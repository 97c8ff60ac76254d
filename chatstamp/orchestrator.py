"""
Annotation Pass

Drives one full pass over an input: reconcile the caller's registry with the
new text, scan, widen, resolve, and lay the result out as alternating plain
text and timestamp segments.

The registry is an explicit value owned by the caller. ``annotate`` without a
registry is a pure function of the text; handing back
``AnnotatedText.registry`` on the next call lets spans rendered in a previous
pass (now shown as placeholder markers) keep growing as the user types.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .catalog import PatternCatalog, default_catalog
from .conf import apply_settings, check_settings
from .detection.registry import SpanRegistry
from .detection.widening import WideningEngine
from .resolver import TimeResolver
from .spans import (
    ExtendedSpan, FreshSpan, ResolvedSpan,
    Segment, TextSegment, TimestampSegment,
)

logger = logging.getLogger(__name__)


# =============================================================================
# AnnotatedText
# =============================================================================

@dataclass(frozen=True)
class AnnotatedText:
    """Result of an annotation pass."""
    text: str
    segments: Tuple[Segment, ...]
    registry: SpanRegistry
    marker: str = "?"

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __eq__(self, other):
        if not isinstance(other, AnnotatedText):
            return NotImplemented
        return (self.text, self.segments) == (other.text, other.segments)

    def __hash__(self):
        return hash((self.text, self.segments))

    @property
    def timestamps(self) -> List[TimestampSegment]:
        return [segment for segment in self.segments if segment.is_timestamp]

    def plain_text(self) -> str:
        """The text with every timestamp spelled out in full."""
        return "".join(segment.text for segment in self.segments)

    def placeholder_text(self) -> str:
        """The text as the host sends it back once timestamps are rendered."""
        return "".join(
            self.marker if segment.is_timestamp else segment.text
            for segment in self.segments
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "segments": [segment.to_dict() for segment in self.segments],
        }


def build_segments(text: str, spans: List[ResolvedSpan]) -> Tuple[Segment, ...]:
    """Interleave resolved spans with the plain text gaps between them."""
    segments: List[Segment] = []
    position = 0

    def add_text(start, end):
        if start >= end:
            return
        if segments and not segments[-1].is_timestamp:
            previous = segments.pop()
            segments.append(TextSegment(previous.text + text[start:end], previous.start, end))
        else:
            segments.append(TextSegment(text[start:end], start, end))

    for span in sorted(spans, key=lambda s: s.start):
        add_text(position, span.start)
        segments.append(TimestampSegment(
            text=span.text,
            source_text=span.source_text,
            start=span.start,
            end=span.end,
            timestamp=span.timestamp,
            pattern_id=span.pattern_id,
        ))
        position = span.end
    add_text(position, len(text))

    return tuple(segments)


# =============================================================================
# ScanOrchestrator
# =============================================================================

class ScanOrchestrator:
    """
    Runs annotation passes.

    The orchestrator holds no per-text state and can be shared; each
    registry must only be used by one pass at a time.

    Args:
        catalog: Pattern catalog to scan with.
        settings: See :class:`chatstamp.conf.Settings`.
    """

    @apply_settings
    def __init__(self, catalog: Optional[PatternCatalog] = None, settings=None):
        check_settings(settings)
        self.catalog = catalog or default_catalog
        self._settings = settings
        self.marker = settings.PLACEHOLDER
        self.resolver = TimeResolver(catalog=self.catalog, settings=settings)
        self.widening = WideningEngine(
            self.catalog,
            marker=self.marker,
            max_attempts=settings.MAX_WIDENING_ATTEMPTS,
            resolver=self.resolver,
        )

    def new_registry(self) -> SpanRegistry:
        return SpanRegistry(self.catalog)

    def annotate(self, text: str, registry: Optional[SpanRegistry] = None) -> AnnotatedText:
        """
        Annotate ``text``.

        Args:
            text: The user's in-progress message.
            registry: The registry returned by the previous pass over the same
                buffer, or None to start from scratch.

        Returns:
            AnnotatedText; its ``registry`` is ready for the next pass.
        """
        if not isinstance(text, str):
            raise TypeError(f"Input text must be str ({type(text)!r} given)")

        if registry is None:
            registry = self.new_registry()
        else:
            registry.reconcile(text, self.marker)

        registry.scan(text)
        candidates = registry.fresh() + registry.anchors()

        if not candidates:
            return self._finish(text, registry)

        self.widening.widen(text, registry, candidates)
        self._resolve(registry)
        return self._finish(text, registry)

    def _resolve(self, registry: SpanRegistry) -> None:
        for span in registry:
            if not isinstance(span, (FreshSpan, ExtendedSpan)):
                continue
            timestamp = self.resolver.resolve(span.display_text)
            if timestamp is None:
                registry.remove(span)
                # An anchor rendered in an earlier pass outlives a failed extension
                if isinstance(span, ExtendedSpan) and isinstance(span.inner, ResolvedSpan):
                    registry.insert(span.inner)
                continue
            registry.replace(span, ResolvedSpan(
                start=span.start,
                source_text=span.source_text,
                pattern_id=span.pattern_id,
                text=span.display_text,
                timestamp=timestamp,
            ))

    def _finish(self, text: str, registry: SpanRegistry) -> AnnotatedText:
        segments = build_segments(text, registry.anchors())
        registry.anchor(self.marker)
        return AnnotatedText(text=text, segments=segments, registry=registry, marker=self.marker)


# =============================================================================
# AnnotationSession
# =============================================================================

class AnnotationSession:
    """
    One editing session over one evolving text buffer.

    Owns the registry between passes; calls are serialised so no pass sees
    another's partial state.

    Each pass after the first must be given the buffer as the host shows it,
    with every rendered timestamp collapsed to one marker (what
    ``AnnotatedText.placeholder_text`` returns, plus whatever was typed
    since). Anchors are recognised by position only: if the full text is
    sent again instead, a literal marker that happens to sit where an
    anchor was re-based is taken for that anchor. Call ``reset`` before
    annotating text that did not come from the previous pass.
    """

    def __init__(self, orchestrator: Optional[ScanOrchestrator] = None):
        self.orchestrator = orchestrator or ScanOrchestrator()
        self.registry = self.orchestrator.new_registry()
        self._lock = threading.Lock()

    def annotate(self, text: str) -> AnnotatedText:
        with self._lock:
            result = self.orchestrator.annotate(text, self.registry)
            self.registry = result.registry
            return result

    def reset(self) -> None:
        with self._lock:
            self.registry.clear()
