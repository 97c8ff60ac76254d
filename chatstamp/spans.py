"""
Span and segment types.

A span is a recognised region of the current input. Its state is encoded in
its type: each variant carries only the fields meaningful to it, and every
state transition produces a new object.

    FreshSpan     found by the current scan, eligible for widening
    ExtendedSpan  replaces a fresh (or anchored) span after widening
    ResolvedSpan  final, carries a timestamp; kept between passes as an
                  "anchor" sitting on a single placeholder marker
    StaleSpan     an anchor invalidated because the input changed
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union


class SpanState(Enum):
    FRESH = "fresh"
    EXTENDED = "extended"
    RESOLVED = "resolved"
    STALE = "stale"


@dataclass(frozen=True)
class Span:
    """Common fields of every span variant."""
    start: int          # Offset into the current input
    source_text: str    # Characters of the current input covered by the span
    pattern_id: str     # Catalog pattern that produced the span

    state: ClassVar[SpanState]

    @property
    def length(self) -> int:
        return len(self.source_text)

    @property
    def end(self) -> int:
        return self.start + self.length

    @property
    def display_text(self) -> str:
        """The text the span stands for; compared when spans conflict."""
        return self.source_text

    def intersects(self, index: int, length: int = 0) -> bool:
        """Boundary-inclusive intersection with ``[index, index + length]``."""
        end = index + length
        return (
            self.start <= index <= self.end
            or self.start <= end <= self.end
            or index <= self.start <= end
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "start": self.start,
            "end": self.end,
            "source_text": self.source_text,
            "text": self.display_text,
            "pattern_id": self.pattern_id,
        }


@dataclass(frozen=True)
class FreshSpan(Span):
    state: ClassVar[SpanState] = SpanState.FRESH


@dataclass(frozen=True)
class ExtendedSpan(Span):
    """A larger span enclosing an earlier one."""
    extended_text: str = ""
    inner: Optional[Span] = field(default=None, compare=False)

    state: ClassVar[SpanState] = SpanState.EXTENDED

    @property
    def display_text(self) -> str:
        return self.extended_text


@dataclass(frozen=True)
class ResolvedSpan(Span):
    """A span with its point in time."""
    text: str = ""
    timestamp: Optional[datetime] = None

    state: ClassVar[SpanState] = SpanState.RESOLVED

    @property
    def display_text(self) -> str:
        return self.text

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["timestamp"] = self.timestamp.isoformat() if self.timestamp else None
        return result


@dataclass(frozen=True)
class StaleSpan(Span):
    text: str = ""
    reason: str = ""

    state: ClassVar[SpanState] = SpanState.STALE

    @property
    def display_text(self) -> str:
        return self.text


# =============================================================================
# Output segments
# =============================================================================

@dataclass(frozen=True)
class TextSegment:
    """Plain text left untouched by the host renderer."""
    text: str
    start: int
    end: int

    is_timestamp: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class TimestampSegment:
    """A resolved time expression the host may render as an interactive element."""
    text: str           # The full expression, e.g. "13:30:45"
    source_text: str    # What the input holds at this position, e.g. "?:45"
    start: int
    end: int
    timestamp: datetime
    pattern_id: str

    is_timestamp: ClassVar[bool] = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "timestamp",
            "text": self.text,
            "source_text": self.source_text,
            "start": self.start,
            "end": self.end,
            "timestamp": self.timestamp.isoformat(),
            "pattern_id": self.pattern_id,
        }


Segment = Union[TextSegment, TimestampSegment]
