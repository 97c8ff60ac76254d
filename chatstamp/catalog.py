"""
Pattern Catalog

The ordered, read-only list of time expressions recognised in chat text.
Entries go from the most specific (longest typical match) to the least
specific. The order is advisory: matching is exhaustive and the longest
match wins regardless of which pattern found it. It does decide the order in
which strict formats are tried and which pattern keeps an equal-length
conflict.

Each entry is validated when the catalog is built; an inconsistent entry is a
programming error and raises ``MalformedPatternError`` at import time.
"""

import logging
import regex as re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from .grammar import (
    Grammar, Literal, OptionalSpace,
    YEAR, MONTH, DAY, HOUR24, HOUR12, MINUTE, SECOND, MERIDIEM,
)
from .utils import strptime

logger = logging.getLogger(__name__)

_VALIDATION_BASE = datetime(2000, 1, 1)


class MalformedPatternError(ValueError):
    """A catalog entry's expression and strict formats disagree."""


@dataclass(frozen=True)
class Pattern:
    """A catalog entry."""
    id: str
    grammar: Grammar
    example: str
    regex: re.Pattern = field(init=False, compare=False, repr=False)
    formats: Tuple[str, ...] = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        try:
            compiled = self.grammar.compile()
        except re.error as e:
            raise MalformedPatternError(f"Pattern '{self.id}' does not compile: {e}")
        object.__setattr__(self, "regex", compiled)
        object.__setattr__(self, "formats", tuple(self.grammar.formats()))

    @property
    def display_format(self) -> str:
        return self.grammar.describe()

    def validate(self) -> None:
        """Check that the example is matched and strictly parsed."""
        if not self.regex.fullmatch(self.example):
            raise MalformedPatternError(
                f"Pattern '{self.id}' does not match its example '{self.example}'"
            )
        for date_format in self.formats:
            try:
                strptime(self.example, date_format, _VALIDATION_BASE)
                return
            except ValueError:
                continue
        raise MalformedPatternError(
            f"No strict format of pattern '{self.id}' parses '{self.example}'"
        )


# =============================================================================
# Pattern definitions
# =============================================================================

_AT = Literal("at ")
_ON = Literal(" on ")
_SPACE = Literal(" ")
_COLON = Literal(":")
_SLASH = Literal("/")
_DASH = Literal("-")

_ISO_DATE = (YEAR, _DASH, MONTH, _DASH, DAY)
_DAY_MONTH = (DAY, _SLASH, MONTH)
_MONTH_DAY = (MONTH, _SLASH, DAY)
_TIME24 = (HOUR24, _COLON, MINUTE)
_TIME24_SECONDS = _TIME24 + (_COLON, SECOND)
_TIME12 = (HOUR12, _COLON, MINUTE)
_TIME12_SECONDS = _TIME12 + (_COLON, SECOND)
_MERIDIEM = (OptionalSpace(), MERIDIEM)


def _definitions() -> List[Pattern]:
    return [
        Pattern("iso_datetime", Grammar(_ISO_DATE + (_SPACE,) + _TIME24), "2024-03-21 13:30"),
        Pattern("at_time_on_day_month", Grammar((_AT,) + _TIME24 + (_ON,) + _DAY_MONTH), "at 13:30 on 21/03"),
        Pattern("time_on_day_month", Grammar(_TIME24 + (_ON,) + _DAY_MONTH), "13:30 on 21/03"),
        Pattern("time_day_month_year", Grammar(_TIME24 + (_SPACE,) + _DAY_MONTH + (_SLASH, YEAR)), "13:30 21/03/2024"),
        Pattern("day_month_year", Grammar(_DAY_MONTH + (_SLASH, YEAR)), "21/03/2024"),
        Pattern("month_day_year", Grammar(_MONTH_DAY + (_SLASH, YEAR)), "03/21/2024"),
        Pattern("iso_date", Grammar(_ISO_DATE), "2024-03-21"),
        Pattern("day_month", Grammar(_DAY_MONTH), "21/03"),
        Pattern("month_day", Grammar(_MONTH_DAY), "03/21"),
        Pattern("at_time12_seconds", Grammar((_AT,) + _TIME12_SECONDS + _MERIDIEM), "at 1:30:45 PM"),
        Pattern("time12_seconds", Grammar(_TIME12_SECONDS + _MERIDIEM), "1:30:45 PM"),
        Pattern("at_time12", Grammar((_AT,) + _TIME12 + _MERIDIEM), "at 1:30 PM"),
        Pattern("time12", Grammar(_TIME12 + _MERIDIEM), "1:30 PM"),
        Pattern("at_hour12", Grammar((_AT, HOUR12) + _MERIDIEM), "at 1 PM"),
        Pattern("hour12", Grammar((HOUR12,) + _MERIDIEM), "1 PM"),
        Pattern("at_time24_seconds", Grammar((_AT,) + _TIME24_SECONDS), "at 13:30:45"),
        Pattern("time24_seconds", Grammar(_TIME24_SECONDS), "13:30:45"),
        Pattern("at_time24", Grammar((_AT,) + _TIME24), "at 13:30"),
        Pattern("time24", Grammar(_TIME24), "13:30"),
    ]


# =============================================================================
# PatternCatalog
# =============================================================================

class PatternCatalog:
    """
    Ordered collection of patterns.

    Besides iteration, the catalog derives (and caches) the extension matchers
    used by widening: ``outer``'s grammar with ``inner``'s grammar replaced by
    a placeholder token.
    """

    def __init__(self, patterns: List[Pattern]):
        self._patterns = tuple(patterns)
        self._by_id: Dict[str, int] = {}
        for index, pattern in enumerate(self._patterns):
            if pattern.id in self._by_id:
                raise MalformedPatternError(f"Duplicate pattern id '{pattern.id}'")
            pattern.validate()
            self._by_id[pattern.id] = index
        self._extensions: Dict[Tuple[str, str, str], Optional[re.Pattern]] = {}

    def __iter__(self) -> Iterator[Pattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern_id: str) -> bool:
        return pattern_id in self._by_id

    def get(self, pattern_id: str) -> Pattern:
        return self._patterns[self._by_id[pattern_id]]

    def index(self, pattern_id: str) -> int:
        """Catalog position of a pattern; unknown ids sort last."""
        return self._by_id.get(pattern_id, len(self._patterns))

    def formats(self) -> List[str]:
        """All strict formats, in catalog order."""
        return [date_format for pattern in self._patterns for date_format in pattern.formats]

    def extension(self, inner: Pattern, outer: Pattern, marker: str = "?") -> Optional[re.Pattern]:
        """
        Matcher for ``outer`` accepting ``marker`` in place of ``inner``.

        Returns:
            The compiled matcher (with a ``placeholder`` group), or None when
            ``inner`` is not a sub-grammar of ``outer``.
        """
        key = (inner.id, outer.id, marker)
        if key not in self._extensions:
            grammar = outer.grammar.substitute(inner.grammar, marker)
            self._extensions[key] = grammar.compile() if grammar else None
            if grammar:
                logger.debug(f"Derived extension '{grammar.describe()}' of '{outer.id}' over '{inner.id}'")
        return self._extensions[key]


default_catalog = PatternCatalog(_definitions())
