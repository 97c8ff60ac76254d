"""
Structured Pattern Grammar

Every time expression the engine recognises is described as a short sequence
of grammar nodes instead of a hand-written regular expression:

- ``Literal``        fixed text such as "at ", " on ", ":" or "/"
- ``Field``          a date/time field (day, month, hour, ...) that knows its
                     matching sub-expression, its display token and its
                     strict ``strptime`` directive
- ``OptionalSpace``  zero or one space ("1PM" and "1 PM")
- ``Placeholder``    an opaque single-character token standing for a span
                     that was already recognised

From one node sequence we derive both the matching expression used to scan
free text and the strict formats used to turn a match into a datetime, so the
two can never drift apart. Because the nodes are values, "replace the
sub-grammar of pattern P inside pattern P' with a placeholder" is a structural
operation on tuples rather than string surgery on expression source.
"""

import itertools
import regex as re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union


PLACEHOLDER_GROUP = "placeholder"


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class Literal:
    """Fixed text that must appear verbatim."""
    text: str

    def expression(self) -> str:
        return re.escape(self.text)

    def directives(self) -> Tuple[str, ...]:
        return (self.text.replace("%", "%%"),)

    def token(self) -> str:
        # Alphabetic literals are bracketed like display-format escapes
        if any(ch.isalpha() for ch in self.text):
            stripped = self.text.strip()
            return self.text.replace(stripped, f"[{stripped}]")
        return self.text


@dataclass(frozen=True)
class Field:
    """A date or time field."""
    name: str
    display: str    # Display token, e.g. "HH"
    pattern: str    # Matching sub-expression
    directive: str  # strptime directive, e.g. "%H"

    def expression(self) -> str:
        return self.pattern

    def directives(self) -> Tuple[str, ...]:
        return (self.directive,)

    def token(self) -> str:
        return self.display


@dataclass(frozen=True)
class OptionalSpace:
    """Zero or one space between two fields."""

    def expression(self) -> str:
        return " ?"

    def directives(self) -> Tuple[str, ...]:
        # Spaced variant first
        return (" ", "")

    def token(self) -> str:
        return "[ ]"


@dataclass(frozen=True)
class Placeholder:
    """An opaque marker standing for an already recognised span."""
    marker: str = "?"

    def expression(self) -> str:
        return f"(?P<{PLACEHOLDER_GROUP}>{re.escape(self.marker)})"

    def directives(self) -> Tuple[str, ...]:
        raise TypeError("A placeholder has no strict format")

    def token(self) -> str:
        return "{span}"


Node = Union[Literal, Field, OptionalSpace, Placeholder]


# =============================================================================
# Fields
# =============================================================================

YEAR = Field("year", "YYYY", r"[12]\d{3}", "%Y")
MONTH = Field("month", "MM", r"(?:0[1-9]|1[0-2])", "%m")
DAY = Field("day", "DD", r"(?:0[1-9]|[12]\d|3[01])", "%d")
HOUR24 = Field("hour24", "HH", r"(?:[01]\d|2[0-3])", "%H")
HOUR12 = Field("hour12", "h", r"(?:0?[1-9]|1[0-2])", "%I")
MINUTE = Field("minute", "mm", r"(?:[0-5]\d)", "%M")
SECOND = Field("second", "ss", r"(?:[0-5]\d)", "%S")
MERIDIEM = Field("meridiem", "A", r"[AaPp][Mm]", "%p")


# =============================================================================
# Grammar
# =============================================================================

@dataclass(frozen=True)
class Grammar:
    """An ordered sequence of grammar nodes."""
    nodes: Tuple[Node, ...]

    @classmethod
    def of(cls, *nodes: Node) -> "Grammar":
        return cls(tuple(nodes))

    def __len__(self) -> int:
        return len(self.nodes)

    def compile(self, flags: int = 0) -> re.Pattern:
        """Compile the grammar into a matching expression."""
        return re.compile(self.expression(), flags)

    def expression(self) -> str:
        return "".join(node.expression() for node in self.nodes)

    def formats(self) -> List[str]:
        """
        Expand the grammar into strict ``strptime`` formats.

        Optional nodes double the number of variants; the variant including
        the optional text comes first.
        """
        choices = [node.directives() for node in self.nodes]
        return ["".join(parts) for parts in itertools.product(*choices)]

    def describe(self) -> str:
        """Human readable display format, e.g. ``HH:mm [on] DD/MM``."""
        return "".join(node.token() for node in self.nodes)

    @property
    def has_placeholder(self) -> bool:
        return any(isinstance(node, Placeholder) for node in self.nodes)

    def find(self, inner: "Grammar") -> int:
        """Return the offset of the first occurrence of ``inner``, or -1."""
        size = len(inner.nodes)
        if not size or size > len(self.nodes):
            return -1
        for offset in range(len(self.nodes) - size + 1):
            if self.nodes[offset:offset + size] == inner.nodes:
                return offset
        return -1

    def substitute(self, inner: "Grammar", marker: str = "?") -> Optional["Grammar"]:
        """
        Replace the first occurrence of ``inner`` with a placeholder.

        Args:
            inner: The sub-grammar to replace.
            marker: Character the placeholder stands for in the input text.

        Returns:
            A new grammar accepting the placeholder where ``inner`` was, or
            None if ``inner`` does not occur (or is the whole grammar).
        """
        offset = self.find(inner)
        if offset < 0 or len(inner.nodes) == len(self.nodes):
            return None
        nodes = (
            self.nodes[:offset]
            + (Placeholder(marker),)
            + self.nodes[offset + len(inner.nodes):]
        )
        return Grammar(nodes)
