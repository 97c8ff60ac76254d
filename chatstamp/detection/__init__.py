"""
Span Detection Module

This module finds and grows time-expression spans over one input buffer:
1. registry - non-overlapping span bookkeeping and the initial scan
2. widening - growing a span into a larger expression enclosing it

Usage:
    from chatstamp.detection import SpanRegistry, WideningEngine

    text = "see you at 13:30 on 21/03"
    registry = SpanRegistry()
    registry.scan(text)
    WideningEngine(registry.catalog).widen(text, registry)
"""

from .registry import SpanRegistry
from .widening import WideningEngine

__all__ = [
    "SpanRegistry",
    "WideningEngine",
]
