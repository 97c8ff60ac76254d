__version__ = "0.1.0"

from .conf import apply_settings
from .catalog import (
    Pattern,
    PatternCatalog,
    MalformedPatternError,
    default_catalog,
)
from .spans import (
    SpanState,
    Span, FreshSpan, ExtendedSpan, ResolvedSpan, StaleSpan,
    TextSegment, TimestampSegment,
)
from .detection import SpanRegistry, WideningEngine
from .resolver import TimeResolver
from .orchestrator import AnnotatedText, AnnotationSession, ScanOrchestrator
from .formats import TIME_FORMATS, format_timestamp, format_all, to_markup, to_unix

_default_orchestrator = ScanOrchestrator()


@apply_settings
def annotate(text, registry=None, settings=None):
    """Find the date and time expressions in a chat message.

    :param text:
        The user's in-progress message.
    :type text: str

    :param registry:
        The ``registry`` of the :class:`AnnotatedText` returned by the
        previous call over the same text buffer, so that spans the host has
        since replaced with placeholder markers can keep growing.
        Omit it to annotate ``text`` from scratch.
    :type registry: :class:`chatstamp.detection.SpanRegistry`

    :param settings:
        Configure customized behavior using settings defined in :mod:`chatstamp.conf.Settings`.
    :type settings: dict

    :return: Returns an :class:`AnnotatedText`: the plain text gaps and the
        resolved timestamp segments, in order.
    :rtype: :class:`AnnotatedText`

    :raises:
        ``TypeError``: text must be a string,
        ``SettingValidationError``: A provided setting is not valid.

    Example usage::

        >>> import chatstamp
        >>> result = chatstamp.annotate("see you at 13:30 on 21/03 ok?")
        >>> [segment.text for segment in result]
        ['see you ', 'at 13:30 on 21/03', ' ok?']
        >>> result.timestamps[0].timestamp
        datetime.datetime(2026, 3, 21, 13, 30)
    """
    orchestrator = _default_orchestrator

    if not settings._default:
        orchestrator = ScanOrchestrator(settings=settings)

    return orchestrator.annotate(text, registry)
