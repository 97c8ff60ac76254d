"""
Time Resolution

Turns the literal text of a span into a datetime: every strict format of the
catalog is tried in catalog order, then a lenient natural-language parse.
A span nothing can parse resolves to None and stays plain text.
"""

import logging
from datetime import datetime
from typing import Optional

from dateutil import parser as dateutil_parser

from .catalog import PatternCatalog, default_catalog
from .conf import apply_settings, check_settings
from .utils import get_relative_base, get_timezone, localize_timezone, strptime

logger = logging.getLogger(__name__)


class TimeResolver:
    """
    Resolves span text to a point in time.

    Args:
        catalog: Catalog whose strict formats are tried, in order.
        settings: ``RELATIVE_BASE``, ``LENIENT_FALLBACK``, ``TIMEZONE`` and
            ``RETURN_AS_TIMEZONE_AWARE`` are honoured.
    """

    @apply_settings
    def __init__(self, catalog: Optional[PatternCatalog] = None, settings=None):
        check_settings(settings)
        self.catalog = catalog or default_catalog
        self._settings = settings
        self._formats = self.catalog.formats()

    def resolve(self, text: str) -> Optional[datetime]:
        """
        Resolve ``text``.

        Args:
            text: The literal span text, e.g. "at 13:30 on 21/03".

        Returns:
            The datetime, or None if neither a strict format nor the lenient
            fallback could parse it.
        """
        if not text or not text.strip():
            return None

        base = get_relative_base(self._settings)

        date_obj = self._try_strict_formats(text, base)
        if date_obj is None and self._settings.LENIENT_FALLBACK:
            date_obj = self._try_lenient(text, base)

        if date_obj is None:
            logger.debug(f"Could not resolve '{text}'; leaving it as plain text")
            return None

        if self._settings.RETURN_AS_TIMEZONE_AWARE:
            date_obj = localize_timezone(date_obj, get_timezone(self._settings.TIMEZONE))
        return date_obj

    def _try_strict_formats(self, text: str, base: datetime) -> Optional[datetime]:
        for date_format in self._formats:
            try:
                return strptime(text, date_format, base)
            except ValueError:
                continue
        return None

    def _try_lenient(self, text: str, base: datetime) -> Optional[datetime]:
        default = base.replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            date_obj = dateutil_parser.parse(text, default=default)
        except (OverflowError, ValueError):
            return None
        logger.debug(f"Resolved '{text}' with the lenient parser")
        return date_obj
