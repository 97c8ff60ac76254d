"""
Timestamp presentations.

The host renderer offers each recognised timestamp in several presentations,
keyed by a one-letter code, and inserts the chosen one as ``<t:UNIX:CODE>``
markup:

    t  short time       13:30
    T  long time        13:30:45
    d  short date       21/03/2024
    D  long date        21 March 2024
    f  short date/time  21 March 2024 13:30
    F  full date/time   Thursday, 21 March 2024 13:30
    R  relative         in 2 hours / 2 hours ago
"""

from collections import OrderedDict
from datetime import datetime

from dateutil.relativedelta import relativedelta

from .conf import apply_settings
from .utils import get_timezone, localize_timezone


# Unit, and how many of the next smaller unit make one of it
_RELATIVE_UNITS = [
    ("years", 12),
    ("months", 30),
    ("days", 24),
    ("hours", 60),
    ("minutes", 60),
    ("seconds", None),
]


def _long_date(date_obj):
    return "%d %s" % (date_obj.day, date_obj.strftime("%B %Y"))


def format_short_time(date_obj):
    return date_obj.strftime("%H:%M")


def format_long_time(date_obj):
    return date_obj.strftime("%H:%M:%S")


def format_short_date(date_obj):
    return date_obj.strftime("%d/%m/%Y")


def format_long_date(date_obj):
    return _long_date(date_obj)


def format_short_datetime(date_obj):
    return "%s %s" % (_long_date(date_obj), format_short_time(date_obj))


def format_full_datetime(date_obj):
    return "%s, %s" % (date_obj.strftime("%A"), format_short_datetime(date_obj))


def format_relative(date_obj, now=None):
    """Describe ``date_obj`` relative to ``now``, e.g. "in 2 hours".

    The largest non-zero unit is rounded half up on the next smaller one, so
    1 hour 59 minutes reads "in 2 hours" and 59 minutes 40 seconds "in 1 hour".
    """
    if now is None:
        now = datetime.now(date_obj.tzinfo)
    delta = relativedelta(date_obj, now)

    for index, (unit, per_unit) in enumerate(_RELATIVE_UNITS):
        value = getattr(delta, unit)
        if not value:
            continue

        count = abs(value)
        if per_unit and abs(getattr(delta, _RELATIVE_UNITS[index + 1][0])) * 2 >= per_unit:
            count += 1
        # Rounding up may fill the next larger unit
        if index and count == _RELATIVE_UNITS[index - 1][1]:
            unit, count = _RELATIVE_UNITS[index - 1][0], 1

        label = unit if count != 1 else unit[:-1]
        if value > 0:
            return "in %d %s" % (count, label)
        return "%d %s ago" % (count, label)
    return "now"


TIME_FORMATS = OrderedDict(
    [
        ("t", format_short_time),
        ("T", format_long_time),
        ("d", format_short_date),
        ("D", format_long_date),
        ("f", format_short_datetime),
        ("F", format_full_datetime),
        ("R", format_relative),
    ]
)


def format_timestamp(date_obj, code, now=None):
    """Render ``date_obj`` in the presentation keyed by ``code``."""
    if code not in TIME_FORMATS:
        raise ValueError(
            "Unknown timestamp format %r, expected one of %s"
            % (code, ", ".join(TIME_FORMATS))
        )
    if code == "R":
        return format_relative(date_obj, now=now)
    return TIME_FORMATS[code](date_obj)


def format_all(date_obj, now=None):
    """Every presentation of ``date_obj``, keyed by code."""
    return OrderedDict(
        (code, format_timestamp(date_obj, code, now=now)) for code in TIME_FORMATS
    )


@apply_settings
def to_unix(date_obj, settings=None):
    """Seconds since the epoch; naive datetimes are read in ``TIMEZONE``."""
    date_obj = localize_timezone(date_obj, get_timezone(settings.TIMEZONE))
    return int(date_obj.timestamp())


@apply_settings
def to_markup(date_obj, code="f", settings=None):
    """The chat markup the host inserts for a chosen presentation."""
    if code not in TIME_FORMATS:
        raise ValueError("Unknown timestamp format %r" % code)
    return "<t:%d:%s>" % (to_unix(date_obj, settings=settings), code)
