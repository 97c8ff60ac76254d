from datetime import datetime, tzinfo

from dateutil import tz
from tzlocal import get_localzone


YEAR_DIRECTIVES = ("%Y", "%y")
DATE_DIRECTIVES = ("%d", "%m", "%b", "%B")


def strptime(date_string, date_format, base):
    """Strictly parse ``date_string`` and fill absent fields from ``base``.

    Formats without a year get ``base``'s year; formats without any date
    field get ``base``'s date. The year is appended before parsing (rather
    than patched in afterwards) so that "29/02" parses in leap years.

    :raises: ``ValueError`` if the string does not match the format exactly.
    """
    if any(directive in date_format for directive in YEAR_DIRECTIVES):
        date_obj = datetime.strptime(date_string, date_format)
    else:
        date_obj = datetime.strptime(
            "%s %04d" % (date_string, base.year), "%s %%Y" % date_format
        )

    if not any(directive in date_format for directive in DATE_DIRECTIVES):
        date_obj = date_obj.replace(year=base.year, month=base.month, day=base.day)

    return date_obj


def get_timezone(tz_string):
    """Return the tzinfo for a ``TIMEZONE`` setting value."""
    if tz_string is None or "local" in tz_string.lower():
        return get_localzone()
    zone = tz.gettz(tz_string)
    if zone is None:
        raise ValueError("Unknown timezone: %r" % tz_string)
    return zone


def localize_timezone(date_obj, zone: tzinfo):
    if date_obj.tzinfo is not None:
        return date_obj.astimezone(zone)
    return date_obj.replace(tzinfo=zone)


def get_relative_base(settings):
    """The datetime absent fields are filled from."""
    if settings.RELATIVE_BASE is not None:
        return settings.RELATIVE_BASE
    if settings.RETURN_AS_TIMEZONE_AWARE:
        return datetime.now(get_timezone(settings.TIMEZONE)).replace(tzinfo=None)
    return datetime.now()
