from datetime import datetime
from functools import wraps

from .utils import get_timezone


DEFAULT_SETTINGS = {
    # Point in time absent fields (year, date) are filled from; None means now
    "RELATIVE_BASE": None,
    # Character standing in for an already rendered span in the host's text
    "PLACEHOLDER": "?",
    # Extension matchers tried per widening pass before giving up
    "MAX_WIDENING_ATTEMPTS": 1000,
    # Try a natural-language parse when no strict format matches
    "LENIENT_FALLBACK": True,
    "TIMEZONE": "local",
    "RETURN_AS_TIMEZONE_AWARE": False,
}


class Settings:
    """Control and configure default parsing behavior of chatstamp.
    Currently, supported settings are:

    * `RELATIVE_BASE`
    * `PLACEHOLDER`
    * `MAX_WIDENING_ATTEMPTS`
    * `LENIENT_FALLBACK`
    * `TIMEZONE`
    * `RETURN_AS_TIMEZONE_AWARE`
    """

    _default = True
    _mod_settings = dict()

    def __init__(self, settings=None):
        if settings:
            self._updateall(settings.items())
        else:
            self._updateall(DEFAULT_SETTINGS.items())

    def _updateall(self, iterable):
        for key, value in iterable:
            setattr(self, key, value)

    def replace(self, mod_settings=None, **kwds):
        for k, v in kwds.items():
            if k not in DEFAULT_SETTINGS:
                raise SettingValidationError('"{}" is not a supported setting'.format(k))

        for x in DEFAULT_SETTINGS:
            kwds.setdefault(x, getattr(self, x))

        kwds["_default"] = False
        if mod_settings:
            kwds["_mod_settings"] = mod_settings

        return self.__class__(settings=kwds)


settings = Settings()


def apply_settings(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        mod_settings = kwargs.get("settings")

        kwargs["settings"] = mod_settings or settings

        if isinstance(kwargs["settings"], dict):
            kwargs["settings"] = settings.replace(
                mod_settings=mod_settings, **kwargs["settings"]
            )

        if not isinstance(kwargs["settings"], Settings):
            raise TypeError(
                "settings can only be either dict or instance of Settings class"
            )

        return f(*args, **kwargs)

    return wrapper


class SettingValidationError(ValueError):
    pass


def _check_placeholder(setting_name, setting_value):
    if len(setting_value) != 1 or setting_value.isalnum() or setting_value.isspace():
        raise SettingValidationError(
            '"{}" must be a single punctuation or symbol character, not {!r}'.format(
                setting_name, setting_value
            )
        )


def _check_positive(setting_name, setting_value):
    if setting_value < 1:
        raise SettingValidationError(
            '"{}" must be a positive integer, not {}'.format(setting_name, setting_value)
        )


def _check_timezone(setting_name, setting_value):
    try:
        get_timezone(setting_value)
    except ValueError:
        raise SettingValidationError(
            '"{}" is not a known timezone: {!r}'.format(setting_name, setting_value)
        )


def check_settings(settings):
    """
    Check if provided settings are valid, if not it raises `SettingValidationError`.
    Only checks for the modified settings.
    """
    settings_values = {
        "RELATIVE_BASE": {"type": datetime},
        "PLACEHOLDER": {"type": str, "extra_check": _check_placeholder},
        "MAX_WIDENING_ATTEMPTS": {"type": int, "extra_check": _check_positive},
        "LENIENT_FALLBACK": {"type": bool},
        "TIMEZONE": {"type": str, "extra_check": _check_timezone},
        "RETURN_AS_TIMEZONE_AWARE": {"type": bool},
    }

    modified_settings = settings._mod_settings  # check only modified settings

    # check settings keys:
    for setting in modified_settings:
        if setting not in settings_values:
            raise SettingValidationError('"{}" is not a valid setting'.format(setting))

    for setting_name, setting_value in modified_settings.items():
        setting_type = type(setting_value)
        setting_props = settings_values[setting_name]

        # check type:
        if setting_value is None and setting_name == "RELATIVE_BASE":
            continue
        if not isinstance(setting_value, setting_props["type"]) or (
            setting_props["type"] is int and setting_type is bool
        ):
            raise SettingValidationError(
                '"{}" must be "{}", not "{}".'.format(
                    setting_name, setting_props["type"].__name__, setting_type.__name__
                )
            )

        # specific checks
        extra_check = setting_props.get("extra_check")
        if extra_check:
            extra_check(setting_name, setting_value)
