"""
ffparse settings.

Settings are read from environment variables only:

1. FFPARSE_LOG_LEVEL      - log level used by the CLI (default WARNING)
2. FFPARSE_NUMBER_LOCALE  - "invariant" (default) or "host"; chooses the
                            separators used by the generic numeric helpers
3. FFPARSE_ETA_WINDOW     - rolling sample count for session ETA (default 10)

The settings are cached for the lifetime of the process.
Duration and frame-rate parsing never consult the number locale: ffmpeg
always prints period-decimal values regardless of the system locale.
"""

import locale
import logging
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .errors import SettingsError


logger = logging.getLogger(__name__)


ENV_LOG_LEVEL = "FFPARSE_LOG_LEVEL"
ENV_NUMBER_LOCALE = "FFPARSE_NUMBER_LOCALE"
ENV_ETA_WINDOW = "FFPARSE_ETA_WINDOW"

NUMBER_LOCALES = ("invariant", "host")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class NumberFormat(BaseModel):
    """Separators accepted by the generic numeric helpers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    decimal_point: str = "."
    thousands_sep: str = ","

    @field_validator("decimal_point")
    @classmethod
    def validate_decimal_point(cls, v: str) -> str:
        """Decimal point must be a single character."""
        if len(v) != 1:
            raise ValueError("Decimal point must be exactly one character")
        return v


INVARIANT_NUMBER_FORMAT = NumberFormat()


def host_number_format() -> NumberFormat:
    """
    Build a NumberFormat from the host's LC_NUMERIC conventions.

    Falls back to the invariant format when the host reports an
    unusable decimal point.
    """
    conv = locale.localeconv()
    decimal_point = conv.get("decimal_point") or "."
    thousands_sep = conv.get("thousands_sep") or ""

    if thousands_sep == decimal_point:
        thousands_sep = ""

    try:
        return NumberFormat(decimal_point=decimal_point, thousands_sep=thousands_sep)
    except ValidationError:
        logger.warning(
            f"Host locale decimal point {decimal_point!r} unusable, using invariant format"
        )
        return INVARIANT_NUMBER_FORMAT


class ParserSettings(BaseModel):
    """
    Process-wide parser configuration.

    Immutable once loaded.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    log_level: str = "WARNING"
    number_locale: str = "invariant"
    eta_window: int = 10

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {list(LOG_LEVELS)}")
        return level

    @field_validator("number_locale")
    @classmethod
    def validate_number_locale(cls, v: str) -> str:
        name = v.strip().lower()
        if name not in NUMBER_LOCALES:
            raise ValueError(f"Number locale must be one of {list(NUMBER_LOCALES)}")
        return name

    @field_validator("eta_window")
    @classmethod
    def validate_eta_window(cls, v: int) -> int:
        if v < 1:
            raise ValueError("ETA window must be at least 1")
        return v

    @property
    def number_format(self) -> NumberFormat:
        """Separators for the generic numeric helpers."""
        if self.number_locale == "host":
            return host_number_format()
        return INVARIANT_NUMBER_FORMAT


def load_settings() -> ParserSettings:
    """
    Read settings from the environment.

    Unset variables keep their defaults.

    Raises:
        SettingsError: If a variable holds an unusable value
    """
    values = {}

    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level:
        values["log_level"] = (ENV_LOG_LEVEL, log_level)

    number_locale = os.environ.get(ENV_NUMBER_LOCALE)
    if number_locale:
        values["number_locale"] = (ENV_NUMBER_LOCALE, number_locale)

    eta_window = os.environ.get(ENV_ETA_WINDOW)
    if eta_window:
        try:
            values["eta_window"] = (ENV_ETA_WINDOW, int(eta_window))
        except ValueError:
            raise SettingsError(ENV_ETA_WINDOW, eta_window, "not an integer")

    try:
        return ParserSettings(**{field: value for field, (_, value) in values.items()})
    except ValidationError as e:
        field = str(e.errors()[0]["loc"][0])
        env_var, value = values[field]
        raise SettingsError(env_var, value, e.errors()[0]["msg"])


_settings: Optional[ParserSettings] = None


def get_settings() -> ParserSettings:
    """
    Get the process-wide settings.

    Loaded from the environment on first access.
    """
    global _settings
    if _settings is None:
        _settings = load_settings()
        logger.debug(f"Settings loaded: {_settings}")
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None
