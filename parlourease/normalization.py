"""
Normalization of store values into the shapes the domain logic expects.

Two concerns live here:

1. Instants. Appointment times reach us as native ``datetime`` objects,
   as store-native timestamp wrappers, or as raw scalars (ISO strings,
   epoch milliseconds). ``classify_instant`` tags the raw value once at the
   store-adapter boundary and ``normalize_instant`` turns the tagged value
   into a canonical instant: a timezone-aware ``datetime`` in the salon's
   timezone.
2. Icons. Services store a symbolic icon token; ``resolve_icon`` maps it
   onto a display glyph, falling back to the manicure glyph.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from enum import Enum
from typing import Any, Optional, Union

from parlourease.config import settings

logger = logging.getLogger(__name__)


class InvalidInstantError(ValueError):
    """Raised when a value cannot be interpreted as an appointment instant."""


@dataclass(frozen=True)
class NativeDate:
    """A ``datetime`` produced by Python code."""

    value: datetime


@dataclass(frozen=True)
class ExternalTimestamp:
    """A store-native timestamp exposing ``to_datetime()``."""

    value: Any


@dataclass(frozen=True)
class RawScalar:
    """Anything else: ISO-8601 strings, epoch milliseconds, plain dates."""

    value: Any


InstantSource = Union[NativeDate, ExternalTimestamp, RawScalar]


def classify_instant(value: Any) -> InstantSource:
    """Tag a raw store value with the representation it arrived in."""
    if isinstance(value, (NativeDate, ExternalTimestamp, RawScalar)):
        return value
    if isinstance(value, datetime):
        return NativeDate(value)
    if callable(getattr(value, "to_datetime", None)):
        return ExternalTimestamp(value)
    return RawScalar(value)


def _parse_raw(value: Any) -> datetime:
    if isinstance(value, bool) or value is None:
        raise InvalidInstantError(f"Not an instant: {value!r}")

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidInstantError(f"Not an instant: {value!r}")
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise InvalidInstantError(f"Epoch milliseconds out of range: {value!r}") from exc

    if isinstance(value, date):
        return datetime.combine(value, time())

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidInstantError(f"Unparseable instant: {value!r}") from exc

    raise InvalidInstantError(f"Unsupported instant type: {type(value).__name__}")


def _to_canonical(value: datetime, tz: Optional[tzinfo]) -> datetime:
    if tz is None:
        # Naive values are taken as host wall-clock time.
        return value.astimezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def normalize_instant(value: Any, tz: Optional[tzinfo] = None) -> datetime:
    """
    Convert any supported instant representation into a canonical instant.

    Args:
        value: A tagged ``InstantSource`` or a raw value to classify first.
        tz: Target timezone. Defaults to the configured salon timezone,
            or the host's local time when none is configured.

    Returns:
        A timezone-aware ``datetime``. Already-canonical input comes back
        equal to itself.

    Raises:
        InvalidInstantError: If the value cannot be interpreted.
    """
    if tz is None:
        tz = settings.salon.tzinfo
    source = classify_instant(value)

    if isinstance(source, NativeDate):
        instant = source.value
    elif isinstance(source, ExternalTimestamp):
        try:
            instant = source.value.to_datetime()
        except Exception as exc:
            raise InvalidInstantError(f"Timestamp conversion failed: {exc}") from exc
        if not isinstance(instant, datetime):
            raise InvalidInstantError(
                f"Timestamp converted to {type(instant).__name__}, expected datetime"
            )
    else:
        instant = _parse_raw(source.value)

    return _to_canonical(instant, tz)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """Current wall-clock time as a canonical instant."""
    return normalize_instant(datetime.now(timezone.utc), tz)


class ServiceGlyph(str, Enum):
    """Display glyphs for the fixed service icon set."""

    CUT = "cut"
    BRIDAL = "bridal"
    MANICURE = "manicure"
    FACIAL = "facial"
    PEDICURE = "pedicure"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS: dict[ServiceGlyph, str] = {
    ServiceGlyph.CUT: "✂",
    ServiceGlyph.BRIDAL: "\U0001F48E",
    ServiceGlyph.MANICURE: "✋",
    ServiceGlyph.FACIAL: "✨",
    ServiceGlyph.PEDICURE: "\U0001F463",
}

ICONS: dict[str, ServiceGlyph] = {
    "Scissors": ServiceGlyph.CUT,
    "Gem": ServiceGlyph.BRIDAL,
    "Hand": ServiceGlyph.MANICURE,
    "Sparkles": ServiceGlyph.FACIAL,
    "Footprints": ServiceGlyph.PEDICURE,
}

DEFAULT_ICON = "Hand"


def resolve_icon(token: Union[str, ServiceGlyph, None]) -> ServiceGlyph:
    """Map an icon token to its glyph. Never raises.

    An already-resolved glyph is returned unchanged; anything that is not a
    registered token falls back to the default glyph.
    """
    if isinstance(token, ServiceGlyph):
        return token
    if isinstance(token, str) and token in ICONS:
        return ICONS[token]
    if token is not None:
        logger.debug("Unknown icon token %r, using default", token)
    return ICONS[DEFAULT_ICON]
