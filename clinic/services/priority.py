"""
Triage priority classification from vital signs.

The classifier maps a :class:`VitalReading` to one of three
:class:`PriorityLevel` values.  It is a pure function: no database, no
settings, no I/O, so it is safe to call from any request or from a
management command.

Thresholds are kept as data in :data:`DEFAULT_BANDS`.  Each tier lists,
per vital, an inclusive ``low`` bound (values at or below it breach) and
an inclusive ``high`` bound (values at or above it breach).  Tiers are
evaluated from most to least severe and the first tier with a breach
wins.  A vital that was not measured (``None`` or ``0``) never breaches.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class PriorityLevel(str, Enum):
    """Clinical urgency levels, most severe first."""

    EMERGENCY = "Emergency"
    URGENT = "Urgent"
    NORMAL = "Normal"

    @property
    def rank(self) -> int:
        """0 for Emergency, 1 for Urgent, 2 for Normal."""
        return _RANKS[self]

    @classmethod
    def choices(cls) -> list[tuple[str, str]]:
        return [(level.value, level.value) for level in cls]


_RANKS = {
    PriorityLevel.EMERGENCY: 0,
    PriorityLevel.URGENT: 1,
    PriorityLevel.NORMAL: 2,
}


VITAL_FIELDS = ("systolic_bp", "heart_rate", "temperature", "spo2")


@dataclass(frozen=True)
class VitalReading:
    """One set of vitals as entered at the triage desk.

    ``None`` marks a vital that was not measured.  ``0`` is accepted as
    the same thing because form inputs arrive with blanks normalised to
    zero.
    """

    systolic_bp: Optional[float] = None
    heart_rate: Optional[float] = None
    temperature: Optional[float] = None
    spo2: Optional[float] = None

    def provided(self) -> dict[str, float]:
        """Return only the measured vitals."""
        values = {}
        for name in VITAL_FIELDS:
            value = getattr(self, name)
            if _is_measured(value):
                values[name] = value
        return values

    @classmethod
    def from_raw(cls, **raw: Any) -> "VitalReading":
        """Build a reading from untrusted form values via :func:`sanitize_vital`."""
        return cls(**{name: sanitize_vital(raw.get(name)) for name in VITAL_FIELDS})


@dataclass(frozen=True)
class Band:
    """Inclusive breach bounds for one vital in one tier."""

    low: Optional[float] = None
    high: Optional[float] = None

    def breached_by(self, value: float) -> bool:
        if self.low is not None and value <= self.low:
            return True
        if self.high is not None and value >= self.high:
            return True
        return False


BandTable = tuple[tuple[PriorityLevel, dict[str, Band]], ...]

DEFAULT_BANDS: BandTable = (
    (PriorityLevel.EMERGENCY, {
        "systolic_bp": Band(low=90, high=220),
        "heart_rate": Band(low=40, high=130),
        "temperature": Band(low=35.0, high=39.1),
        "spo2": Band(low=91),
    }),
    (PriorityLevel.URGENT, {
        "systolic_bp": Band(low=100, high=200),
        "heart_rate": Band(low=50, high=110),
        "temperature": Band(low=36.0, high=38.1),
        "spo2": Band(low=95),
    }),
)


def _is_measured(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def sanitize_vital(value: Any) -> Optional[float]:
    """Coerce a raw form value to a measured vital or ``None``.

    Blank strings, unparsable text, booleans, negatives, zero and
    non-finite numbers all mean "not measured".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def classify(vitals: VitalReading, bands: BandTable = DEFAULT_BANDS) -> PriorityLevel:
    """Return the priority level for ``vitals``.

    Never raises.  With nothing measured the result is ``Normal``.
    """
    measured = vitals.provided()
    if not measured:
        return PriorityLevel.NORMAL
    for level, tier in bands:
        for name, value in measured.items():
            band = tier.get(name)
            if band is not None and band.breached_by(value):
                return level
    return PriorityLevel.NORMAL


def breached_vitals(vitals: VitalReading, level: PriorityLevel, bands: BandTable = DEFAULT_BANDS) -> list[str]:
    """Names of the measured vitals that breach the given tier."""
    tier = dict(bands).get(level, {})
    return [
        name for name, value in vitals.provided().items()
        if name in tier and tier[name].breached_by(value)
    ]
