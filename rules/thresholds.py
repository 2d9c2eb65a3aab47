"""
Threshold option generator for the alert threshold picker.

Each alert domain has a fixed (min, max, step) range. Options are taken
around the current threshold first; near a range edge, where fewer than
MIN_OPTIONS centred values survive clamping, the picker falls back to an
absolute sweep from the range minimum. That fallback may not include the
current value.
"""
from dataclasses import dataclass
from typing import Dict, List

from models.enums import AlertType

MIN_OPTIONS = 5
MAX_OPTIONS = 7
SPREAD = 3  # centred options use current + k*step for k in -SPREAD..SPREAD
# options are rounded to 2 decimals, so a fallback step must stay well above 0.01
MIN_FALLBACK_STEP = 0.1

_EPS = 1e-9


@dataclass(frozen=True)
class ThresholdRange:
    min: float
    max: float
    step: float

    def contains(self, value: float) -> bool:
        return self.min - _EPS <= value <= self.max + _EPS


THRESHOLD_RANGES: Dict[AlertType, ThresholdRange] = {
    AlertType.TEMPERATURE: ThresholdRange(-20.0, 40.0, 5.0),
    AlertType.HUMIDITY: ThresholdRange(20.0, 90.0, 10.0),
    AlertType.PRESSURE: ThresholdRange(960.0, 1040.0, 10.0),
    AlertType.WIND_SPEED: ThresholdRange(5.0, 50.0, 5.0),
    AlertType.UV_INDEX: ThresholdRange(1.0, 11.0, 1.0),
    AlertType.AIR_QUALITY: ThresholdRange(50.0, 300.0, 50.0),
}


def threshold_range(alert_type: AlertType, current: float) -> ThresholdRange:
    """
    Fixed range for known domains, +/-20% of the current value otherwise.
    A band too narrow for MIN_FALLBACK_STEP is widened around the current value.
    """
    if alert_type in THRESHOLD_RANGES:
        return THRESHOLD_RANGES[alert_type]
    low, high = sorted((current * 0.8, current * 1.2))
    if high - low < _EPS:
        # +/-20% of zero is an empty range
        low, high = current - 1.0, current + 1.0
    elif (high - low) / 5 < MIN_FALLBACK_STEP:
        half = 2.5 * MIN_FALLBACK_STEP
        low, high = current - half, current + half
    return ThresholdRange(low, high, (high - low) / 5)


def _dedupe(values: List[float]) -> List[float]:
    seen = set()
    out = []
    for v in values:
        if v not in seen:
            seen.add(v)
            out.append(v)
    return out


def threshold_options(alert_type: AlertType, current: float) -> List[float]:
    """
    Ordered candidate thresholds for the picker: 5 to 7 values, ascending,
    deduplicated and all within the domain range.
    """
    rng = threshold_range(alert_type, current)

    centred = [round(current + k * rng.step, 2) for k in range(-SPREAD, SPREAD + 1)]
    options = _dedupe([v for v in centred if rng.contains(v)])
    if len(options) >= MIN_OPTIONS:
        return options

    # multiply instead of accumulating so float drift cannot push the last value past max
    sweep: List[float] = []
    k = 0
    while len(sweep) < MAX_OPTIONS:
        value = rng.min + k * rng.step
        if value > rng.max + _EPS:
            break
        sweep.append(round(value, 2))
        k += 1
    return _dedupe(sweep)
