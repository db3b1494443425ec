"""Presentation helpers shared by the Streamlit views.

Colour scales, gauge geometry, condition icons, and the sky banner
scene. Kept free of Streamlit calls so the mappings are easy to test.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from comfort_predictor.models import Condition, ConditionCategory, PredictionData, Theme

GAUGE_RADIUS = 45
EFFECT_THRESHOLD = 70

_CONDITION_ICONS: dict[ConditionCategory, str] = {
    ConditionCategory.VERY_HOT: "\U0001f525",
    ConditionCategory.VERY_COLD: "\u2744\ufe0f",
    ConditionCategory.VERY_WINDY: "\U0001f32c\ufe0f",
    ConditionCategory.VERY_WET: "\U0001f327\ufe0f",
    ConditionCategory.VERY_UNCOMFORTABLE: "\U0001f613",
}


def clamp_score(score: float) -> float:
    """Clamp a comfort score into [0, 10]."""
    return max(0.0, min(10.0, float(score)))


def score_color(score: float) -> str:
    """Gauge colour for a comfort score (green is best)."""
    normalized = clamp_score(score)
    if normalized >= 8:
        return "#22c55e"  # green
    if normalized >= 6:
        return "#eab308"  # yellow
    if normalized >= 4:
        return "#f97316"  # orange
    return "#dc2626"  # red


def gauge_dash_offset(score: float, radius: float = GAUGE_RADIUS) -> tuple[float, float]:
    """Return (circumference, stroke-dashoffset) for the ring gauge."""
    circumference = 2 * math.pi * radius
    fraction = clamp_score(score) / 10
    return circumference, circumference - fraction * circumference


def likelihood_color(likelihood: float) -> str:
    """Bar colour for a condition likelihood percentage (red is worst)."""
    if likelihood >= 75:
        return "#ef4444"
    if likelihood >= 50:
        return "#f97316"
    if likelihood >= 25:
        return "#eab308"
    return "#22c55e"


def condition_icon(category: ConditionCategory) -> str:
    return _CONDITION_ICONS[category]


def format_measurement(condition: Condition) -> str:
    """``"(35 °C)"`` when the condition carries a value and unit, else ``""``."""
    if condition.value is None or not condition.unit:
        return ""
    return f"({condition.value:g} {condition.unit})"


@dataclass(frozen=True)
class SkyScene:
    """What the animated sky banner should show.

    Attributes:
        is_night: Night sky with stars and moon instead of sun.
        cloud_count: Number of drifting clouds.
        show_rain: Rain streaks (very wet likely).
        show_wind: Wind gusts (very windy likely).
        show_heat: Heat shimmer (very hot likely).
    """

    is_night: bool
    cloud_count: int
    show_rain: bool = False
    show_wind: bool = False
    show_heat: bool = False


def sky_scene(theme: Theme, prediction: PredictionData | None) -> SkyScene:
    """Choose the sky banner scene for the theme and current prediction."""
    is_night = theme is Theme.DARK
    if prediction is None:
        return SkyScene(is_night=is_night, cloud_count=5)

    wet = prediction.likelihood(ConditionCategory.VERY_WET)
    return SkyScene(
        is_night=is_night,
        cloud_count=math.floor(5 + (wet / 100) * 10 + 0.5),
        show_rain=wet > EFFECT_THRESHOLD,
        show_wind=prediction.likelihood(ConditionCategory.VERY_WINDY) > EFFECT_THRESHOLD,
        show_heat=prediction.likelihood(ConditionCategory.VERY_HOT) > EFFECT_THRESHOLD,
    )
