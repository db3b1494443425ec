"""History chart derivation: plot coordinates, axis ticks, and SVG output.

Given the history of one location (ascending by date) and a metric,
computes the points of a simple time-series line chart in a fixed
viewBox. The geometry is pure data so it can be tested without a
browser; ``render_svg`` turns it into inline SVG for the UI.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from html import escape
from typing import Sequence

from comfort_predictor.models import ConditionCategory, PredictionData

MAX_X_TICKS = 5
Y_TICK_COUNT = 5


class Metric(str, Enum):
    """Values that can be plotted from a history entry."""

    COMFORT_SCORE = "comfortScore"
    VERY_HOT = ConditionCategory.VERY_HOT.value
    VERY_COLD = ConditionCategory.VERY_COLD.value
    VERY_WINDY = ConditionCategory.VERY_WINDY.value
    VERY_WET = ConditionCategory.VERY_WET.value
    VERY_UNCOMFORTABLE = ConditionCategory.VERY_UNCOMFORTABLE.value

    @property
    def category(self) -> ConditionCategory | None:
        if self is Metric.COMFORT_SCORE:
            return None
        return ConditionCategory(self.value)

    @property
    def label(self) -> str:
        return "Comfort Score" if self is Metric.COMFORT_SCORE else self.value

    @property
    def color(self) -> str:
        return _METRIC_COLORS[self]

    @property
    def max_value(self) -> float:
        """Upper bound of the value domain (the lower bound is always 0)."""
        return 10.0 if self is Metric.COMFORT_SCORE else 100.0

    def value_of(self, item: PredictionData) -> float:
        """Read this metric from a prediction; missing categories read as 0."""
        category = self.category
        if category is None:
            return float(item.comfort_score)
        return float(item.likelihood(category))


_METRIC_COLORS: dict[Metric, str] = {
    Metric.COMFORT_SCORE: "#38bdf8",
    Metric.VERY_HOT: "#f97316",
    Metric.VERY_COLD: "#3b82f6",
    Metric.VERY_WINDY: "#6b7280",
    Metric.VERY_WET: "#06b6d4",
    Metric.VERY_UNCOMFORTABLE: "#eab308",
}


@dataclass(frozen=True)
class Padding:
    top: float = 20
    right: float = 20
    bottom: float = 50
    left: float = 40


@dataclass(frozen=True)
class ChartPoint:
    x: float
    y: float
    date: datetime.date
    value: float


@dataclass(frozen=True)
class Tick:
    """An axis label and its position along that axis."""

    position: float
    label: str


@dataclass(frozen=True)
class ChartData:
    """Everything needed to draw the history chart.

    Attributes:
        width: viewBox width.
        height: viewBox height.
        padding: Space around the plot band.
        points: One point per history entry, in date order.
        path: SVG path through the points; empty with fewer than two.
        y_ticks: Value labels from the domain minimum to maximum.
        x_ticks: Date labels, at most MAX_X_TICKS of them.
    """

    width: float
    height: float
    padding: Padding
    points: tuple[ChartPoint, ...] = field(default_factory=tuple)
    path: str = ""
    y_ticks: tuple[Tick, ...] = field(default_factory=tuple)
    x_ticks: tuple[Tick, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.points


def _format_value(value: float) -> str:
    return f"{value:g}"


def _format_date(day: datetime.date) -> str:
    return f"{day:%b} {day.day}"


def _tick_indices(count: int) -> list[int]:
    """Indices of the dates to label: all of them, or five spread evenly."""
    if count <= MAX_X_TICKS:
        return list(range(count))
    step = (count - 1) // 4
    return [0, step, step * 2, step * 3, count - 1]


def build_chart(
    items: Sequence[PredictionData],
    metric: Metric = Metric.COMFORT_SCORE,
    width: float = 500,
    height: float = 250,
    padding: Padding = Padding(),
) -> ChartData:
    """Compute plot points, path, and axis ticks for ``metric`` over ``items``.

    Args:
        items: History entries for a single location.
        metric: Which value to plot.
        width: viewBox width.
        height: viewBox height.
        padding: Space reserved around the plot band for labels.

    Returns:
        ChartData; ``is_empty`` is true when ``items`` is empty.
    """
    if not items:
        return ChartData(width=width, height=height, padding=padding)

    plot_w = width - padding.left - padding.right
    plot_h = height - padding.top - padding.bottom
    max_value = metric.max_value

    dated = sorted(
        ((item.target_date, metric.value_of(item)) for item in items),
        key=lambda pair: pair[0],
    )
    min_day = dated[0][0]
    day_range = (dated[-1][0] - min_day).days

    def x_for(day: datetime.date) -> float:
        if day_range == 0:
            return padding.left + plot_w / 2
        return padding.left + ((day - min_day).days / day_range) * plot_w

    def y_for(value: float) -> float:
        clamped = max(0.0, min(max_value, value))
        return padding.top + plot_h * (1 - clamped / max_value)

    points = tuple(
        ChartPoint(x=x_for(day), y=y_for(value), date=day, value=value)
        for day, value in dated
    )

    path = ""
    if len(points) > 1:
        path = " ".join(
            f"{'M' if i == 0 else 'L'}{p.x:g} {p.y:g}" for i, p in enumerate(points)
        )

    last = Y_TICK_COUNT - 1
    y_ticks = tuple(
        Tick(
            position=padding.top + (last - i) * plot_h / last,
            label=_format_value(i * max_value / last),
        )
        for i in range(Y_TICK_COUNT)
    )

    unique_days = sorted({day for day, _ in dated})
    x_ticks = tuple(
        Tick(position=x_for(unique_days[i]), label=_format_date(unique_days[i]))
        for i in _tick_indices(len(unique_days))
    )

    return ChartData(
        width=width,
        height=height,
        padding=padding,
        points=points,
        path=path,
        y_ticks=y_ticks,
        x_ticks=x_ticks,
    )


def render_svg(chart: ChartData, metric: Metric) -> str:
    """Render ChartData as an inline SVG string."""
    pad = chart.padding
    parts = [
        f'<svg viewBox="0 0 {chart.width:g} {chart.height:g}" '
        f'xmlns="http://www.w3.org/2000/svg" role="img" '
        f'aria-label="Chart of {escape(metric.label)}" style="width:100%;min-width:500px;">'
    ]

    for tick in chart.y_ticks:
        parts.append(
            f'<text x="{pad.left - 8:g}" y="{tick.position:g}" text-anchor="end" '
            f'dominant-baseline="middle" class="chart-label">{escape(tick.label)}</text>'
            f'<line x1="{pad.left:g}" x2="{chart.width - pad.right:g}" '
            f'y1="{tick.position:g}" y2="{tick.position:g}" class="chart-grid"/>'
        )

    label_y = chart.height - pad.bottom + 15
    for tick in chart.x_ticks:
        parts.append(
            f'<text x="{tick.position:g}" y="{label_y:g}" text-anchor="middle" '
            f'class="chart-label">{escape(tick.label)}</text>'
        )

    if chart.path:
        parts.append(
            f'<path d="{chart.path}" fill="none" stroke="{metric.color}" stroke-width="2"/>'
        )
    for point in chart.points:
        parts.append(
            f'<circle cx="{point.x:g}" cy="{point.y:g}" r="3" fill="{metric.color}">'
            f'<title>{_format_date(point.date)}: {_format_value(point.value)}</title></circle>'
        )

    parts.append("</svg>")
    return "".join(parts)
