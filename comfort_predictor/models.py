"""Domain model for comfort predictions, country overviews and history.

Field names are Pythonic; ``to_dict`` emits the camelCase JSON form used
both by the AI response schema and by the persisted history.
"""

from __future__ import annotations

import calendar
import datetime
import time
from dataclasses import dataclass, field, fields
from enum import Enum


class ConditionCategory(str, Enum):
    """The five fixed discomfort dimensions reported for every prediction."""

    VERY_HOT = "Very Hot"
    VERY_COLD = "Very Cold"
    VERY_WINDY = "Very Windy"
    VERY_WET = "Very Wet"
    VERY_UNCOMFORTABLE = "Very Uncomfortable"

    @property
    def has_measurement(self) -> bool:
        """Whether this category carries a numeric value and unit."""
        return self in (
            ConditionCategory.VERY_HOT,
            ConditionCategory.VERY_COLD,
            ConditionCategory.VERY_WINDY,
        )

    @classmethod
    def lookup(cls, name: str) -> ConditionCategory | None:
        """Match a category by name, ignoring case and surrounding whitespace."""
        normalized = name.strip().lower()
        for category in cls:
            if category.value.lower() == normalized:
                return category
        return None


class Theme(str, Enum):
    """UI colour theme."""

    LIGHT = "light"
    DARK = "dark"

    @classmethod
    def parse(cls, value: str | None) -> Theme:
        """Parse a stored theme value, defaulting to light."""
        if value == cls.DARK.value:
            return cls.DARK
        return cls.LIGHT

    def toggled(self) -> Theme:
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


@dataclass(frozen=True)
class Condition:
    """Likelihood of one discomfort category.

    Attributes:
        name: The category this entry describes.
        likelihood: Chance of the condition, 0-100.
        description: Short explanation from the AI.
        value: Predicted measurement (Hot/Cold/Windy only).
        unit: Unit of ``value`` (e.g. "°C", "km/h").
    """

    name: ConditionCategory
    likelihood: int
    description: str
    value: float | None = None
    unit: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name.value,
            "likelihood": self.likelihood,
            "description": self.description,
            "value": self.value,
            "unit": self.unit,
        }


@dataclass(frozen=True)
class PredictionData:
    """A daily weather comfort prediction for one location and date.

    Attributes:
        location: Location as parsed by the AI (e.g. "Paris, France").
        date: Target date in YYYY-MM-DD format.
        comfort_score: Aggregate comfort rating, nominally 0-10.
        conditions: Exactly one Condition per ConditionCategory.
        summary: Narrative summary of the day.
        recommendations: Actionable activity recommendations.
    """

    location: str
    date: str
    comfort_score: float
    conditions: tuple[Condition, ...]
    summary: str
    recommendations: tuple[str, ...]

    @property
    def clamped_score(self) -> float:
        """Comfort score clamped into [0, 10] for display."""
        return max(0.0, min(10.0, float(self.comfort_score)))

    @property
    def by_category(self) -> dict[ConditionCategory, Condition]:
        return {c.name: c for c in self.conditions}

    def condition(self, category: ConditionCategory) -> Condition | None:
        return self.by_category.get(category)

    def likelihood(self, category: ConditionCategory) -> int:
        """Likelihood for a category, 0 if the category is missing."""
        cond = self.condition(category)
        return cond.likelihood if cond is not None else 0

    @property
    def target_date(self) -> datetime.date:
        return datetime.date.fromisoformat(self.date)

    def to_dict(self) -> dict:
        return {
            "location": self.location,
            "date": self.date,
            "comfortScore": self.comfort_score,
            "conditions": [c.to_dict() for c in self.conditions],
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }


@dataclass(frozen=True)
class HistoryItem(PredictionData):
    """A completed daily prediction captured into the history list.

    Attributes:
        id: ``"{location}-{date}-{captureTimeMillis}"``.
    """

    id: str

    @classmethod
    def capture(
        cls, prediction: PredictionData, captured_at_ms: int | None = None
    ) -> HistoryItem:
        """Create a history entry for ``prediction`` stamped with the capture time."""
        if captured_at_ms is None:
            captured_at_ms = int(time.time() * 1000)
        return cls.from_prediction(
            prediction, f"{prediction.location}-{prediction.date}-{captured_at_ms}"
        )

    @classmethod
    def from_prediction(cls, prediction: PredictionData, item_id: str) -> HistoryItem:
        values = {f.name: getattr(prediction, f.name) for f in fields(PredictionData)}
        return cls(**values, id=item_id)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["id"] = self.id
        return data


@dataclass(frozen=True)
class GroundingSource:
    """A web citation supporting the AI's answer."""

    uri: str
    title: str

    def to_dict(self) -> dict:
        return {"uri": self.uri, "title": self.title}


@dataclass(frozen=True)
class RegionalBreakdown:
    region: str
    summary: str


@dataclass(frozen=True)
class CountryOverviewData:
    """Monthly climate overview for a whole country.

    Attributes:
        country: Country name.
        month: Month number, 1-12.
        year: Four-digit year.
        overall_summary: Country-wide comfort summary.
        regional_breakdowns: At least one per-region summary.
        travel_advice: Practical travel tips.
    """

    country: str
    month: int
    year: int
    overall_summary: str
    regional_breakdowns: tuple[RegionalBreakdown, ...]
    travel_advice: tuple[str, ...] = ()

    @property
    def month_name(self) -> str:
        if 1 <= self.month <= 12:
            return calendar.month_name[self.month]
        return "N/A"

    def to_dict(self) -> dict:
        return {
            "country": self.country,
            "month": self.month,
            "year": self.year,
            "overallSummary": self.overall_summary,
            "regionalBreakdowns": [
                {"region": r.region, "summary": r.summary}
                for r in self.regional_breakdowns
            ],
            "travelAdvice": list(self.travel_advice),
        }


@dataclass(frozen=True)
class FullPredictionResult:
    prediction: PredictionData
    sources: tuple[GroundingSource, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FullCountryOverviewResult:
    overview: CountryOverviewData
    sources: tuple[GroundingSource, ...] = field(default_factory=tuple)
