"""Extraction and validation of the JSON payload returned by the AI.

The AI is asked for a single JSON object but is not guaranteed to emit
only JSON: it may wrap the object in prose or markdown fences. Every
field in the payload is treated as untrusted input and checked
explicitly before it is turned into a model object.
"""

from __future__ import annotations

import datetime
import json
import logging
import math
from typing import Any

from comfort_predictor.errors import InvalidSubjectError, ParseError, SchemaError
from comfort_predictor.models import (
    Condition,
    ConditionCategory,
    CountryOverviewData,
    PredictionData,
    RegionalBreakdown,
)

logger = logging.getLogger(__name__)

_SENTINEL_FIELDS = ("isValidLocation", "isValidCountry")


def extract_json_text(raw_text: str) -> str:
    """Return the span from the first ``{`` to the last ``}`` in ``raw_text``.

    Raises:
        ParseError: If the text contains no such span.
    """
    start = raw_text.find("{") if raw_text else -1
    end = raw_text.rfind("}") if raw_text else -1
    if start == -1 or end < start:
        raise ParseError("Could not find a valid JSON object in the AI response.")
    return raw_text[start:end + 1]


def extract_and_validate(raw_text: str, invalid_subject_message: str) -> dict:
    """Parse the JSON object embedded in ``raw_text`` and check its sentinel.

    Args:
        raw_text: Full response text from the AI.
        invalid_subject_message: User-facing message used when the AI
            flags the location or country as unknown.

    Returns:
        The parsed JSON object.

    Raises:
        ParseError: No JSON object found, or it is malformed.
        InvalidSubjectError: ``isValidLocation`` or ``isValidCountry`` is false.
    """
    try:
        parsed = json.loads(extract_json_text(raw_text))
    except ValueError as exc:
        raise ParseError(f"Malformed JSON in the AI response: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ParseError("The AI response JSON is not an object.")

    for sentinel in _SENTINEL_FIELDS:
        if parsed.get(sentinel) is False:
            raise InvalidSubjectError(invalid_subject_message)
    return parsed


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------

def _number(value: Any) -> float | None:
    """Coerce a finite JSON number (or numeric string) to float; None otherwise."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _require_text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise SchemaError(f"Missing or invalid '{key}' in the AI response.")
    return value.strip()


def _optional_text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _text_list(payload: dict, key: str) -> tuple[str, ...]:
    value = payload.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise SchemaError(f"'{key}' must be a list in the AI response.")
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def _require_int(payload: dict, key: str, fallback: int | None = None) -> int:
    number = _number(payload.get(key))
    if number is None:
        if fallback is not None:
            return fallback
        raise SchemaError(f"Missing or invalid '{key}' in the AI response.")
    if number != int(number):
        raise SchemaError(f"'{key}' must be a whole number in the AI response.")
    return int(number)


def _iso_date(value: str) -> str:
    """Normalize a date or datetime string to YYYY-MM-DD."""
    try:
        return datetime.date.fromisoformat(value[:10]).isoformat()
    except ValueError as exc:
        raise SchemaError(f"Invalid date '{value}' in the AI response.") from exc


# ---------------------------------------------------------------------------
# Daily prediction
# ---------------------------------------------------------------------------

def _parse_condition(raw: Any) -> Condition | None:
    """Parse one condition entry; returns None for unknown category names."""
    if not isinstance(raw, dict):
        raise SchemaError("Each condition in the AI response must be an object.")

    name = raw.get("name")
    if not isinstance(name, str):
        raise SchemaError("Condition is missing its 'name'.")
    category = ConditionCategory.lookup(name)
    if category is None:
        logger.warning("Ignoring unknown condition category %r", name)
        return None

    likelihood = _number(raw.get("likelihood"))
    if likelihood is None:
        raise SchemaError(f"Condition '{category.value}' is missing its likelihood.")

    value = unit = None
    if category.has_measurement:
        value = _number(raw.get("value"))
        raw_unit = raw.get("unit")
        unit = raw_unit.strip() if isinstance(raw_unit, str) and raw_unit.strip() else None

    return Condition(
        name=category,
        likelihood=max(0, min(100, math.floor(likelihood + 0.5))),
        description=_optional_text(raw, "description"),
        value=value,
        unit=unit,
    )


def parse_conditions(raw_conditions: Any) -> tuple[Condition, ...]:
    """Validate the conditions array and return one entry per category.

    Entries are returned in ConditionCategory order. When the AI repeats
    a category the first entry wins.

    Raises:
        SchemaError: If the array is empty, malformed, or incomplete.
    """
    if not isinstance(raw_conditions, list) or not raw_conditions:
        raise SchemaError("The AI response has no conditions.")

    by_category: dict[ConditionCategory, Condition] = {}
    for raw in raw_conditions:
        condition = _parse_condition(raw)
        if condition is not None and condition.name not in by_category:
            by_category[condition.name] = condition

    missing = [c.value for c in ConditionCategory if c not in by_category]
    if missing:
        raise SchemaError(
            f"The AI response is missing conditions: {', '.join(missing)}."
        )
    return tuple(by_category[c] for c in ConditionCategory)


def parse_prediction(payload: dict) -> PredictionData:
    """Turn a validated daily-prediction payload into PredictionData.

    Raises:
        SchemaError: If required fields are absent or have the wrong type.
    """
    if not isinstance(payload, dict):
        raise SchemaError("Invalid data structure received from AI.")

    score = _number(payload.get("comfortScore"))
    if score is None:
        raise SchemaError("Missing or invalid 'comfortScore' in the AI response.")

    return PredictionData(
        location=_require_text(payload, "location"),
        date=_iso_date(_require_text(payload, "date")),
        comfort_score=score,
        conditions=parse_conditions(payload.get("conditions")),
        summary=_optional_text(payload, "summary"),
        recommendations=_text_list(payload, "recommendations"),
    )


# ---------------------------------------------------------------------------
# Country overview
# ---------------------------------------------------------------------------

def _parse_breakdowns(raw_breakdowns: Any) -> tuple[RegionalBreakdown, ...]:
    if not isinstance(raw_breakdowns, list) or not raw_breakdowns:
        raise SchemaError("The AI response has no regional breakdowns.")

    breakdowns = []
    for raw in raw_breakdowns:
        if not isinstance(raw, dict):
            raise SchemaError("Each regional breakdown must be an object.")
        breakdowns.append(
            RegionalBreakdown(
                region=_require_text(raw, "region"),
                summary=_require_text(raw, "summary"),
            )
        )
    return tuple(breakdowns)


def parse_overview(
    payload: dict,
    month: int | None = None,
    year: int | None = None,
) -> CountryOverviewData:
    """Turn a validated country-overview payload into CountryOverviewData.

    Args:
        payload: Parsed JSON object from the AI.
        month: Requested month, used when the AI omits it.
        year: Requested year, used when the AI omits it.

    Raises:
        SchemaError: If required fields are absent or have the wrong type.
    """
    if not isinstance(payload, dict):
        raise SchemaError("Invalid country overview data structure received from AI.")

    parsed_month = _require_int(payload, "month", fallback=month)
    if not 1 <= parsed_month <= 12:
        raise SchemaError(f"Invalid month {parsed_month} in the AI response.")

    return CountryOverviewData(
        country=_require_text(payload, "country"),
        month=parsed_month,
        year=_require_int(payload, "year", fallback=year),
        overall_summary=_require_text(payload, "overallSummary"),
        regional_breakdowns=_parse_breakdowns(payload.get("regionalBreakdowns")),
        travel_advice=_text_list(payload, "travelAdvice"),
    )
