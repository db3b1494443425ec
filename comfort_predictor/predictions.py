"""High-level prediction service: AI request, extraction, validation.

Combines ``ai_client`` and ``validation`` into the two operations the
UI calls. Malformed AI output is logged with detail and re-raised with
a generic user-facing message; invalid-subject and service errors pass
through unchanged.
"""

from __future__ import annotations

import logging

from comfort_predictor import ai_client
from comfort_predictor.errors import ParseError, SchemaError
from comfort_predictor.models import FullCountryOverviewResult, FullPredictionResult
from comfort_predictor.validation import extract_and_validate, parse_overview, parse_prediction

logger = logging.getLogger(__name__)

INVALID_LOCATION_MESSAGE = (
    "Unable to find data for the specified location. "
    "Please check the name and try again."
)
INVALID_COUNTRY_MESSAGE = (
    "Unable to find data for the specified country. "
    "Please check the name and try again."
)
DAILY_FAILURE_MESSAGE = "Failed to communicate with the AI model or parse its response."
COUNTRY_FAILURE_MESSAGE = (
    "Failed to communicate with the AI model or parse its response "
    "for the country overview."
)


def daily_query(location: str, date: str) -> str:
    """Free-text query sent for a location and ISO date."""
    return f"Weather in {location} on {date}"


def get_comfort_prediction(query: str) -> FullPredictionResult:
    """Fetch and validate a daily weather comfort prediction.

    Raises:
        InvalidSubjectError: The AI did not recognize the location.
        ParseError, SchemaError: The AI response was unusable.
        ServiceError: The AI call itself failed.
    """
    response = ai_client.request_daily_prediction(query)
    try:
        payload = extract_and_validate(response.raw_text, INVALID_LOCATION_MESSAGE)
        prediction = parse_prediction(payload)
    except (ParseError, SchemaError) as exc:
        logger.error(
            "Unusable daily prediction response (%s): %.500r", exc, response.raw_text
        )
        raise type(exc)(DAILY_FAILURE_MESSAGE) from exc

    return FullPredictionResult(prediction=prediction, sources=response.sources)


def get_country_overview(country: str, month: int, year: int) -> FullCountryOverviewResult:
    """Fetch and validate a monthly country climate overview.

    Raises:
        InvalidSubjectError: The AI did not recognize the country.
        ParseError, SchemaError: The AI response was unusable.
        ServiceError: The AI call itself failed.
    """
    response = ai_client.request_country_overview(country, month, year)
    try:
        payload = extract_and_validate(response.raw_text, INVALID_COUNTRY_MESSAGE)
        overview = parse_overview(payload, month=month, year=year)
    except (ParseError, SchemaError) as exc:
        logger.error(
            "Unusable country overview response (%s): %.500r", exc, response.raw_text
        )
        raise type(exc)(COUNTRY_FAILURE_MESSAGE) from exc

    return FullCountryOverviewResult(overview=overview, sources=response.sources)
