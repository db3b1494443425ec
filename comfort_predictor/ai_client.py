"""Client for the generative-AI comfort forecasts, powered by the Anthropic API.

Builds a natural-language prompt that spells out the exact JSON schema
expected back, sends it to Claude with the server-side web search tool
enabled, and returns the raw response text together with the web
sources Claude cited. Parsing lives in ``validation``; this module makes
exactly one API call per request and never retries.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from typing import Any

import anthropic

from comfort_predictor import config
from comfort_predictor.errors import ServiceError
from comfort_predictor.models import ConditionCategory, GroundingSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIResponse:
    """Unparsed AI answer.

    Attributes:
        raw_text: Concatenated text blocks of the response.
        sources: Cited web sources, deduplicated by uri.
    """

    raw_text: str
    sources: tuple[GroundingSource, ...] = field(default_factory=tuple)


_CATEGORY_LIST = ", ".join(f"'{c.value}'" for c in ConditionCategory)
_MEASURED_LIST = ", ".join(f"'{c.value}'" for c in ConditionCategory if c.has_measurement)

_DAILY_PROMPT = """\
Based on the user's query: "{query}", first identify the location and the target date.

If the location in the query is not a real, known geographical place (city, region,
country, etc.), respond with exactly this JSON object and nothing else:
{{"isValidLocation": false}}
Do not forecast for nonsensical or fictional places.

If the location is valid, use web search to gather real-time forecasts, satellite
data, and historical climate information for that location and date, then produce
a "Weather Comfort Prediction".

Your final output for a valid location MUST be a single JSON object with this
structure. Do NOT wrap it in markdown backticks or add any other text.
The "location" and "date" fields MUST reflect what you parsed from the query,
with the date in YYYY-MM-DD format.

{{
  "location": "Paris, France",
  "date": "2024-10-27",
  "comfortScore": 7,
  "conditions": [
    {{
      "name": "Very Hot",
      "likelihood": 85,
      "description": "Temperatures are expected to be well above the seasonal average.",
      "value": 35,
      "unit": "°C"
    }}
  ],
  "summary": "Expect a very hot day that feels warmer still because of high humidity.",
  "recommendations": [
    "Stay hydrated and seek air-conditioned spaces during peak hours.",
    "Plan water-based activities to cool down."
  ]
}}

- "comfortScore" is a number from 0 (miserable) to 10 (ideal).
- "conditions" MUST contain exactly one entry for each of: {categories}.
- "likelihood" is an integer percentage from 0 to 100.
- For {measured}, give the predicted numeric "value" and its "unit".
  For the other categories set "value" and "unit" to null.
- Recommendations must be nuanced and actionable for the specific conditions.
"""

_COUNTRY_PROMPT = """\
Analyze the typical weather comfort and climate across the whole country of
"{country}" for {month_name} {year}. Use web search to find historical climate
data, long-range forecasts, and regional weather patterns.

If "{country}" is not a real, known country, respond with exactly this JSON object
and nothing else:
{{"isValidCountry": false}}

If the country is valid, your final output MUST be a single JSON object with this
structure. Do NOT wrap it in markdown backticks or add any other text.

{{
  "country": "{country}",
  "month": {month},
  "year": {year},
  "overallSummary": "High-level summary of expected weather comfort across the country.",
  "regionalBreakdowns": [
    {{
      "region": "Northern Region",
      "summary": "Temperature ranges, precipitation, and notable conditions in the north."
    }},
    {{
      "region": "Coastal Areas",
      "summary": "Humidity, wind, and sea conditions along the coast."
    }}
  ],
  "travelAdvice": [
    "Pack layered clothing for variable temperatures.",
    "Expect afternoon showers in the south."
  ]
}}

- Provide at least 2-3 regional breakdowns covering different parts of the country.
- Travel advice must be practical and follow from the climate analysis.
"""


def build_daily_prompt(query: str) -> str:
    """Build the daily comfort prediction prompt for a free-text query."""
    return _DAILY_PROMPT.format(
        query=query,
        categories=_CATEGORY_LIST,
        measured=_MEASURED_LIST,
    )


def build_country_prompt(country: str, month: int, year: int) -> str:
    """Build the monthly country overview prompt."""
    month_name = calendar.month_name[month] if 1 <= month <= 12 else str(month)
    return _COUNTRY_PROMPT.format(
        country=country,
        month=month,
        month_name=month_name,
        year=year,
    )


def _web_search_tool() -> dict:
    return {
        "type": "web_search_20250305",
        "name": "web_search",
        "max_uses": config.WEB_SEARCH_MAX_USES,
    }


def _create_client(api_key: str) -> anthropic.Anthropic:
    """Create an Anthropic client with SDK retries disabled."""
    return anthropic.Anthropic(
        api_key=api_key,
        max_retries=0,
        timeout=anthropic.Timeout(config.AI_REQUEST_TIMEOUT, connect=10.0),
    )


def _response_text(response: Any) -> str:
    """Concatenate the text blocks of a Messages API response."""
    return "".join(
        block.text
        for block in response.content
        if getattr(block, "type", None) == "text" and isinstance(block.text, str)
    )


def _dedupe(candidates: list[tuple[Any, Any]]) -> tuple[GroundingSource, ...]:
    seen: dict[str, GroundingSource] = {}
    for uri, title in candidates:
        if not isinstance(uri, str) or not isinstance(title, str) or not uri or not title:
            continue
        if uri not in seen:
            seen[uri] = GroundingSource(uri=uri, title=title)
    return tuple(seen.values())


def extract_sources(response: Any) -> tuple[GroundingSource, ...]:
    """Collect the web sources backing a response, deduplicated by uri.

    Citations attached to text blocks are preferred. If Claude cited
    nothing, the raw web search results are used instead. Entries
    without a uri or title are skipped; first occurrence order is kept.
    """
    cited: list[tuple[Any, Any]] = []
    searched: list[tuple[Any, Any]] = []

    for block in response.content:
        block_type = getattr(block, "type", None)
        if block_type == "text":
            for citation in getattr(block, "citations", None) or []:
                cited.append((getattr(citation, "url", None), getattr(citation, "title", None)))
        elif block_type == "web_search_tool_result":
            results = getattr(block, "content", None)
            # An error result is a single object, not a list.
            if isinstance(results, list):
                for result in results:
                    searched.append((getattr(result, "url", None), getattr(result, "title", None)))

    return _dedupe(cited) or _dedupe(searched)


def _complete(prompt: str) -> AIResponse:
    """Send one prompt to Claude with web search enabled.

    Raises:
        ServiceError: If the API key is missing or the API call fails.
    """
    api_key = config.get_anthropic_api_key()
    if not api_key:
        raise ServiceError(
            "ANTHROPIC_API_KEY is not set. "
            "Please set it in your environment to get predictions."
        )

    try:
        client = _create_client(api_key)
        response = client.messages.create(
            model=config.ANTHROPIC_MODEL,
            max_tokens=config.PREDICTION_MAX_TOKENS,
            tools=[_web_search_tool()],
            messages=[{"role": "user", "content": prompt}],
        )
    except anthropic.APIError as exc:
        logger.error("AI service request failed: %s", exc)
        raise ServiceError(f"AI service request failed: {exc}") from exc

    return AIResponse(raw_text=_response_text(response), sources=extract_sources(response))


def request_daily_prediction(query_text: str) -> AIResponse:
    """Ask for a daily comfort prediction.

    Args:
        query_text: Free-text query, e.g. "Weather in Paris, France on 2024-10-27".

    Returns:
        The raw response text and its cited sources.

    Raises:
        ServiceError: If the API key is missing or the API call fails.
    """
    logger.info("Requesting daily prediction for %r", query_text)
    return _complete(build_daily_prompt(query_text))


def request_country_overview(country: str, month: int, year: int) -> AIResponse:
    """Ask for a monthly climate overview of a whole country.

    Raises:
        ServiceError: If the API key is missing or the API call fails.
    """
    logger.info("Requesting country overview for %s %d/%d", country, month, year)
    return _complete(build_country_prompt(country, month, year))
