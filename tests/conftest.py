"""Shared test fixtures: AI payloads, fake API responses, and stores."""

import json
from types import SimpleNamespace

import pytest

from comfort_predictor.storage import LocalStore


def make_conditions(**likelihoods):
    """Build the five-condition array, overriding likelihoods by category name."""
    base = [
        {
            "name": "Very Hot",
            "likelihood": 10,
            "description": "Temperatures near the seasonal average.",
            "value": 18,
            "unit": "°C",
        },
        {
            "name": "Very Cold",
            "likelihood": 15,
            "description": "Cool mornings but no frost.",
            "value": 8,
            "unit": "°C",
        },
        {
            "name": "Very Windy",
            "likelihood": 30,
            "description": "Breezy in the afternoon.",
            "value": 25,
            "unit": "km/h",
        },
        {
            "name": "Very Wet",
            "likelihood": 60,
            "description": "Showers likely in the evening.",
            "value": None,
            "unit": None,
        },
        {
            "name": "Very Uncomfortable",
            "likelihood": 20,
            "description": "Mild humidity.",
            "value": None,
            "unit": None,
        },
    ]
    for cond in base:
        if cond["name"] in likelihoods:
            cond["likelihood"] = likelihoods[cond["name"]]
    return base


def make_daily_payload(location="Paris, France", date="2024-10-27", comfort_score=7, **overrides):
    payload = {
        "location": location,
        "date": date,
        "comfortScore": comfort_score,
        "conditions": make_conditions(),
        "summary": "A mild autumn day with evening showers.",
        "recommendations": [
            "Carry an umbrella after 6pm.",
            "Plan outdoor sightseeing for the morning.",
        ],
    }
    payload.update(overrides)
    return payload


def make_country_payload(**overrides):
    payload = {
        "country": "Japan",
        "month": 4,
        "year": 2025,
        "overallSummary": "Mild spring weather with cherry blossoms across most regions.",
        "regionalBreakdowns": [
            {"region": "Hokkaido", "summary": "Cool, with lingering snow in the mountains."},
            {"region": "Kanto", "summary": "Pleasant temperatures and occasional rain."},
            {"region": "Okinawa", "summary": "Warm and humid, early rainy season."},
        ],
        "travelAdvice": [
            "Pack a light jacket for cool evenings.",
            "Book early for cherry blossom season.",
        ],
    }
    payload.update(overrides)
    return payload


def text_block(text, citations=None):
    return SimpleNamespace(type="text", text=text, citations=citations)


def citation(url, title):
    return SimpleNamespace(
        type="web_search_result_location",
        url=url,
        title=title,
        cited_text="...",
        encrypted_index="idx",
    )


def search_result_block(*results):
    return SimpleNamespace(
        type="web_search_tool_result",
        tool_use_id="srvtoolu_1",
        content=[
            SimpleNamespace(type="web_search_result", url=url, title=title)
            for url, title in results
        ],
    )


def fake_message(*blocks):
    """A stand-in for anthropic.types.Message with the given content blocks."""
    return SimpleNamespace(content=list(blocks))


@pytest.fixture()
def daily_payload():
    return make_daily_payload()


@pytest.fixture()
def daily_json(daily_payload):
    return json.dumps(daily_payload)


@pytest.fixture()
def country_payload():
    return make_country_payload()


@pytest.fixture()
def country_json(country_payload):
    return json.dumps(country_payload)


@pytest.fixture()
def store(tmp_path):
    return LocalStore(tmp_path / "local_storage.json")


@pytest.fixture()
def memory_store():
    return LocalStore()
