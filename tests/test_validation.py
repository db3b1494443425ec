"""Tests for AI response extraction and validation."""

import json

import pytest

from comfort_predictor.errors import InvalidSubjectError, ParseError, SchemaError
from comfort_predictor.models import ConditionCategory
from comfort_predictor.validation import (
    extract_and_validate,
    extract_json_text,
    parse_conditions,
    parse_overview,
    parse_prediction,
)

from conftest import make_conditions, make_country_payload, make_daily_payload

INVALID = "Unable to find data for the specified location."


class TestExtractJsonText:
    """Locate the JSON object inside free-form AI text."""

    def test_plain_object(self):
        assert extract_json_text('{"a": 1}') == '{"a": 1}'

    def test_strips_prose_and_fences(self):
        raw = 'Here is the forecast:\n```json\n{"a": {"b": 2}}\n```\nEnjoy!'
        assert extract_json_text(raw) == '{"a": {"b": 2}}'

    def test_no_braces_raises(self):
        with pytest.raises(ParseError, match="Could not find a valid JSON object"):
            extract_json_text("Sorry, I cannot help with that.")

    def test_closing_before_opening_raises(self):
        with pytest.raises(ParseError):
            extract_json_text("} nothing here {")

    def test_empty_text_raises(self):
        with pytest.raises(ParseError):
            extract_json_text("")


class TestExtractAndValidate:
    """Parse the embedded object and honour the validity sentinels."""

    def test_wrapped_equals_bare(self, daily_json):
        wrapped = f"Sure! Based on my research:\n\n{daily_json}\n\nLet me know."
        assert extract_and_validate(wrapped, INVALID) == extract_and_validate(daily_json, INVALID)

    def test_invalid_location_sentinel(self):
        with pytest.raises(InvalidSubjectError, match=INVALID):
            extract_and_validate('{"isValidLocation": false}', INVALID)

    def test_invalid_country_sentinel(self):
        with pytest.raises(InvalidSubjectError):
            extract_and_validate('{"isValidCountry": false}', INVALID)

    def test_true_sentinel_is_ignored(self, daily_payload):
        daily_payload["isValidLocation"] = True
        parsed = extract_and_validate(json.dumps(daily_payload), INVALID)
        assert parsed["location"] == "Paris, France"

    def test_malformed_json_raises_parse_error(self):
        with pytest.raises(ParseError):
            extract_and_validate('{"location": "Paris", }', INVALID)


class TestParseConditions:
    """Condition array validation."""

    def test_returns_all_categories_in_order(self):
        conditions = parse_conditions(list(reversed(make_conditions())))
        assert [c.name for c in conditions] == list(ConditionCategory)

    def test_likelihood_is_clamped(self):
        raw = make_conditions(**{"Very Hot": 140, "Very Cold": -5})
        by_name = {c.name: c for c in parse_conditions(raw)}
        assert by_name[ConditionCategory.VERY_HOT].likelihood == 100
        assert by_name[ConditionCategory.VERY_COLD].likelihood == 0

    def test_numeric_string_likelihood(self):
        raw = make_conditions(**{"Very Wet": "72.4"})
        by_name = {c.name: c for c in parse_conditions(raw)}
        assert by_name[ConditionCategory.VERY_WET].likelihood == 72

    def test_half_likelihood_rounds_up(self):
        raw = make_conditions(**{"Very Wet": 72.5, "Very Hot": 0.5})
        by_name = {c.name: c for c in parse_conditions(raw)}
        assert by_name[ConditionCategory.VERY_WET].likelihood == 73
        assert by_name[ConditionCategory.VERY_HOT].likelihood == 1

    def test_measurement_only_for_measured_categories(self):
        raw = make_conditions()
        raw[3]["value"] = 12
        raw[3]["unit"] = "mm"
        by_name = {c.name: c for c in parse_conditions(raw)}
        assert by_name[ConditionCategory.VERY_HOT].value == 18
        assert by_name[ConditionCategory.VERY_HOT].unit == "°C"
        assert by_name[ConditionCategory.VERY_WET].value is None
        assert by_name[ConditionCategory.VERY_WET].unit is None

    def test_case_insensitive_names(self):
        raw = make_conditions()
        raw[0]["name"] = "  very HOT "
        assert parse_conditions(raw)[0].name is ConditionCategory.VERY_HOT

    def test_unknown_category_is_skipped(self):
        raw = make_conditions() + [
            {"name": "Very Foggy", "likelihood": 40, "description": "Fog."}
        ]
        assert len(parse_conditions(raw)) == 5

    def test_first_duplicate_wins(self):
        raw = make_conditions() + [
            {"name": "Very Hot", "likelihood": 99, "description": "Duplicate."}
        ]
        by_name = {c.name: c for c in parse_conditions(raw)}
        assert by_name[ConditionCategory.VERY_HOT].likelihood == 10

    def test_missing_category_raises(self):
        raw = [c for c in make_conditions() if c["name"] != "Very Windy"]
        with pytest.raises(SchemaError, match="Very Windy"):
            parse_conditions(raw)

    def test_empty_array_raises(self):
        with pytest.raises(SchemaError):
            parse_conditions([])

    def test_missing_likelihood_raises(self):
        raw = make_conditions()
        del raw[2]["likelihood"]
        with pytest.raises(SchemaError, match="likelihood"):
            parse_conditions(raw)

    def test_boolean_likelihood_raises(self):
        raw = make_conditions()
        raw[1]["likelihood"] = True
        with pytest.raises(SchemaError):
            parse_conditions(raw)


class TestParsePrediction:
    """Daily payload to PredictionData."""

    def test_parses_fields(self, daily_payload):
        prediction = parse_prediction(daily_payload)
        assert prediction.location == "Paris, France"
        assert prediction.date == "2024-10-27"
        assert prediction.comfort_score == 7
        assert len(prediction.conditions) == 5
        assert prediction.summary.startswith("A mild autumn day")
        assert len(prediction.recommendations) == 2

    def test_datetime_is_normalized_to_date(self):
        prediction = parse_prediction(make_daily_payload(date="2024-10-27T00:00:00Z"))
        assert prediction.date == "2024-10-27"

    def test_invalid_date_raises(self):
        with pytest.raises(SchemaError, match="Invalid date"):
            parse_prediction(make_daily_payload(date="next Tuesday"))

    def test_missing_location_raises(self):
        with pytest.raises(SchemaError, match="location"):
            parse_prediction(make_daily_payload(location="  "))

    def test_missing_score_raises(self):
        with pytest.raises(SchemaError, match="comfortScore"):
            parse_prediction(make_daily_payload(comfort_score=None))

    def test_out_of_range_score_is_kept_but_clamped_for_display(self):
        prediction = parse_prediction(make_daily_payload(comfort_score=12.5))
        assert prediction.comfort_score == 12.5
        assert prediction.clamped_score == 10.0

    def test_recommendations_must_be_a_list(self):
        with pytest.raises(SchemaError, match="recommendations"):
            parse_prediction(make_daily_payload(recommendations="Bring a hat"))

    def test_missing_recommendations_default_empty(self, daily_payload):
        del daily_payload["recommendations"]
        assert parse_prediction(daily_payload).recommendations == ()

    def test_round_trips_through_to_dict(self, daily_payload):
        prediction = parse_prediction(daily_payload)
        assert parse_prediction(prediction.to_dict()) == prediction


class TestParseOverview:
    """Country payload to CountryOverviewData."""

    def test_parses_fields(self, country_payload):
        overview = parse_overview(country_payload)
        assert overview.country == "Japan"
        assert overview.month == 4
        assert overview.year == 2025
        assert overview.month_name == "April"
        assert [b.region for b in overview.regional_breakdowns] == [
            "Hokkaido", "Kanto", "Okinawa",
        ]
        assert len(overview.travel_advice) == 2

    def test_missing_month_and_year_fall_back(self, country_payload):
        del country_payload["month"]
        del country_payload["year"]
        overview = parse_overview(country_payload, month=7, year=2026)
        assert overview.month == 7
        assert overview.year == 2026

    def test_month_out_of_range_raises(self):
        with pytest.raises(SchemaError, match="month"):
            parse_overview(make_country_payload(month=13))

    def test_fractional_year_raises(self):
        with pytest.raises(SchemaError, match="year"):
            parse_overview(make_country_payload(year=2025.5))

    def test_empty_breakdowns_raise(self):
        with pytest.raises(SchemaError, match="regional breakdowns"):
            parse_overview(make_country_payload(regionalBreakdowns=[]))

    def test_breakdown_without_region_raises(self):
        payload = make_country_payload(regionalBreakdowns=[{"summary": "Warm."}])
        with pytest.raises(SchemaError, match="region"):
            parse_overview(payload)

    def test_missing_summary_raises(self):
        with pytest.raises(SchemaError, match="overallSummary"):
            parse_overview(make_country_payload(overallSummary=""))
