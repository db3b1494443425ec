"""Tests for history chart geometry and SVG rendering."""

import datetime

import pytest

from comfort_predictor.chart import Metric, Padding, _tick_indices, build_chart, render_svg
from comfort_predictor.models import ConditionCategory
from comfort_predictor.validation import parse_prediction

from conftest import make_conditions, make_daily_payload


def entry(date, comfort_score=7, **likelihoods):
    payload = make_daily_payload(date=date, comfort_score=comfort_score)
    payload["conditions"] = make_conditions(**likelihoods)
    return parse_prediction(payload)


def dates(count, start=datetime.date(2024, 1, 1)):
    return [(start + datetime.timedelta(days=i)).isoformat() for i in range(count)]


class TestMetric:
    """Metric metadata."""

    def test_comfort_score(self):
        assert Metric.COMFORT_SCORE.label == "Comfort Score"
        assert Metric.COMFORT_SCORE.max_value == 10
        assert Metric.COMFORT_SCORE.category is None

    def test_condition_metric(self):
        assert Metric.VERY_WET.label == "Very Wet"
        assert Metric.VERY_WET.max_value == 100
        assert Metric.VERY_WET.category is ConditionCategory.VERY_WET

    def test_every_metric_has_a_color(self):
        assert all(metric.color.startswith("#") for metric in Metric)

    def test_value_of(self):
        item = entry("2024-10-27", comfort_score=6, **{"Very Windy": 45})
        assert Metric.COMFORT_SCORE.value_of(item) == 6
        assert Metric.VERY_WINDY.value_of(item) == 45


class TestBuildChart:
    """Point placement and paths in the default 500x250 viewBox."""

    def test_empty_history(self):
        chart = build_chart([])
        assert chart.is_empty
        assert chart.path == ""
        assert chart.x_ticks == ()

    def test_single_point_is_centered(self):
        chart = build_chart([entry("2024-10-27", comfort_score=7)])

        assert len(chart.points) == 1
        point = chart.points[0]
        assert point.x == pytest.approx(260)
        assert point.y == pytest.approx(74)
        assert chart.path == ""

    def test_two_points_span_plot_width(self):
        chart = build_chart([
            entry("2024-10-29", comfort_score=10),
            entry("2024-10-27", comfort_score=0),
        ])

        first, last = chart.points
        assert first.date == datetime.date(2024, 10, 27)
        assert first.x == pytest.approx(40)
        assert first.y == pytest.approx(200)
        assert last.x == pytest.approx(480)
        assert last.y == pytest.approx(20)
        assert chart.path == "M40 200 L480 20"

    def test_x_is_proportional_to_days(self):
        chart = build_chart([entry("2024-10-01"), entry("2024-10-02"), entry("2024-10-05")])
        assert [p.x for p in chart.points] == pytest.approx([40, 150, 480])

    def test_condition_metric_uses_percentage_domain(self):
        chart = build_chart([entry("2024-10-27", **{"Very Wet": 60})], metric=Metric.VERY_WET)
        assert chart.points[0].y == pytest.approx(92)
        assert [t.label for t in chart.y_ticks] == ["0", "25", "50", "75", "100"]

    def test_out_of_domain_values_are_clamped(self):
        chart = build_chart([entry("2024-10-27", comfort_score=12.5), entry("2024-10-28", comfort_score=-1)])
        assert chart.points[0].y == pytest.approx(20)
        assert chart.points[1].y == pytest.approx(200)
        assert chart.points[0].value == 12.5

    def test_y_ticks(self):
        chart = build_chart([entry("2024-10-27")])
        assert [t.label for t in chart.y_ticks] == ["0", "2.5", "5", "7.5", "10"]
        assert [t.position for t in chart.y_ticks] == pytest.approx([200, 155, 110, 65, 20])

    def test_custom_geometry(self):
        chart = build_chart(
            [entry("2024-10-27")],
            width=300,
            height=100,
            padding=Padding(top=0, right=0, bottom=0, left=0),
        )
        assert chart.points[0].x == pytest.approx(150)
        assert chart.points[0].y == pytest.approx(30)


class TestXTicks:
    """Date labels along the x axis."""

    def test_all_dates_when_five_or_fewer(self):
        chart = build_chart([entry(d) for d in dates(4)])
        assert [t.label for t in chart.x_ticks] == ["Jan 1", "Jan 2", "Jan 3", "Jan 4"]

    def test_five_spread_dates_when_more(self):
        chart = build_chart([entry(d) for d in dates(10)])
        assert [t.label for t in chart.x_ticks] == ["Jan 1", "Jan 3", "Jan 5", "Jan 7", "Jan 10"]

    def test_repeated_dates_are_labelled_once(self):
        chart = build_chart([entry("2024-10-27"), entry("2024-10-27"), entry("2024-10-28")])
        assert len(chart.points) == 3
        assert [t.label for t in chart.x_ticks] == ["Oct 27", "Oct 28"]

    @pytest.mark.parametrize("count,expected", [
        (1, [0]),
        (5, [0, 1, 2, 3, 4]),
        (6, [0, 1, 2, 3, 5]),
        (9, [0, 2, 4, 6, 8]),
        (13, [0, 3, 6, 9, 12]),
    ])
    def test_tick_indices(self, count, expected):
        assert _tick_indices(count) == expected


class TestRenderSvg:
    """Inline SVG output."""

    def test_renders_line_and_points(self):
        chart = build_chart([entry("2024-10-27"), entry("2024-10-28")])
        svg = render_svg(chart, Metric.COMFORT_SCORE)

        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert f'd="{chart.path}"' in svg
        assert svg.count("<circle") == 2
        assert Metric.COMFORT_SCORE.color in svg
        assert "Oct 27" in svg

    def test_single_point_has_no_path(self):
        svg = render_svg(build_chart([entry("2024-10-27")]), Metric.VERY_HOT)
        assert "<path" not in svg
        assert svg.count("<circle") == 1
