"""
Tests for text insight generation.
"""

from core.analysis import analyze_data, empty_insights
from core.filters import FilterState, Thresholds
from core.insights import generate_insights


def test_full_insight_list(records, no_filters):
    lines = generate_insights(analyze_data(records), no_filters)
    assert lines == [
        "Overall air quality is moderate with an average AQI of 130.0",
        "Delhi has the highest average AQI of 250.0",
        "New Delhi has the highest average AQI of 300.0",
        "Positive correlation (0.98) between monitoring stations and AQI",
        "Mondays have the highest average AQI of 150.0",
        "PM2.5 is the most prominent pollutant (40.0% of records)",
    ]


def test_empty_insights_only_report_overall(no_filters):
    assert generate_insights(empty_insights(), no_filters) == [
        "Overall air quality is good with an average AQI of 0.0",
    ]


def test_filter_specific_lines(records):
    filters = FilterState(selected_state="Delhi", selected_pollutants=["PM2.5", "PM10"])
    lines = generate_insights(analyze_data(records), filters)
    assert lines[-2] == "Analysis filtered for Delhi state"
    assert lines[-1] == "Showing data for pollutants: PM2.5, PM10"


def test_weak_correlation_is_omitted(no_filters):
    insights = empty_insights()
    insights["correlations"]["stations_aqi"] = 0.3
    assert not any("correlation" in line for line in generate_insights(insights, no_filters))


def test_negative_correlation(no_filters):
    insights = empty_insights()
    insights["correlations"]["stations_aqi"] = -0.456
    assert "Negative correlation (-0.46) between monitoring stations and AQI" in generate_insights(insights, no_filters)


def test_correlation_threshold_is_configurable():
    insights = empty_insights()
    insights["correlations"]["stations_aqi"] = 0.5
    strict = FilterState(thresholds=Thresholds(correlation_min=0.6))
    assert not any("correlation" in line for line in generate_insights(insights, strict))


def test_weekday_ties_pick_first_day(no_filters):
    insights = empty_insights()
    insights["weekday_stats"] = [
        {"day": "Monday", "avg_aqi": 80.0, "avg_stations": 1.0},
        {"day": "Friday", "avg_aqi": 80.0, "avg_stations": 1.0},
    ]
    assert "Mondays have the highest average AQI of 80.0" in generate_insights(insights, no_filters)
