"""
Shared fixtures: a small, hand-checkable AQI table.

Rows (weekday in brackets):
    2024-01-01 [Mon] Delhi/New Delhi        300  stations 8
    2024-01-02 [Tue] Delhi/Dwarka           200  stations 6
    2024-01-08 [Mon] Maharashtra/Mumbai     100  stations 4
    2024-02-05 [Mon] Maharashtra/Pune        50  stations 2
    2024-02-06 [Tue] Karnataka/Bangalore    bad AQI, blank status, bad stations
"""

import pytest

from core import data as core_data
from core.data import build_data_context, parse_csv
from core.filters import FilterState

SAMPLE_CSV = """date,state,area,aqi_value,air_quality_status,prominent_pollutants,Number of Monitoring Stations,PM2.5
2024-01-01,Delhi,New Delhi,300,Poor,"PM2.5, PM10",8,150
2024-01-02,Delhi,Dwarka,200,Moderate,PM2.5,6,100
2024-01-08,Maharashtra,Mumbai,100,Satisfactory,"PM10, O3",4,50
2024-02-05,Maharashtra,Pune,50,Good,O3,2,
2024-02-06,Karnataka,Bangalore,abc,,NO2,x,20
"""


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def records():
    return parse_csv(SAMPLE_CSV)


@pytest.fixture
def data_ctx(records):
    return build_data_context(records, "test.csv")


@pytest.fixture
def no_filters() -> FilterState:
    return FilterState()


@pytest.fixture(autouse=True)
def _clear_loader_cache():
    core_data._load_dashboard_data_cached.cache_clear()
    yield
    core_data._load_dashboard_data_cached.cache_clear()
