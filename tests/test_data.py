"""
Tests for CSV parsing, sample data and the cached loader.
"""

import logging
from datetime import date

import pandas as pd
import pytest

from core import data as core_data
from core.data import (
    RECORD_COLUMNS,
    SAMPLE_AREAS,
    SAMPLE_SOURCE,
    SAMPLE_STATUSES,
    UNKNOWN_STATUS,
    generate_sample_data,
    load_dashboard_data,
    normalize_header,
    parse_csv,
    prepare_context,
)


class TestNormalizeHeader:
    def test_trims_and_lowercases(self):
        assert normalize_header("  State ") == "state"

    def test_aliases(self):
        assert normalize_header("AQI") == "aqi_value"
        assert normalize_header("PM2.5") == "pm25"
        assert normalize_header("Number of Monitoring Stations") == "station_count"
        assert normalize_header("number_of_monitoring_stations") == "station_count"


class TestParseCsv:
    def test_schema(self, records):
        assert list(records.columns) == RECORD_COLUMNS
        assert len(records) == 5

    def test_quoted_pollutant_list_survives(self, records):
        assert records.loc[0, "prominent_pollutants"] == "PM2.5, PM10"

    def test_numeric_parse_failures_default_to_zero(self, records):
        bad = records.iloc[4]
        assert bad["aqi_value"] == 0
        assert bad["station_count"] == 0
        assert records.iloc[3]["pm25"] == 0

    def test_blank_status_is_unknown(self, records):
        assert records.iloc[4]["air_quality_status"] == UNKNOWN_STATUS

    def test_missing_columns_default_to_zero(self, records):
        assert (records["so2"] == 0).all()
        assert (records["pm10"] == 0).all()

    def test_dates_parsed(self, records):
        assert records.loc[0, "date"] == pd.Timestamp("2024-01-01")

    def test_bad_date_becomes_nat(self):
        df = parse_csv("date,state,area,aqi\nnot-a-date,Delhi,Rohini,120\n2024-05-01,Delhi,Rohini,80\n")
        assert pd.isna(df.loc[0, "date"])
        assert df.loc[1, "date"] == pd.Timestamp("2024-05-01")
        assert df.loc[0, "aqi_value"] == 120

    def test_path_source(self, tmp_path, sample_csv):
        path = tmp_path / "aqi.csv"
        path.write_text(sample_csv)
        assert len(parse_csv(path)) == 5

    def test_extra_field_keeps_other_rows(self):
        text = (
            "date,state,area,aqi_value,air_quality_status,prominent_pollutants,station_count\n"
            "2024-01-01,Delhi,Rohini,120,Moderate,PM10,3\n"
            "2024-01-02,Delhi,Dwarka,210,Poor,PM2.5, PM10,4\n"
            "2024-01-03,Punjab,Amritsar,80,Satisfactory,O3,2\n"
        )
        df = parse_csv(text)
        assert len(df) == 3
        assert df["area"].tolist() == ["Rohini", "Dwarka", "Amritsar"]
        assert df.loc[1, "aqi_value"] == 210
        assert df.loc[1, "prominent_pollutants"] == "PM2.5"
        assert df.loc[2, "station_count"] == 2

    def test_day_first_dates_use_one_format(self):
        text = "date,state,area,aqi\n30-04-2025,Delhi,Rohini,120\n01-04-2025,Delhi,Rohini,80\n12-05-2025,Delhi,Rohini,90\n"
        df = parse_csv(text)
        assert df["date"].tolist() == [
            pd.Timestamp("2025-04-30"),
            pd.Timestamp("2025-04-01"),
            pd.Timestamp("2025-05-12"),
        ]

    def test_iso_dates_are_not_read_day_first(self):
        df = parse_csv("date,state,area,aqi\n2025-01-04,Delhi,Rohini,120\n,Delhi,Rohini,80\n")
        assert df.loc[0, "date"] == pd.Timestamp("2025-01-04")
        assert pd.isna(df.loc[1, "date"])


class TestGenerateSampleData:
    def test_shape_and_dates(self):
        df = generate_sample_data(n=30, seed=7, today=date(2024, 3, 31))
        assert len(df) == 30
        assert df["date"].iloc[0] == pd.Timestamp("2024-03-31")
        assert df["date"].iloc[-1] == pd.Timestamp("2024-03-02")

    def test_values_are_consistent(self):
        df = generate_sample_data(n=100, seed=3)
        assert df["aqi_value"].between(50, 349).all()
        assert df["station_count"].between(1, 10).all()
        for _, row in df.iterrows():
            assert row["area"] in SAMPLE_AREAS[row["state"]]
            assert row["air_quality_status"] == SAMPLE_STATUSES[min(int(row["aqi_value"]) // 60, 4)]
            tokens = row["prominent_pollutants"].split(", ")
            assert 1 <= len(tokens) <= 3
            assert len(set(tokens)) == len(tokens)

    def test_seed_is_deterministic(self):
        a = generate_sample_data(n=20, seed=42, today=date(2024, 1, 1))
        b = generate_sample_data(n=20, seed=42, today=date(2024, 1, 1))
        pd.testing.assert_frame_equal(a, b)


class TestLoadDashboardData:
    def test_loads_configured_file(self, tmp_path, monkeypatch, sample_csv):
        path = tmp_path / "aqi.csv"
        path.write_text(sample_csv)
        monkeypatch.setenv("AQI_DATA_PATH", str(path))
        ctx = load_dashboard_data()
        assert ctx["source"] == str(path)
        assert len(ctx["records"]) == 5
        assert ctx["states"] == ["Delhi", "Karnataka", "Maharashtra"]
        assert ctx["date_bounds"] == ("2024-01-01", "2024-02-06")

    def test_missing_file_falls_back_to_sample(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AQI_DATA_PATH", str(tmp_path / "missing.csv"))
        ctx = load_dashboard_data()
        assert ctx["source"] == SAMPLE_SOURCE
        assert len(ctx["records"]) == 200

    def test_empty_file_falls_back_to_sample(self, tmp_path, monkeypatch):
        path = tmp_path / "empty.csv"
        path.write_text("")
        monkeypatch.setenv("AQI_DATA_PATH", str(path))
        assert load_dashboard_data()["source"] == SAMPLE_SOURCE

    def test_header_only_file_falls_back_to_sample(self, tmp_path, monkeypatch):
        path = tmp_path / "header.csv"
        path.write_text("date,state,area,aqi_value\n")
        monkeypatch.setenv("AQI_DATA_PATH", str(path))
        assert load_dashboard_data()["source"] == SAMPLE_SOURCE

    def test_malformed_row_keeps_real_data(self, tmp_path, monkeypatch, sample_csv):
        path = tmp_path / "aqi.csv"
        path.write_text(sample_csv + "2024-02-07,Delhi,Rohini,150,Moderate,PM2.5, PM10,3,40\n")
        monkeypatch.setenv("AQI_DATA_PATH", str(path))
        ctx = load_dashboard_data()
        assert ctx["source"] == str(path)
        assert len(ctx["records"]) == 6

    def test_parse_error_logs_once(self, tmp_path, monkeypatch, caplog):
        def broken(_source):
            raise ValueError("bad csv")

        path = tmp_path / "aqi.csv"
        path.write_text("date\n2024-01-01\n")
        monkeypatch.setenv("AQI_DATA_PATH", str(path))
        monkeypatch.setattr(core_data, "parse_csv", broken)
        with caplog.at_level(logging.WARNING, logger="core.data"):
            ctx = load_dashboard_data()
        assert ctx["source"] == SAMPLE_SOURCE
        assert "failed to parse" in caplog.text
        assert "has no records" not in caplog.text


class TestPrepareContext:
    def test_accepts_raw_dict(self, data_ctx):
        ctx = prepare_context({"selected_state": "Delhi"}, data_ctx)
        assert ctx["filters"].selected_state == "Delhi"
        assert len(ctx["filtered"]) == 2
        assert ctx["insights"]["total_records"] == 2
        assert ctx["options"]["areas"] == ["Dwarka", "New Delhi"]

    def test_empty_context(self):
        ctx = prepare_context({}, {"records": pd.DataFrame()})
        assert ctx["filtered"].empty
        assert ctx["insights"]["total_records"] == 0

    @pytest.mark.parametrize("state,expected", [("", 5), ("Maharashtra", 2), ("Nowhere", 0)])
    def test_state_filter_counts(self, data_ctx, state, expected):
        assert len(prepare_context({"selected_state": state}, data_ctx)["filtered"]) == expected
