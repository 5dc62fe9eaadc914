from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class ThresholdsModel(BaseModel):
    poor_aqi: float = 200.0
    good_aqi: float = 100.0
    correlation_min: float = 0.3


class DateRangeModel(BaseModel):
    start: str = ""
    end: str = ""


class FilterStateModel(BaseModel):
    selected_state: str = ""
    selected_area: str = ""
    date_range: DateRangeModel = Field(default_factory=DateRangeModel)
    selected_pollutants: List[str] = Field(default_factory=list)
    top_n: int = 5
    thresholds: ThresholdsModel = Field(default_factory=ThresholdsModel)


class MetaSourceResponse(BaseModel):
    source: str
    records: int
    date_bounds: Tuple[Optional[str], Optional[str]]
