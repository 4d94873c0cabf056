from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CityMatch(BaseModel):
    """One geocoding hit. Provider extras such as ``local_names`` are kept."""

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    lat: float
    lon: float
    country: str
    state: Optional[str] = None


class TemperatureBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    temp_min: float
    temp_max: float


class ForecastEntry(BaseModel):
    """A single 3-hour interval. Only ``dt`` and ``main`` are typed."""

    model_config = ConfigDict(extra="allow")

    dt: int
    main: TemperatureBlock


class DailyForecast(ForecastEntry):
    date: str


class ForecastResult(BaseModel):
    city: Dict[str, Any] = Field(default_factory=dict)
    daily: List[DailyForecast] = Field(default_factory=list)
