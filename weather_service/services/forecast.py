from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from weather_service.models import DailyForecast, ForecastEntry, ForecastResult


def forecast_date(dt: int, tz_offset_seconds: int = 0) -> str:
    """Calendar day (``YYYY-MM-DD``) of an epoch timestamp at a fixed UTC offset."""
    tz = timezone(timedelta(seconds=tz_offset_seconds))
    return datetime.fromtimestamp(dt, tz).strftime("%Y-%m-%d")


def process_forecast_data(data: Dict[str, Any], days: int = 3, tz_offset_seconds: int = 0) -> ForecastResult:
    """
    Collapse 3-hour intervals into per-day summaries.

    Entries must already be sorted by ``dt``. Each day keeps a copy of its
    first interval as the representative record, stamped with ``date``, with
    ``main.temp_min``/``main.temp_max`` widened to cover every interval of
    that day. Only the earliest ``days`` days are returned.
    """
    daily: List[DailyForecast] = []
    current_date: Optional[str] = None
    day: Optional[DailyForecast] = None

    for raw in data.get("list") or []:
        entry = ForecastEntry.model_validate(raw)
        date = forecast_date(entry.dt, tz_offset_seconds)

        if date != current_date:
            if day is not None:
                daily.append(day)
            current_date = date
            day = DailyForecast.model_validate({**entry.model_dump(), "date": date})
        else:
            day.main.temp_min = min(day.main.temp_min, entry.main.temp_min)
            day.main.temp_max = max(day.main.temp_max, entry.main.temp_max)

    if day is not None:
        daily.append(day)

    return ForecastResult(city=data.get("city") or {}, daily=daily[:days])
