from typing import List

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from weather_service.config import settings
from weather_service.logging_config import configure_logging
from weather_service.models import CityMatch, ForecastResult
from weather_service.services.weather import WeatherClient

configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name)

weather = WeatherClient.from_settings(settings)


@app.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name}


@app.get("/")
def root():
    return JSONResponse({"service": settings.app_name, "docs": "/docs"})


@app.get("/v1/cities", response_model=List[CityMatch])
async def search_cities(q: str = Query(..., min_length=1, description="City name, e.g. 'London'")):
    matches = await weather.search_city(q)
    if matches is None:
        raise HTTPException(status_code=404, detail=f"City not found: {q!r}")
    return matches


@app.get("/v1/weather/current")
async def current_weather(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    units: str = Query("metric", pattern="^(metric|imperial)$"),
):
    data = await weather.get_current_weather(lat, lon, units)
    if data is None:
        raise HTTPException(status_code=404, detail="Current weather unavailable")
    return data


@app.get("/v1/weather/forecast", response_model=ForecastResult)
async def forecast(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    units: str = Query("metric", pattern="^(metric|imperial)$"),
):
    result = await weather.get_forecast(lat, lon, units)
    if result is None:
        raise HTTPException(status_code=404, detail="Forecast unavailable")
    return result
