"""
Tests for the HTTP API.
WeatherClient is fully mocked so no live Redis or OpenWeather connection is needed.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Minimal env so pydantic-settings doesn't require a real .env file
# ---------------------------------------------------------------------------
import os
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")
os.environ.setdefault("CACHE_BACKEND", "memory")

from weather_service.models import CityMatch, ForecastResult


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

SAMPLE_CURRENT = {
    "name": "London",
    "sys": {"country": "GB"},
    "dt": 1700000000,
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky", "icon": "01d"}],
    "main": {"temp": 15.0, "temp_min": 13.0, "temp_max": 17.0, "humidity": 60},
    "cod": 200,
}

SAMPLE_FORECAST = ForecastResult.model_validate({
    "city": {"name": "London", "country": "GB"},
    "daily": [
        {
            "dt": 1704096000,
            "date": "2024-01-01",
            "main": {"temp": 12.0, "temp_min": 10.0, "temp_max": 22.0},
            "weather": [{"description": "clear sky"}],
        }
    ],
})

SAMPLE_GEO = [CityMatch(name="London", lat=51.5073, lon=-0.1276, country="GB", state="England")]


def _make_weather(geo=SAMPLE_GEO, current=SAMPLE_CURRENT, forecast=SAMPLE_FORECAST):
    mock = MagicMock()
    mock.search_city = AsyncMock(return_value=geo)
    mock.get_current_weather = AsyncMock(return_value=current)
    mock.get_forecast = AsyncMock(return_value=forecast)
    return mock


@pytest.fixture()
def weather():
    return _make_weather()


@pytest.fixture()
def client(weather):
    with patch("weather_service.main.weather", weather):
        from weather_service.main import app
        with TestClient(app) as c:
            yield c


def _client_with(weather_mock):
    from weather_service.main import app
    return patch("weather_service.main.weather", weather_mock), app


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "docs" in resp.json()


# ---------------------------------------------------------------------------
# /v1/cities
# ---------------------------------------------------------------------------

def test_search_cities_happy_path(client, weather):
    resp = client.get("/v1/cities?q=London")
    assert resp.status_code == 200
    data = resp.json()
    assert data[0]["name"] == "London"
    assert data[0]["state"] == "England"
    weather.search_city.assert_awaited_once_with("London")


def test_search_cities_not_found_returns_404():
    weather_mock = _make_weather(geo=None)
    patcher, app = _client_with(weather_mock)
    with patcher, TestClient(app) as c:
        resp = c.get("/v1/cities?q=XxXNotACity")
    assert resp.status_code == 404
    assert "not found" in resp.json()["detail"].lower()


def test_empty_query_param(client):
    resp = client.get("/v1/cities?q=")
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# /v1/weather/current
# ---------------------------------------------------------------------------

def test_current_weather_happy_path(client, weather):
    resp = client.get("/v1/weather/current?lat=51.5&lon=-0.13&units=imperial")
    assert resp.status_code == 200
    assert resp.json()["name"] == "London"
    weather.get_current_weather.assert_awaited_once_with(51.5, -0.13, "imperial")


def test_current_weather_unavailable_returns_404():
    patcher, app = _client_with(_make_weather(current=None))
    with patcher, TestClient(app) as c:
        resp = c.get("/v1/weather/current?lat=51.5&lon=-0.13")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# /v1/weather/forecast
# ---------------------------------------------------------------------------

def test_forecast_happy_path(client):
    resp = client.get("/v1/weather/forecast?lat=51.5&lon=-0.13")
    assert resp.status_code == 200
    data = resp.json()
    assert data["city"]["name"] == "London"
    assert data["daily"][0]["date"] == "2024-01-01"
    assert data["daily"][0]["main"]["temp_max"] == 22.0
    assert data["daily"][0]["weather"][0]["description"] == "clear sky"


def test_forecast_unavailable_returns_404():
    patcher, app = _client_with(_make_weather(forecast=None))
    with patcher, TestClient(app) as c:
        resp = c.get("/v1/weather/forecast?lat=51.5&lon=-0.13")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Input validation — 422 errors
# ---------------------------------------------------------------------------

def test_missing_query_param(client):
    resp = client.get("/v1/cities")
    assert resp.status_code == 422


def test_invalid_units_param(client):
    resp = client.get("/v1/weather/current?lat=0&lon=0&units=kelvin")
    assert resp.status_code == 422


def test_coord_out_of_range_lat(client):
    resp = client.get("/v1/weather/current?lat=999&lon=0")
    assert resp.status_code == 422


def test_coord_out_of_range_lon(client):
    resp = client.get("/v1/weather/forecast?lat=0&lon=999")
    assert resp.status_code == 422
