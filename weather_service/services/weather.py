import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from weather_service.config import Settings
from weather_service.models import CityMatch, ForecastResult
from weather_service.services.cache import BaseCache, make_cache, query_digest, rounded_coords
from weather_service.services.forecast import process_forecast_data
from weather_service.services.http import HttpFetcher

logger = logging.getLogger(__name__)


class WeatherClient:
    """
    Cached access to the OpenWeatherMap geocoding, current weather and
    forecast endpoints.

    Every failure (transport error, non-2xx status, empty geocoding result)
    comes back as ``None``. ``None`` is never written to the cache, so a
    failed lookup is retried on the next call.
    """

    def __init__(
        self,
        api_key: str,
        cache: BaseCache,
        fetcher: Optional[HttpFetcher] = None,
        base_url: str = "https://api.openweathermap.org/data/2.5",
        geo_url: str = "https://api.openweathermap.org/geo/1.0",
        ttl_city_search: int = 60 * 60,
        ttl_current: int = 30 * 60,
        ttl_forecast: int = 60 * 60,
        coord_decimals: int = 4,
        forecast_days: int = 3,
        use_city_timezone: bool = False,
    ):
        self.api_key = api_key
        self.cache = cache
        self.fetcher = fetcher or HttpFetcher()
        self.base_url = base_url.rstrip("/")
        self.geo_url = geo_url.rstrip("/")
        self.ttl_city_search = ttl_city_search
        self.ttl_current = ttl_current
        self.ttl_forecast = ttl_forecast
        self.coord_decimals = coord_decimals
        self.forecast_days = forecast_days
        self.use_city_timezone = use_city_timezone

    @classmethod
    def from_settings(cls, settings: Settings) -> "WeatherClient":
        return cls(
            api_key=settings.openweather_api_key,
            cache=make_cache(settings.cache_backend, settings.redis_url),
            fetcher=HttpFetcher(timeout_seconds=settings.http_timeout_seconds),
            base_url=settings.openweather_base_url,
            geo_url=settings.openweather_geo_url,
            ttl_city_search=settings.cache_ttl_city_search_seconds,
            ttl_current=settings.cache_ttl_current_seconds,
            ttl_forecast=settings.cache_ttl_forecast_seconds,
            coord_decimals=settings.cache_coord_round_decimals,
            forecast_days=settings.forecast_days,
            use_city_timezone=settings.forecast_use_city_timezone,
        )

    # ── Cache keys ───────────────────────────────────────────────────────────

    def city_search_key(self, query: str) -> str:
        return f"city_search_{query_digest(query)}"

    def current_weather_key(self, lat: float, lon: float, units: str) -> str:
        rlat, rlon = rounded_coords(lat, lon, self.coord_decimals)
        return f"current_weather_{rlat}_{rlon}_{units}"

    def forecast_key(self, lat: float, lon: float, units: str) -> str:
        rlat, rlon = rounded_coords(lat, lon, self.coord_decimals)
        return f"forecast_{rlat}_{rlon}_{units}"

    # ── Operations ───────────────────────────────────────────────────────────

    async def search_city(self, query: str) -> Optional[List[CityMatch]]:
        async def compute():
            res = await self.fetcher.get(
                f"{self.geo_url}/direct",
                {"q": query, "limit": 5, "appid": self.api_key},
            )
            if not (res.success and res.body):
                return None
            try:
                matches = [CityMatch.model_validate(r) for r in res.body]
            except (ValidationError, TypeError) as exc:
                logger.warning("unusable geocoding payload for %r: %s", query, exc)
                return None
            return [m.model_dump(mode="json") for m in matches]

        results = await self.cache.remember(self.city_search_key(query), self.ttl_city_search, compute)
        if results is None:
            return None
        return [CityMatch.model_validate(r) for r in results]

    async def get_current_weather(self, lat: float, lon: float, units: str = "metric") -> Optional[Dict[str, Any]]:
        async def compute():
            res = await self.fetcher.get(
                f"{self.base_url}/weather",
                {"lat": lat, "lon": lon, "units": units, "appid": self.api_key},
            )
            return res.body if res.success else None

        return await self.cache.remember(self.current_weather_key(lat, lon, units), self.ttl_current, compute)

    async def get_forecast(self, lat: float, lon: float, units: str = "metric") -> Optional[ForecastResult]:
        async def compute():
            res = await self.fetcher.get(
                f"{self.base_url}/forecast",
                {"lat": lat, "lon": lon, "units": units, "appid": self.api_key},
            )
            if not res.success:
                return None
            try:
                return self._aggregate(res.body).model_dump(mode="json")
            except (ValidationError, AttributeError, TypeError, ValueError, OverflowError, OSError) as exc:
                logger.warning("unusable forecast payload for %s,%s: %s", lat, lon, exc)
                return None

        result = await self.cache.remember(self.forecast_key(lat, lon, units), self.ttl_forecast, compute)
        if result is None:
            return None
        return ForecastResult.model_validate(result)

    def _aggregate(self, data: Dict[str, Any]) -> ForecastResult:
        offset = 0
        if self.use_city_timezone:
            offset = int((data.get("city") or {}).get("timezone") or 0)
        return process_forecast_data(data, days=self.forecast_days, tz_offset_seconds=offset)
