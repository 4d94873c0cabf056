import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    success: bool
    body: Any = None


class HttpFetcher:
    """GET with query params; every failure collapses to ``success=False``."""

    def __init__(self, timeout_seconds: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout_seconds
        self.transport = transport

    async def get(self, url: str, params: Dict[str, Any]) -> FetchResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.get(url, params=params)
                r.raise_for_status()
                return FetchResult(success=True, body=r.json())
        except httpx.HTTPStatusError as exc:
            logger.warning("GET %s returned %s", url, exc.response.status_code)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("GET %s failed: %s", url, exc)
        except ValueError:
            logger.warning("GET %s returned a body that is not JSON", url)
        return FetchResult(success=False)
