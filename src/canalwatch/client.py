"""
HTTP client for the canal monitoring service.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from .config import DashboardConfig
from .exceptions import ServiceConnectionError, ServiceResponseError

logger = logging.getLogger(__name__)


class MonitoringClient:
    """
    Async client for the monitoring service's JSON API.

    Endpoints (relative to ``base_url``):

    - ``GET /api/latest`` - current snapshot for every location
    - ``GET /api/status`` - aggregate canal safety status
    - ``GET /api/history/{location_key}?limit=N`` - recent points per location

    Transport problems raise :class:`ServiceConnectionError`; responses that
    arrive but cannot be used raise :class:`ServiceResponseError`.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        config: Optional[DashboardConfig] = None,
    ):
        self.config = config or DashboardConfig()
        self.base_url = (base_url or self.config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else self.config.timeout
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "MonitoringClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _make_request(
        self, endpoint: str, params: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        Make a request to the monitoring service with error handling.

        A 404 means the service has no such resource yet (e.g. no history
        for a location), so it is a protocol outcome the next cycle will see
        again; every other failing status is treated as transport trouble.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise ServiceConnectionError(f"Request timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise ServiceResponseError(f"Endpoint not found: {endpoint}") from e
            elif e.response.status_code == 429:
                raise ServiceConnectionError("Rate limit exceeded") from e
            elif e.response.status_code >= 500:
                raise ServiceConnectionError(
                    "Monitoring service temporarily unavailable"
                ) from e
            else:
                raise ServiceConnectionError(
                    f"HTTP error {e.response.status_code}: {e}"
                ) from e
        except httpx.RequestError as e:
            raise ServiceConnectionError(f"Network error: {e}") from e
        except json.JSONDecodeError as e:
            raise ServiceResponseError(f"Invalid JSON response: {e}") from e

    async def get_latest(self) -> Any:
        """Fetch the raw ``/api/latest`` envelope."""
        return await self._make_request("api/latest")

    async def get_status(self) -> Any:
        """Fetch the raw ``/api/status`` envelope."""
        return await self._make_request("api/status")

    async def get_history(self, location_key: str, limit: int) -> Any:
        """
        Fetch the raw ``/api/history/{location_key}`` envelope.

        Args:
            location_key: Canonical location key (e.g. 'dowslake')
            limit: Maximum number of points to return
        """
        logger.debug(f"Requesting {limit} history points for {location_key}")
        return await self._make_request(
            f"api/history/{location_key}", params={"limit": str(limit)}
        )
