"""
Fetch operations for snapshots, overall status and history series.

Each public fetch returns a :class:`FetchResult` with one of three outcomes:

- SUCCESS: the payload was usable; ``value`` holds the parsed data.
- SOFT_FAILURE: a response arrived but reported ``success: false`` or had an
  unusable shape. Nothing should be rendered.
- HARD_FAILURE: the request itself failed (network error, timeout, 5xx).

Callers decide what each outcome means for the user; this module only
classifies.
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .client import MonitoringClient
from .exceptions import ServiceConnectionError, ServiceResponseError
from .models import FetchResult, HistoricalPoint, LocationSnapshot

logger = logging.getLogger(__name__)

_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d{2}:?\d{2}$|$)")


def _to_float(value: Any, field_name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ServiceResponseError(f"Field '{field_name}' is not numeric: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ServiceResponseError(
            f"Field '{field_name}' is not numeric: {value!r}"
        ) from e


def parse_timestamp(value: Any) -> datetime:
    """
    Parse an ``event_time`` value.

    Accepts ISO-8601 strings (a trailing ``Z`` is read as UTC) and epoch
    milliseconds. Naive ISO timestamps are kept naive and therefore read as
    local time when formatted.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)

    if not isinstance(value, str) or not value:
        raise ServiceResponseError(f"Invalid event_time: {value!r}")

    date_str = value.replace("Z", "+00:00")
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    date_str = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), date_str)
    try:
        return datetime.fromisoformat(date_str)
    except ValueError as e:
        raise ServiceResponseError(f"Invalid event_time: {value!r}") from e


def parse_snapshot(item: Any) -> LocationSnapshot:
    """Build a :class:`LocationSnapshot` from one ``/api/latest`` item."""
    if not isinstance(item, dict):
        raise ServiceResponseError(f"Snapshot item is not an object: {item!r}")

    status = item.get("safety_status")
    if not isinstance(status, str):
        raise ServiceResponseError(f"Snapshot has no safety_status: {item!r}")

    location_id = item.get("location_id") or item.get("locationKey")

    return LocationSnapshot(
        location=str(item.get("location") or ""),
        avg_ice_thickness=_to_float(item.get("avg_ice_thickness"), "avg_ice_thickness"),
        avg_surface_temperature=_to_float(
            item.get("avg_surface_temperature"), "avg_surface_temperature"
        ),
        max_snow_accumulation=_to_float(
            item.get("max_snow_accumulation"), "max_snow_accumulation"
        ),
        safety_status=status,
        location_id=str(location_id) if location_id else None,
    )


def parse_history_point(item: Any) -> HistoricalPoint:
    """Build a :class:`HistoricalPoint` from one history item."""
    if not isinstance(item, dict):
        raise ServiceResponseError(f"History item is not an object: {item!r}")

    return HistoricalPoint(
        event_time=parse_timestamp(item.get("event_time")),
        avg_ice_thickness=_to_float(item.get("avg_ice_thickness"), "avg_ice_thickness"),
        avg_surface_temperature=_to_float(
            item.get("avg_surface_temperature"), "avg_surface_temperature"
        ),
    )


def _successful_envelope(payload: Any) -> bool:
    return isinstance(payload, dict) and bool(payload.get("success"))


async def fetch_latest_snapshots(
    client: MonitoringClient,
) -> FetchResult[List[LocationSnapshot]]:
    """Fetch and parse the current snapshot for every location."""
    try:
        payload = await client.get_latest()
    except ServiceConnectionError as e:
        return FetchResult.hard(str(e), e)
    except ServiceResponseError as e:
        return FetchResult.soft(str(e), e)

    if not _successful_envelope(payload):
        return FetchResult.soft("latest snapshot not ready (success=false)")

    items = payload.get("data")
    if not isinstance(items, list):
        return FetchResult.soft("latest snapshot payload has no data list")

    try:
        snapshots = [parse_snapshot(item) for item in items]
    except ServiceResponseError as e:
        return FetchResult.soft(str(e), e)

    return FetchResult.ok(snapshots)


async def fetch_overall_status(client: MonitoringClient) -> FetchResult[str]:
    """Fetch the aggregate canal safety status."""
    try:
        payload = await client.get_status()
    except ServiceConnectionError as e:
        return FetchResult.hard(str(e), e)
    except ServiceResponseError as e:
        return FetchResult.soft(str(e), e)

    if not _successful_envelope(payload):
        return FetchResult.soft("overall status not ready (success=false)")

    status = payload.get("overallStatus")
    if not isinstance(status, str) or not status:
        return FetchResult.soft("status payload has no overallStatus")

    return FetchResult.ok(status)


async def fetch_history_series(
    client: MonitoringClient, location_key: str, limit: int
) -> List[HistoricalPoint]:
    """
    Fetch one location's recent history, ordered as returned (oldest first).

    Raises:
        ServiceConnectionError: If the request fails
        ServiceResponseError: If the payload is unusable
    """
    payload = await client.get_history(location_key, limit)

    if not isinstance(payload, dict):
        raise ServiceResponseError(f"History for {location_key} is not an object")
    if payload.get("success") is False:
        raise ServiceResponseError(f"History for {location_key} not ready (success=false)")

    items = payload.get("data")
    if not isinstance(items, list):
        raise ServiceResponseError(f"History for {location_key} has no data list")

    return [parse_history_point(item) for item in items]


async def fetch_all_history(
    client: MonitoringClient, location_keys: Sequence[str], limit: int
) -> FetchResult[Dict[str, List[HistoricalPoint]]]:
    """
    Fetch history for every location concurrently and join the results.

    All requests run to completion before anything is returned. If any of
    them fails the whole result is a failure; the outcome is HARD when any
    request failed at the transport level and SOFT otherwise.
    """
    logger.debug(
        f"Fetching {limit} history points for {len(location_keys)} locations concurrently"
    )
    tasks = [
        fetch_history_series(client, location_key, limit)
        for location_key in location_keys
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)

    series: Dict[str, List[HistoricalPoint]] = {}
    failures = []
    for location_key, result in zip(location_keys, results):
        if isinstance(result, BaseException):
            failures.append((location_key, result))
        else:
            series[location_key] = result

    if not failures:
        return FetchResult.ok(series)

    # Anything other than our own error types is a bug, not a service problem
    for _, error in failures:
        if not isinstance(error, (ServiceConnectionError, ServiceResponseError)):
            raise error

    reason = "; ".join(f"{key}: {error}" for key, error in failures)
    first_error = failures[0][1]
    if any(isinstance(error, ServiceConnectionError) for _, error in failures):
        return FetchResult.hard(reason, first_error)
    return FetchResult.soft(reason, first_error)
