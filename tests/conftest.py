"""
Shared fixtures for canalwatch tests.
"""

import threading
from typing import List
from unittest.mock import AsyncMock

import pytest

from canalwatch.client import MonitoringClient
from canalwatch.models import ChartState

from payloads import make_history, make_latest


class RecordingChart:
    """Chart handle that records redraws instead of drawing."""

    def __init__(self, target, spec, data: ChartState):
        self.target = target
        self.spec = spec
        self.data = data
        self.update_count = 0
        self.update_thread = None

    def update(self) -> None:
        self.update_count += 1
        self.update_thread = threading.get_ident()


class RecordingChartBackend:
    def __init__(self):
        self.created: List[RecordingChart] = []

    def create(self, target, spec, data):
        chart = RecordingChart(target, spec, data)
        self.created.append(chart)
        return chart


@pytest.fixture
def latest_payload():
    return make_latest()


@pytest.fixture
def status_payload():
    return {"success": True, "overallStatus": "Caution"}


@pytest.fixture
def chart_backend():
    return RecordingChartBackend()


@pytest.fixture
def service_client(latest_payload, status_payload):
    """A mocked monitoring client answering every endpoint successfully."""
    client = AsyncMock(spec=MonitoringClient)
    client.get_latest.return_value = latest_payload
    client.get_status.return_value = status_payload

    async def history(location_key, limit):
        return make_history(limit)

    client.get_history.side_effect = history
    return client
