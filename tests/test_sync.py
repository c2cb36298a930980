"""
Tests for the blocking entry points.
"""

from unittest.mock import patch

import pytest

from canalwatch.config import DashboardConfig
from canalwatch.sync import run_async, run_dashboard_sync


async def _double(x):
    return x * 2


def test_run_async():
    assert run_async(_double, 5) == 10


@pytest.mark.asyncio
async def test_run_async_inside_loop_raises():
    with pytest.raises(RuntimeError, match="existing asyncio event loop"):
        run_async(_double, 5)


def test_run_dashboard_sync_once(service_client, chart_backend):
    with patch("canalwatch.controller.MonitoringClient", return_value=service_client), patch(
        "canalwatch.charts.MatplotlibChartBackend", return_value=chart_backend
    ):
        controller = run_dashboard_sync(DashboardConfig(), once=True)

    assert controller.cycle_count == 1
    assert controller.last_report.cards_rendered == 3
    assert controller.bindings.get("overallStatus").text == "Caution"
    assert len(chart_backend.created) == 2
    service_client.close.assert_awaited_once()
