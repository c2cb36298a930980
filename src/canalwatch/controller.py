"""
One refresh cycle of the canal dashboard.

A cycle runs two paths in order:

Card path
    ``/api/latest`` then ``/api/status``, strictly in that order. A transport
    failure on either request ends the whole cycle and shows a user-visible
    notice; the chart path is not attempted. A ``success: false`` or
    malformed payload is skipped silently (logged at INFO) and never shown
    to the user.

Chart path
    History for all locations fetched concurrently and merged into the two
    charts only when every request succeeded. Failures here are logged and
    never shown to the user, and never affect the card path.

Neither path retries; the next scheduled cycle is the retry.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from .charts import ChartBackend, ChartStateManager
from .client import MonitoringClient
from .config import DashboardConfig
from .exceptions import BindingNotFoundError
from .fetch import fetch_latest_snapshots, fetch_overall_status
from .locations import LocationKeyResolver
from .models import CycleReport, FetchResult
from .render import BindingRegistry, DashboardRenderer

logger = logging.getLogger(__name__)

USER_ERROR_MESSAGE = "Failed to fetch latest data. Retrying..."


class DashboardController:
    """
    Owns the client, renderer and chart state for one dashboard.

    Construct once at startup and hand :meth:`refresh` to a
    :class:`~canalwatch.scheduler.RefreshScheduler`.

    Args:
        config: Dashboard settings; defaults to :class:`DashboardConfig`
        client: Monitoring client; one is created from ``config`` if omitted
        bindings: UI bindings to render into; defaults to the full canonical set
        chart_backend: Backend used to create the two charts
        on_error: Called with a user-facing message on card-path transport failures
    """

    def __init__(
        self,
        config: Optional[DashboardConfig] = None,
        client: Optional[MonitoringClient] = None,
        bindings: Optional[BindingRegistry] = None,
        chart_backend: Optional[ChartBackend] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self.config = config or DashboardConfig()
        self._owns_client = client is None
        self.client = client or MonitoringClient(config=self.config)
        self.bindings = bindings if bindings is not None else BindingRegistry.default()
        self.resolver = LocationKeyResolver()
        self.renderer = DashboardRenderer(
            self.bindings, resolver=self.resolver, strict=self.config.strict_bindings
        )
        self.charts = ChartStateManager(
            self.client,
            backend=chart_backend,
            history_limit=self.config.history_limit,
        )
        self.on_error = on_error
        self.cycle_count = 0
        self.last_report: Optional[CycleReport] = None

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()

    async def __aenter__(self) -> "DashboardController":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def refresh(self) -> CycleReport:
        """Run one complete refresh cycle and report what happened."""
        report = CycleReport(started_at=datetime.now())
        self.cycle_count += 1

        if await self._refresh_cards(report):
            await self._refresh_charts(report)
        else:
            logger.info("Skipping charts after card path failure")

        self.last_report = report
        logger.info(
            f"Cycle {self.cycle_count}: {report.cards_rendered} cards, "
            f"charts updated={report.charts_updated}"
        )
        return report

    async def _refresh_cards(self, report: CycleReport) -> bool:
        """Run the card path; returns False if it ended in a surfaced failure."""
        snapshots = await fetch_latest_snapshots(self.client)
        report.snapshots = snapshots

        if snapshots.is_hard_failure:
            self._surface_error(report, f"Error fetching latest data: {snapshots.reason}")
            return False

        if snapshots.is_success:
            try:
                keys = self.renderer.render_cards(snapshots.value or [])
            except BindingNotFoundError as e:
                self._surface_error(report, f"Error rendering location cards: {e}")
                return False
            report.cards_rendered = len(keys)
            self.renderer.clear_error()
        else:
            logger.info(f"Skipping location cards: {snapshots.reason}")

        status = await fetch_overall_status(self.client)
        report.status = status

        if status.is_hard_failure:
            self._surface_error(report, f"Error fetching overall status: {status.reason}")
            return False

        if status.is_success:
            try:
                self.renderer.render_overall_status(status.value or "")
            except BindingNotFoundError as e:
                self._surface_error(report, f"Error rendering overall status: {e}")
                return False
        else:
            logger.info(f"Skipping overall status: {status.reason}")

        return True

    async def _refresh_charts(self, report: CycleReport) -> None:
        try:
            report.charts = await self.charts.refresh()
        except Exception as e:
            logger.exception("Error updating charts")
            report.charts = FetchResult.hard(str(e), e)

    def _surface_error(self, report: CycleReport, detail: str) -> None:
        logger.error(detail)
        report.error_message = USER_ERROR_MESSAGE
        self.renderer.show_error(USER_ERROR_MESSAGE)
        if self.on_error is not None:
            self.on_error(USER_ERROR_MESSAGE)


async def run_dashboard(
    config: Optional[DashboardConfig] = None,
    chart_dir: Optional[str] = None,
    once: bool = False,
    on_error: Optional[Callable[[str], None]] = None,
) -> DashboardController:
    """
    Build a controller and run it, either once or on the refresh schedule.

    Args:
        config: Dashboard settings
        chart_dir: Directory to write chart PNGs to after every redraw
        once: Run a single cycle instead of scheduling forever
        on_error: User-facing error hook passed to the controller

    Returns:
        The controller, after the run has finished (its client is closed)
    """
    from .charts import MatplotlibChartBackend
    from .scheduler import RefreshScheduler

    config = config or DashboardConfig()
    backend = MatplotlibChartBackend(output_dir=chart_dir)

    async with DashboardController(
        config, chart_backend=backend, on_error=on_error
    ) as controller:
        if once:
            await controller.refresh()
        else:
            scheduler = RefreshScheduler(
                controller.refresh, interval=config.refresh_interval
            )
            await scheduler.start()
    return controller
