"""
Rolling ice-thickness and surface-temperature charts.

:class:`ChartStateManager` owns exactly two :class:`ChartState` objects. The
first successful refresh creates one chart per state through a
:class:`ChartBackend`; every later refresh assigns new labels and datasets
to the same state objects and asks the existing chart handle to redraw.
Chart handles are never recreated, so any render state a backend keeps
survives across refreshes.

Label alignment: labels come from the first location's series and every
other series is drawn against them index-for-index. The service must return
equally long, identically timed series for each location. Mismatches are
logged, not corrected.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Union

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .client import MonitoringClient
from .config import CANONICAL_LOCATIONS, HISTORY_LIMIT, CanonicalLocation
from .fetch import fetch_all_history
from .models import ChartState, Dataset, FetchResult, HistoricalPoint
from .render import ICE_CHART_ID, TEMPERATURE_CHART_ID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartSpec:
    """Fixed presentation options for one chart."""

    axis_title: str
    chart_type: str = "line"
    legend_position: str = "top"
    begin_at_zero: bool = False


ICE_CHART_SPEC = ChartSpec(axis_title="Ice Thickness (cm)")
TEMPERATURE_CHART_SPEC = ChartSpec(axis_title="Surface Temperature (°C)")


class ChartHandle(Protocol):
    """A created chart: exposes its backing state and redraws on request."""

    data: ChartState

    def update(self) -> None: ...


class ChartBackend(Protocol):
    """Creates chart handles bound to a UI target."""

    def create(self, target: str, spec: ChartSpec, data: ChartState) -> ChartHandle: ...


def format_time_label(moment: datetime) -> str:
    """Local ``HH:MM`` label; aware timestamps are converted to local time."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime("%H:%M")


class MatplotlibLineChart:
    """A line chart drawn on a single long-lived matplotlib Figure."""

    def __init__(
        self,
        target: str,
        spec: ChartSpec,
        data: ChartState,
        output_dir: Optional[Path] = None,
        figsize: tuple = (8, 4),
    ):
        self.target = target
        self.spec = spec
        self.data = data
        self.output_dir = output_dir
        self.figure = Figure(figsize=figsize)
        self.canvas = FigureCanvasAgg(self.figure)
        self.axes = self.figure.add_subplot(111)
        self.draw_count = 0
        self._draw()

    def update(self) -> None:
        """Redraw the figure from the current chart state."""
        self._draw()

    def _draw(self) -> None:
        ax = self.axes
        ax.clear()

        for dataset in self.data.datasets:
            values = [float("nan") if v is None else v for v in dataset.data]
            ax.plot(
                range(len(values)),
                values,
                color=dataset.color,
                label=dataset.label,
                marker="o",
                markersize=3,
            )

        ax.set_xticks(range(len(self.data.labels)))
        ax.set_xticklabels(self.data.labels, rotation=45, ha="right", fontsize=8)
        ax.set_ylabel(self.spec.axis_title)
        if self.spec.begin_at_zero:
            ax.set_ylim(bottom=0)

        if self.data.datasets and self.spec.legend_position == "top":
            ax.legend(
                loc="lower center",
                bbox_to_anchor=(0.5, 1.0),
                ncol=len(self.data.datasets),
                frameon=False,
            )

        self.figure.tight_layout()
        self.canvas.draw_idle()
        self.draw_count += 1

        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self.figure.savefig(self.output_dir / f"{self.target}.png")


class MatplotlibChartBackend:
    """Chart backend producing :class:`MatplotlibLineChart` handles."""

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        self.output_dir = Path(output_dir) if output_dir is not None else None

    def create(self, target: str, spec: ChartSpec, data: ChartState) -> MatplotlibLineChart:
        return MatplotlibLineChart(target, spec, data, output_dir=self.output_dir)


def build_dataset(
    location: CanonicalLocation, values: List[Optional[float]]
) -> Dataset:
    return Dataset(
        label=location.display_name,
        data=values,
        color=location.color,
        background_color=f"{location.color}33",
    )


class ChartStateManager:
    """
    Owns the ice and temperature chart states and merges history into them.

    Args:
        client: Monitoring service client
        backend: Chart backend used to create the two charts once
        locations: Locations to chart, in legend order; the first one
            supplies the time labels
        history_limit: Points requested per location
    """

    def __init__(
        self,
        client: MonitoringClient,
        backend: Optional[ChartBackend] = None,
        locations: Iterable[CanonicalLocation] = CANONICAL_LOCATIONS,
        history_limit: int = HISTORY_LIMIT,
        ice_target: str = ICE_CHART_ID,
        temperature_target: str = TEMPERATURE_CHART_ID,
    ):
        self.client = client
        self.backend = backend or MatplotlibChartBackend()
        self.locations = list(locations)
        self.history_limit = history_limit
        self.ice_target = ice_target
        self.temperature_target = temperature_target

        self.ice_state = ChartState()
        self.temperature_state = ChartState()
        self.ice_chart: Optional[ChartHandle] = None
        self.temperature_chart: Optional[ChartHandle] = None

    @property
    def initialized(self) -> bool:
        return self.ice_chart is not None and self.temperature_chart is not None

    async def refresh(self) -> FetchResult[Dict[str, List[HistoricalPoint]]]:
        """
        Fetch every location's history and, if all succeed, update both charts.

        On any failure both charts keep their previous state.
        """
        keys = [location.key for location in self.locations]
        result = await fetch_all_history(self.client, keys, self.history_limit)

        if not result.is_success:
            logger.error(f"Error updating charts: {result.reason}")
            return result

        await self.apply_history(result.value or {})
        return result

    async def apply_history(self, series: Dict[str, List[HistoricalPoint]]) -> None:
        """
        Merge one complete set of history series into both charts.

        Chart states are only mutated on the event loop. Creating and
        redrawing a chart run in a worker thread via ``asyncio.to_thread``;
        cycles never overlap, so a chart is drawn by one thread at a time.
        """
        ice_datasets = []
        temperature_datasets = []
        for location in self.locations:
            points = series.get(location.key, [])
            ice_datasets.append(
                build_dataset(location, [p.avg_ice_thickness for p in points])
            )
            temperature_datasets.append(
                build_dataset(location, [p.avg_surface_temperature for p in points])
            )

        first_points = series.get(self.locations[0].key, []) if self.locations else []
        labels = [format_time_label(p.event_time) for p in first_points]

        self._check_alignment(series, first_points)

        # Each handle is created at most once, even if the other one failed
        if self.ice_chart is None:
            self.ice_chart = await self._create_chart(
                self.ice_target, ICE_CHART_SPEC, self.ice_state, labels, ice_datasets
            )
        else:
            await self._update_chart(self.ice_chart, labels, ice_datasets)

        if self.temperature_chart is None:
            self.temperature_chart = await self._create_chart(
                self.temperature_target,
                TEMPERATURE_CHART_SPEC,
                self.temperature_state,
                labels,
                temperature_datasets,
            )
        else:
            await self._update_chart(self.temperature_chart, labels, temperature_datasets)

    async def _create_chart(
        self,
        target: str,
        spec: ChartSpec,
        state: ChartState,
        labels: List[str],
        datasets: List[Dataset],
    ) -> ChartHandle:
        state.labels = list(labels)
        state.datasets = datasets
        chart = await asyncio.to_thread(self.backend.create, target, spec, state)
        logger.info(f"Created chart '{target}'")
        return chart

    @staticmethod
    async def _update_chart(
        chart: ChartHandle, labels: List[str], datasets: List[Dataset]
    ) -> None:
        chart.data.labels = list(labels)
        chart.data.datasets = datasets
        await asyncio.to_thread(chart.update)

    def _check_alignment(
        self,
        series: Dict[str, List[HistoricalPoint]],
        reference: List[HistoricalPoint],
    ) -> None:
        reference_times = [p.event_time for p in reference]
        for location in self.locations[1:]:
            points = series.get(location.key, [])
            if len(points) != len(reference):
                logger.warning(
                    f"History for {location.key} has {len(points)} points but "
                    f"labels come from {len(reference)}; points will be misaligned"
                )
            elif [p.event_time for p in points] != reference_times:
                logger.warning(
                    f"History timestamps for {location.key} differ from "
                    f"{self.locations[0].key}; points are drawn under its labels"
                )
