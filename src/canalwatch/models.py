"""
Data models for canal ice-condition snapshots, history and chart state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


@dataclass
class LocationSnapshot:
    """Latest measured conditions for one location."""

    location: str  # free-form name as returned by the service
    avg_ice_thickness: Optional[float]  # cm
    avg_surface_temperature: Optional[float]  # degC
    max_snow_accumulation: Optional[float]  # cm
    safety_status: str
    location_id: Optional[str] = None


@dataclass
class HistoricalPoint:
    """A single point in a location's recent history."""

    event_time: datetime
    avg_ice_thickness: Optional[float]
    avg_surface_temperature: Optional[float]


@dataclass
class Dataset:
    """One line on a chart: a location's values plus its styling."""

    label: str
    data: List[Optional[float]]
    color: str
    background_color: str
    tension: float = 0.4
    fill: bool = False


@dataclass
class ChartState:
    """
    Labels and per-location datasets backing one chart.

    Every dataset is expected to align index-for-index with ``labels``. The
    service guarantees this by returning equally long, identically timed
    series for every location; the client does not realign them.
    """

    labels: List[str] = field(default_factory=list)
    datasets: List[Dataset] = field(default_factory=list)

    def to_pandas(self) -> Any:
        """
        Convert the chart state to a pandas DataFrame.

        Columns are the dataset labels, the index is the chart labels. Series
        shorter than the labels are padded with missing values.
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError(
                "pandas is required for DataFrame conversion. Install with: pip install pandas"
            ) from None

        columns: Dict[str, List[Optional[float]]] = {}
        for dataset in self.datasets:
            values = list(dataset.data[: len(self.labels)])
            values.extend([None] * (len(self.labels) - len(values)))
            columns[dataset.label] = values

        return pd.DataFrame(columns, index=pd.Index(self.labels, name="time"))


class FetchStatus(Enum):
    """Outcome category of a single fetch operation."""

    SUCCESS = "success"
    SOFT_FAILURE = "soft_failure"  # response arrived but is not usable
    HARD_FAILURE = "hard_failure"  # no response at all


@dataclass
class FetchResult(Generic[T]):
    """Result of a fetch: a value on success, otherwise the reason it failed."""

    status: FetchStatus
    value: Optional[T] = None
    reason: str = ""
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: T) -> "FetchResult[T]":
        return cls(FetchStatus.SUCCESS, value=value)

    @classmethod
    def soft(cls, reason: str, error: Optional[BaseException] = None) -> "FetchResult[T]":
        return cls(FetchStatus.SOFT_FAILURE, reason=reason, error=error)

    @classmethod
    def hard(cls, reason: str, error: Optional[BaseException] = None) -> "FetchResult[T]":
        return cls(FetchStatus.HARD_FAILURE, reason=reason, error=error)

    @property
    def is_success(self) -> bool:
        return self.status is FetchStatus.SUCCESS

    @property
    def is_hard_failure(self) -> bool:
        return self.status is FetchStatus.HARD_FAILURE


@dataclass
class CycleReport:
    """Summary of one refresh cycle, mostly for logging and tests."""

    started_at: datetime
    snapshots: Optional[FetchResult[List[LocationSnapshot]]] = None
    status: Optional[FetchResult[str]] = None
    charts: Optional[FetchResult[Dict[str, List[HistoricalPoint]]]] = None
    cards_rendered: int = 0
    error_message: Optional[str] = None

    @property
    def charts_updated(self) -> bool:
        return self.charts is not None and self.charts.is_success
