"""
Refresh controller for the Rideau Canal ice-safety dashboard.

Polls the canal monitoring service, renders per-location condition cards and
keeps two rolling charts (ice thickness, surface temperature) up to date.
"""

try:
    from importlib import metadata

    __version__ = metadata.version(__name__)
except Exception:
    __version__ = "unknown"

from .charts import (
    ChartBackend,
    ChartSpec,
    ChartStateManager,
    MatplotlibChartBackend,
    MatplotlibLineChart,
)
from .client import MonitoringClient
from .config import (
    CANONICAL_LOCATIONS,
    REFRESH_INTERVAL,
    CanonicalLocation,
    DashboardConfig,
)
from .controller import DashboardController, run_dashboard
from .exceptions import (
    BindingNotFoundError,
    CanalWatchError,
    ServiceConnectionError,
    ServiceResponseError,
)
from .fetch import (
    fetch_all_history,
    fetch_history_series,
    fetch_latest_snapshots,
    fetch_overall_status,
)
from .locations import LocationKeyResolver, get_location_key
from .models import (
    ChartState,
    CycleReport,
    Dataset,
    FetchResult,
    FetchStatus,
    HistoricalPoint,
    LocationSnapshot,
)
from .render import BindingRegistry, DashboardRenderer, Element
from .scheduler import RefreshScheduler
from .sync import run_dashboard_sync

__all__ = [
    # Orchestration
    "DashboardController",
    "RefreshScheduler",
    "run_dashboard",
    "run_dashboard_sync",
    # Configuration
    "DashboardConfig",
    "CanonicalLocation",
    "CANONICAL_LOCATIONS",
    "REFRESH_INTERVAL",
    # Service access
    "MonitoringClient",
    "fetch_latest_snapshots",
    "fetch_overall_status",
    "fetch_history_series",
    "fetch_all_history",
    # Locations
    "LocationKeyResolver",
    "get_location_key",
    # Rendering
    "BindingRegistry",
    "DashboardRenderer",
    "Element",
    # Charts
    "ChartBackend",
    "ChartSpec",
    "ChartStateManager",
    "MatplotlibChartBackend",
    "MatplotlibLineChart",
    # Models
    "ChartState",
    "CycleReport",
    "Dataset",
    "FetchResult",
    "FetchStatus",
    "HistoricalPoint",
    "LocationSnapshot",
    # Exceptions
    "CanalWatchError",
    "ServiceConnectionError",
    "ServiceResponseError",
    "BindingNotFoundError",
]
