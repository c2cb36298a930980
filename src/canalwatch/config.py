"""
Configuration for the canal dashboard refresh controller.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

# Seconds between refresh cycles
REFRESH_INTERVAL = 30.0

# Points requested per location for the rolling charts
HISTORY_LIMIT = 12

DEFAULT_BASE_URL = "http://localhost:3000"

ENV_PREFIX = "CANALWATCH_"


@dataclass(frozen=True)
class CanonicalLocation:
    """A monitored canal location with its fixed display settings."""

    key: str
    display_name: str
    color: str  # hex RGB, used for both chart line and legend


CANONICAL_LOCATIONS: List[CanonicalLocation] = [
    CanonicalLocation("dowslake", "Dow's Lake", "#4bc0c0"),
    CanonicalLocation("fifthave", "Fifth Avenue", "#ff6384"),
    CanonicalLocation("nac", "NAC", "#36a2eb"),
]

CANONICAL_KEYS = [location.key for location in CANONICAL_LOCATIONS]

DISPLAY_NAMES: Dict[str, str] = {
    location.key: location.display_name for location in CANONICAL_LOCATIONS
}

LOCATION_COLORS: Dict[str, str] = {
    location.key: location.color for location in CANONICAL_LOCATIONS
}


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Cannot interpret '{value}' as a boolean")


@dataclass
class DashboardConfig:
    """
    Settings for one dashboard controller instance.

    Args:
        base_url: Origin of the monitoring service (no trailing path)
        refresh_interval: Seconds between refresh cycles
        history_limit: Number of historical points requested per location
        timeout: HTTP timeout in seconds
        strict_bindings: Raise on missing UI bindings instead of skipping them
        user_agent: User-Agent header sent with every request
    """

    base_url: str = DEFAULT_BASE_URL
    refresh_interval: float = REFRESH_INTERVAL
    history_limit: int = HISTORY_LIMIT
    timeout: float = 30.0
    strict_bindings: bool = False
    user_agent: str = "canalwatch/0.1.0"

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.refresh_interval <= 0:
            raise ValueError(
                f"refresh_interval must be positive, got {self.refresh_interval}"
            )
        if self.history_limit < 1:
            raise ValueError(
                f"history_limit must be at least 1, got {self.history_limit}"
            )
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object
    ) -> "DashboardConfig":
        """
        Build a config from ``CANALWATCH_*`` environment variables.

        Recognized variables: ``CANALWATCH_BASE_URL``,
        ``CANALWATCH_REFRESH_INTERVAL``, ``CANALWATCH_HISTORY_LIMIT``,
        ``CANALWATCH_TIMEOUT`` and ``CANALWATCH_STRICT_BINDINGS``. Keyword
        overrides win over the environment.

        Raises:
            ValueError: If a variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        values: Dict[str, object] = {}

        if f"{ENV_PREFIX}BASE_URL" in env:
            values["base_url"] = env[f"{ENV_PREFIX}BASE_URL"]
        if f"{ENV_PREFIX}REFRESH_INTERVAL" in env:
            values["refresh_interval"] = float(env[f"{ENV_PREFIX}REFRESH_INTERVAL"])
        if f"{ENV_PREFIX}HISTORY_LIMIT" in env:
            values["history_limit"] = int(env[f"{ENV_PREFIX}HISTORY_LIMIT"])
        if f"{ENV_PREFIX}TIMEOUT" in env:
            values["timeout"] = float(env[f"{ENV_PREFIX}TIMEOUT"])
        if f"{ENV_PREFIX}STRICT_BINDINGS" in env:
            values["strict_bindings"] = _parse_bool(
                env[f"{ENV_PREFIX}STRICT_BINDINGS"]
            )

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]
