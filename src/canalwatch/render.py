"""
Rendering of snapshot and status values into UI bindings.

The UI is modelled as a registry of named elements following the
``{field}-{locationKey}`` naming convention (``ice-nac``, ``status-dowslake``)
plus a few singletons (``overallStatus``, ``lastUpdate``, ``errorNotice``).
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Optional

from .config import CANONICAL_KEYS
from .exceptions import BindingNotFoundError
from .locations import LocationKeyResolver
from .models import LocationSnapshot

logger = logging.getLogger(__name__)

CARD_FIELDS = ("ice", "temp", "snow", "status")

OVERALL_STATUS_ID = "overallStatus"
LAST_UPDATE_ID = "lastUpdate"
ERROR_NOTICE_ID = "errorNotice"
ICE_CHART_ID = "iceThicknessChart"
TEMPERATURE_CHART_ID = "temperatureChart"

MISSING_VALUE = "--"
ONE_DECIMAL = Decimal("0.1")


@dataclass
class Element:
    """A bound UI element: its text and its style classes."""

    element_id: str
    text: str = ""
    classes: List[str] = field(default_factory=list)

    @property
    def class_name(self) -> str:
        return " ".join(self.classes)

    def set_classes(self, *classes: str) -> None:
        self.classes = [c for c in classes if c]


class BindingRegistry:
    """Named UI elements the renderer may write to."""

    def __init__(self, element_ids: Iterable[str] = ()):
        self._elements: Dict[str, Element] = {}
        for element_id in element_ids:
            self.add(element_id)

    @classmethod
    def default(cls, location_keys: Iterable[str] = CANONICAL_KEYS) -> "BindingRegistry":
        """Registry with every card, singleton and chart binding."""
        ids = [f"{prefix}-{key}" for key in location_keys for prefix in CARD_FIELDS]
        ids += [
            OVERALL_STATUS_ID,
            LAST_UPDATE_ID,
            ERROR_NOTICE_ID,
            ICE_CHART_ID,
            TEMPERATURE_CHART_ID,
        ]
        return cls(ids)

    def add(self, element_id: str) -> Element:
        element = self._elements.get(element_id)
        if element is None:
            element = Element(element_id)
            self._elements[element_id] = element
        return element

    def get(self, element_id: str) -> Element:
        try:
            return self._elements[element_id]
        except KeyError:
            raise BindingNotFoundError(element_id) from None

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def __len__(self) -> int:
        return len(self._elements)


def format_measurement(value: Optional[float]) -> str:
    """
    Format a measured value to one decimal place.

    Ties round away from zero on the exact binary value, so 12.25 shows as
    ``12.3`` and -2.25 as ``-2.3``.
    """
    if value is None:
        return MISSING_VALUE
    if not math.isfinite(value):
        return f"{value:.1f}"
    rounded = Decimal(value).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return f"{rounded:f}"


def format_clock(moment: datetime) -> str:
    """Local wall-clock time as ``HH:MM:SS``."""
    return moment.strftime("%H:%M:%S")


class DashboardRenderer:
    """
    Writes snapshot and status values into a :class:`BindingRegistry`.

    With ``strict=True`` a missing binding raises
    :class:`BindingNotFoundError`; otherwise it is logged and skipped.
    """

    def __init__(
        self,
        bindings: BindingRegistry,
        resolver: Optional[LocationKeyResolver] = None,
        strict: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.bindings = bindings
        self.resolver = resolver or LocationKeyResolver()
        self.strict = strict
        self.clock = clock

    def _element(self, element_id: str) -> Optional[Element]:
        try:
            return self.bindings.get(element_id)
        except BindingNotFoundError:
            if self.strict:
                raise
            logger.warning(f"Skipping missing UI binding '{element_id}'")
            return None

    def _set_text(self, element_id: str, text: str) -> None:
        element = self._element(element_id)
        if element is not None:
            element.text = text

    def render_badge(self, element_id: str, status: str, base_class: str) -> None:
        """Set a badge's text to ``status`` and its class to its lowercase."""
        element = self._element(element_id)
        if element is not None:
            element.text = status
            element.set_classes(base_class, status.lower())

    def render_location(self, snapshot: LocationSnapshot) -> str:
        """Render one location card; returns the key it was bound to."""
        key = self.resolver.resolve(snapshot.location, snapshot.location_id)

        self._set_text(f"ice-{key}", format_measurement(snapshot.avg_ice_thickness))
        self._set_text(f"temp-{key}", format_measurement(snapshot.avg_surface_temperature))
        self._set_text(f"snow-{key}", format_measurement(snapshot.max_snow_accumulation))
        self.render_badge(f"status-{key}", snapshot.safety_status, "safety-badge")

        return key

    def render_locations(self, snapshots: List[LocationSnapshot]) -> List[str]:
        """Render every location card, in the order given."""
        return [self.render_location(snapshot) for snapshot in snapshots]

    def card_binding_ids(self, snapshots: List[LocationSnapshot]) -> List[str]:
        """Every element id that rendering ``snapshots`` would write to."""
        ids = []
        for snapshot in snapshots:
            key = self.resolver.resolve(snapshot.location, snapshot.location_id)
            ids.extend(f"{prefix}-{key}" for prefix in CARD_FIELDS)
        return ids

    def check_bindings(self, element_ids: Iterable[str]) -> None:
        """
        In strict mode, raise :class:`BindingNotFoundError` for the first
        missing id. Nothing is written either way.
        """
        if not self.strict:
            return
        for element_id in element_ids:
            if element_id not in self.bindings:
                raise BindingNotFoundError(element_id)

    def render_cards(self, snapshots: List[LocationSnapshot]) -> List[str]:
        """
        Render all location cards and the last-update time.

        In strict mode every target is checked first, so a missing binding
        leaves all cards and ``lastUpdate`` as they were.
        """
        self.check_bindings(self.card_binding_ids(snapshots) + [LAST_UPDATE_ID])
        keys = self.render_locations(snapshots)
        self.render_last_update()
        return keys

    def render_overall_status(self, status: str) -> None:
        self.render_badge(OVERALL_STATUS_ID, status, "status-badge")

    def render_last_update(self, moment: Optional[datetime] = None) -> None:
        self._set_text(LAST_UPDATE_ID, format_clock(moment or self.clock()))

    def show_error(self, message: str) -> None:
        """Display a transient error notice."""
        if ERROR_NOTICE_ID in self.bindings:
            self.bindings.get(ERROR_NOTICE_ID).text = message

    def clear_error(self) -> None:
        if ERROR_NOTICE_ID in self.bindings:
            self.bindings.get(ERROR_NOTICE_ID).text = ""
