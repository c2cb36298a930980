"""
Tests for rendering snapshot and status values into UI bindings.
"""

from datetime import datetime

import pytest

from canalwatch.exceptions import BindingNotFoundError
from canalwatch.fetch import parse_snapshot
from canalwatch.models import LocationSnapshot
from canalwatch.render import (
    BindingRegistry,
    DashboardRenderer,
    format_measurement,
)


class TestBindingRegistry:
    def test_default_bindings(self):
        registry = BindingRegistry.default()

        for key in ("dowslake", "fifthave", "nac"):
            for prefix in ("ice", "temp", "snow", "status"):
                assert f"{prefix}-{key}" in registry
        for element_id in ("overallStatus", "lastUpdate", "errorNotice", "iceThicknessChart", "temperatureChart"):
            assert element_id in registry
        assert len(registry) == 17

    def test_missing_binding(self):
        with pytest.raises(BindingNotFoundError) as exc_info:
            BindingRegistry().get("ice-nac")
        assert exc_info.value.binding_id == "ice-nac"


@pytest.mark.parametrize(
    "value,expected",
    [(32.456, "32.5"), (-4.04, "-4.0"), (0, "0.0"), (None, "--")],
)
def test_format_measurement(value, expected):
    assert format_measurement(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (0.25, "0.3"),
        (2.25, "2.3"),
        (12.25, "12.3"),
        (-2.25, "-2.3"),
        # 1.15 is stored just below the tie
        (1.15, "1.1"),
    ],
)
def test_format_measurement_ties_round_away_from_zero(value, expected):
    assert format_measurement(value) == expected


class TestDashboardRenderer:
    @pytest.fixture
    def renderer(self):
        return DashboardRenderer(
            BindingRegistry.default(), clock=lambda: datetime(2025, 1, 15, 9, 7, 3)
        )

    def test_render_locations(self, renderer, latest_payload):
        snapshots = [parse_snapshot(item) for item in latest_payload["data"]]

        keys = renderer.render_locations(snapshots)

        assert keys == ["dowslake", "fifthave", "nac"]
        bindings = renderer.bindings
        assert bindings.get("ice-dowslake").text == "32.5"
        assert bindings.get("temp-dowslake").text == "-4.0"
        assert bindings.get("snow-dowslake").text == "5.3"
        assert bindings.get("ice-nac").text == "19.9"
        assert bindings.get("snow-nac").text == "1.1"

    def test_badges_scenario(self, renderer, latest_payload):
        snapshots = [parse_snapshot(item) for item in latest_payload["data"]]

        renderer.render_locations(snapshots)

        for key, status in [("dowslake", "Safe"), ("fifthave", "Caution"), ("nac", "Unsafe")]:
            badge = renderer.bindings.get(f"status-{key}")
            assert badge.text == status
            assert badge.classes == ["safety-badge", status.lower()]
            assert badge.class_name == f"safety-badge {status.lower()}"

    @pytest.mark.parametrize("status", ["Safe", "CAUTION", "Unsafe", "Not Ready"])
    def test_badge_class_is_lowercase_status(self, renderer, status):
        renderer.render_location(
            LocationSnapshot("NAC", 1.0, 2.0, 3.0, safety_status=status)
        )
        badge = renderer.bindings.get("status-nac")
        assert badge.text == status
        assert badge.classes[-1] == status.lower()

    def test_overall_status(self, renderer):
        renderer.render_overall_status("Caution")

        badge = renderer.bindings.get("overallStatus")
        assert badge.text == "Caution"
        assert badge.classes == ["status-badge", "caution"]

    def test_last_update(self, renderer):
        renderer.render_last_update()
        assert renderer.bindings.get("lastUpdate").text == "09:07:03"

    def test_missing_binding_skipped_by_default(self, renderer):
        key = renderer.render_location(
            LocationSnapshot("Somewhere Else", 1.0, 2.0, 3.0, safety_status="Safe")
        )
        assert key == "somewhereelse"
        assert "ice-somewhereelse" not in renderer.bindings

    def test_missing_binding_strict(self):
        renderer = DashboardRenderer(BindingRegistry.default(), strict=True)
        with pytest.raises(BindingNotFoundError):
            renderer.render_location(
                LocationSnapshot("Somewhere Else", 1.0, 2.0, 3.0, safety_status="Safe")
            )

    def test_render_cards_strict_checks_before_writing(self):
        renderer = DashboardRenderer(
            BindingRegistry(["ice-dowslake", "temp-dowslake", "snow-dowslake", "lastUpdate"]),
            strict=True,
        )
        snapshots = [
            LocationSnapshot("Dow's Lake", 1.0, 2.0, 3.0, safety_status="Safe"),
        ]

        with pytest.raises(BindingNotFoundError) as exc_info:
            renderer.render_cards(snapshots)

        assert exc_info.value.binding_id == "status-dowslake"
        assert renderer.bindings.get("ice-dowslake").text == ""
        assert renderer.bindings.get("lastUpdate").text == ""

    def test_render_cards(self, renderer, latest_payload):
        snapshots = [parse_snapshot(item) for item in latest_payload["data"]]

        keys = renderer.render_cards(snapshots)

        assert keys == ["dowslake", "fifthave", "nac"]
        assert renderer.bindings.get("lastUpdate").text == "09:07:03"

    def test_error_notice(self, renderer):
        renderer.show_error("Failed")
        assert renderer.bindings.get("errorNotice").text == "Failed"
        renderer.clear_error()
        assert renderer.bindings.get("errorNotice").text == ""

    def test_error_notice_without_binding(self):
        renderer = DashboardRenderer(BindingRegistry(["ice-nac"]))
        renderer.show_error("Failed")  # no errorNotice binding, nothing to do
