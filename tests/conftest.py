from __future__ import annotations

import copy
from typing import Any, Callable, Dict, List, Optional

import pytest

from alarmpi_panel.core.state import PanelState
from alarmpi_panel.io.http import AlarmPiError
from alarmpi_panel.services.dispatch import ImmediateDispatcher
from alarmpi_panel.services.sync import SnapshotLoader, SubmissionBatcher
from alarmpi_panel.ui.view import ViewSynchronizer


class FakeVar:
    """Stand-in for a Tk variable: get/set plus write traces."""

    def __init__(self, value: Any = None) -> None:
        self._value = value
        self._traces: List[Callable[..., None]] = []

    def get(self) -> Any:
        return self._value

    def set(self, value: Any) -> None:
        self._value = value
        for cb in list(self._traces):
            cb("var", "", "write")

    def trace_add(self, mode: str, cb: Callable[..., None]) -> str:
        assert mode == "write"
        self._traces.append(cb)
        return f"trace{len(self._traces)}"


def make_fake_var(kind: str, value: Any) -> FakeVar:
    return FakeVar(value)


class FakeClient:
    """Records requests; the next POST outcomes can be queued as exceptions."""

    base_url = "http://127.0.0.1:3948/"

    def __init__(self, snapshot: Optional[Dict[str, Any]] = None) -> None:
        self.snapshot = snapshot
        self.get_error: Optional[AlarmPiError] = None
        self.post_errors: List[Optional[AlarmPiError]] = []
        self.posts: List[Dict[str, Any]] = []
        self.gets = 0

    def get_json(self) -> Any:
        self.gets += 1
        if self.get_error is not None:
            raise self.get_error
        return copy.deepcopy(self.snapshot)

    def post_json(self, body: Dict[str, Any]) -> str:
        self.posts.append(copy.deepcopy(body))
        if self.post_errors:
            err = self.post_errors.pop(0)
            if err is not None:
                raise err
        return "OK"


class ParkedDispatcher:
    """Runs requests but holds completions until `release()` (a request in flight)."""

    def __init__(self) -> None:
        self.inner = ImmediateDispatcher()
        self.pending: List[Callable[[], None]] = []

    def submit(self, fn, *args, on_done) -> None:
        results = []
        self.inner.submit(fn, *args, on_done=results.append)
        self.pending.append(lambda: on_done(results[0]))

    def release(self) -> None:
        while self.pending:
            self.pending.pop(0)()


@pytest.fixture
def scenario_snapshot() -> Dict[str, Any]:
    return {
        "name": "Bedroom AlarmPi",
        "alarms": [
            {
                "id": 1,
                "time": "07:00",
                "enabled": True,
                "oneTimeOnly": False,
                "skipOnce": False,
                "weekDays": ["MONDAY", "WEDNESDAY"],
                "alarmSound": "beep",
            },
            {
                "id": 2,
                "time": "09:30",
                "enabled": False,
                "oneTimeOnly": True,
                "skipOnce": True,
                "weekDays": "[SATURDAY, SUNDAY]",
                "alarmSound": "radio",
            },
        ],
        "sounds": [{"name": "beep"}, {"name": "radio", "type": "STREAM"}],
        "lights": [{"id": 5, "index": 0, "name": "Lamp", "brightness": 0}],
    }


class Panel:
    """State, view and request objects wired the way the GUI wires them."""

    def __init__(self, snapshot: Dict[str, Any], dispatcher=None, weekdays_format: str = "list") -> None:
        self.client = FakeClient(snapshot)
        self.state = PanelState()
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self.alerts: List[Exception] = []
        self.light_changes: List[Any] = []
        self.enabled_events: List[bool] = []
        self.view = ViewSynchronizer(self.state, make_fake_var, on_light_change=self._light_changed)
        self.loader = SnapshotLoader(self.client, self.state, self.dispatcher, alert=self.alerts.append)
        self.batcher = SubmissionBatcher(
            self.client,
            self.state,
            self.view,
            self.dispatcher,
            alert=self.alerts.append,
            weekdays_format=weekdays_format,
        )
        self.state.on_snapshot(lambda _snap: self.view.render())
        self.state.on_submit_enabled(self.enabled_events.append)

    def _light_changed(self, light) -> None:
        self.light_changes.append(light)
        self.batcher.submit_light(light)

    def load(self) -> "Panel":
        self.loader.load()
        return self


@pytest.fixture
def panel(scenario_snapshot) -> Panel:
    return Panel(scenario_snapshot).load()
