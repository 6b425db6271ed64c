from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from alarmpi_panel.core.model import ACTION_STOP_ACTIVE_ALARM, Light, Snapshot
from alarmpi_panel.core.state import PanelState
from alarmpi_panel.io.config import AppConfig
from alarmpi_panel.io.http import AlarmPiHttp, ProtocolError, RequestResult, build_base_url
from alarmpi_panel.services.demo import DemoAlarmPi
from alarmpi_panel.ui.view import InvalidFieldError, ViewSynchronizer

log = logging.getLogger(__name__)


class AlarmPiClient(Protocol):
    base_url: str

    def get_json(self) -> Any: ...

    def post_json(self, body: Dict[str, Any]) -> str: ...


class Dispatcher(Protocol):
    def submit(self, fn: Callable[..., Any], *args: Any, on_done: Callable[[RequestResult], None]) -> None: ...


Alert = Callable[[Exception], None]


@dataclass(frozen=True)
class AlarmBatch:
    """What one alarms POST carried (indices and their edit revisions)."""

    generation: int
    revisions: Dict[int, int]
    payload: Dict[str, Any]


def create_client(cfg: AppConfig) -> AlarmPiClient:
    if cfg.device.is_demo:
        log.info("using the built-in demo AlarmPi")
        return DemoAlarmPi()
    return AlarmPiHttp(build_base_url(cfg.device.host, cfg.device.port), cfg.http)


def fetch_snapshot(client: AlarmPiClient) -> Snapshot:
    data = client.get_json()
    try:
        return Snapshot.from_json(data)
    except ValueError as e:
        raise ProtocolError(str(e)) from e


class SnapshotLoader:
    """GET the full device state and swap it into the mirror."""

    def __init__(self, client: AlarmPiClient, state: PanelState, dispatcher: Dispatcher, alert: Alert) -> None:
        self.client = client
        self.state = state
        self.dispatcher = dispatcher
        self.alert = alert

    def load(self, on_done: Optional[Callable[[RequestResult], None]] = None) -> None:
        # The old mirror is dropped first; a failed load leaves nothing behind.
        self.state.replace(None)
        log.info("loading AlarmPi data from %s", self.client.base_url)

        def _done(result: RequestResult) -> None:
            if result.ok:
                self.state.replace(result.data)
            else:
                log.error("loading AlarmPi data failed: %s", result.error)
                self.alert(result.error)
            if on_done is not None:
                on_done(result)

        self.dispatcher.submit(fetch_snapshot, self.client, on_done=_done)


class SubmissionBatcher:
    def __init__(
        self,
        client: AlarmPiClient,
        state: PanelState,
        view: ViewSynchronizer,
        dispatcher: Dispatcher,
        alert: Alert,
        weekdays_format: str = "string",
    ) -> None:
        self.client = client
        self.state = state
        self.view = view
        self.dispatcher = dispatcher
        self.alert = alert
        self.weekdays_format = weekdays_format

    # ---- alarms (batched)

    def build_alarm_batch(self) -> Optional[AlarmBatch]:
        """Pull dirty rows into the mirror and build the payload (None if nothing is dirty)."""
        pulled = self.view.pull_dirty()
        if not pulled:
            return None
        alarms: List[Dict[str, Any]] = []
        revisions: Dict[int, int] = {}
        for index, alarm in pulled:
            log.info("processing alarm for submit: index=%s id=%s", index, alarm.id)
            alarms.append(alarm.to_json(self.weekdays_format))
            revisions[index] = self.state.revision(index)
        return AlarmBatch(generation=self.state.generation, revisions=revisions, payload={"alarms": alarms})

    def submit_alarms(self, on_done: Optional[Callable[[RequestResult], None]] = None) -> Optional[AlarmBatch]:
        try:
            batch = self.build_alarm_batch()
        except InvalidFieldError as e:
            log.warning("alarm submit aborted: %s", e)
            self.alert(e)
            return None
        if batch is None:
            log.debug("submit_alarms: no modified alarms")
            return None

        self.state.begin_submit()

        def _done(result: RequestResult) -> None:
            if batch.generation != self.state.generation:
                log.info("ignoring alarm submit result for a replaced mirror")
            else:
                self.state.end_submit()
                if result.ok:
                    self.state.clear_submitted(batch.revisions)
                else:
                    log.error("submitting alarms failed: %s", result.error)
                    self.alert(result.error)
            if on_done is not None:
                on_done(result)

        self.dispatcher.submit(self.client.post_json, batch.payload, on_done=_done)
        return batch

    # ---- lights (one POST per edit)

    def submit_light(self, light: Light, on_done: Optional[Callable[[RequestResult], None]] = None) -> Dict[str, Any]:
        payload = {"lights": [light.to_json()]}
        log.info("submitting light %s brightness=%s", light.name, light.brightness)
        self.dispatcher.submit(self.client.post_json, payload, on_done=self._alerting(on_done, f"light {light.name}"))
        return payload

    # ---- device actions

    def submit_action(self, action: str, on_done: Optional[Callable[[RequestResult], None]] = None) -> Dict[str, Any]:
        payload = {"actions": [action]}
        log.info("submitting action %s", action)
        self.dispatcher.submit(self.client.post_json, payload, on_done=self._alerting(on_done, f"action {action}"))
        return payload

    def stop_active_alarm(self, on_done: Optional[Callable[[RequestResult], None]] = None) -> Dict[str, Any]:
        return self.submit_action(ACTION_STOP_ACTIVE_ALARM, on_done=on_done)

    def _alerting(self, on_done: Optional[Callable[[RequestResult], None]], what: str) -> Callable[[RequestResult], None]:
        def _done(result: RequestResult) -> None:
            if not result.ok:
                log.error("submitting %s failed: %s", what, result.error)
                self.alert(result.error)
            if on_done is not None:
                on_done(result)

        return _done


class LightSubmitDebouncer:
    """Coalesces rapid edits of one light (slider drags) into a single POST.

    `schedule(delay_ms, fn) -> job` and `cancel(job)` are Tk's `after` and
    `after_cancel`. `flush()` sends every pending edit right away.
    """

    def __init__(
        self,
        send: Callable[[Light], Any],
        schedule: Callable[[int, Callable[[], None]], Any],
        cancel: Callable[[Any], None],
        delay_ms: int,
    ) -> None:
        self.send = send
        self.schedule = schedule
        self.cancel = cancel
        self.delay_ms = max(0, int(delay_ms))
        self._pending: Dict[Any, Tuple[Any, Light]] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def push(self, light: Light) -> None:
        previous = self._pending.pop(light.id, None)
        if previous is not None:
            self.cancel(previous[0])
        job = self.schedule(self.delay_ms, lambda key=light.id: self._fire(key))
        self._pending[light.id] = (job, light)

    def _fire(self, key: Any) -> None:
        entry = self._pending.pop(key, None)
        if entry is not None:
            self.send(entry[1])

    def flush(self) -> int:
        entries = list(self._pending.values())
        self._pending.clear()
        for job, light in entries:
            self.cancel(job)
            self.send(light)
        if entries:
            log.info("flushed %s pending light change(s)", len(entries))
        return len(entries)
