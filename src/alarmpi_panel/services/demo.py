from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional

from alarmpi_panel.core.model import ACTION_STOP_ACTIVE_ALARM, WeekDays, clamp_brightness, normalize_time
from alarmpi_panel.io.http import StatusError

log = logging.getLogger(__name__)


def default_demo_state() -> Dict[str, Any]:
    # Shapes follow what the daemon serves: UUID ids, weekDays as EnumSet string.
    return {
        "name": "AlarmPi (Demo)",
        "alarms": [
            {
                "id": "6f1d1c3e-0c1a-4a57-9a43-2d0f4b1c7a01",
                "enabled": True,
                "oneTimeOnly": False,
                "skipOnce": False,
                "time": "06:30",
                "weekDays": "[MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY]",
                "alarmSound": "Radio",
            },
            {
                "id": "0b7e4d52-7b3c-49de-8d2e-5a9f3c1e2b02",
                "enabled": False,
                "oneTimeOnly": False,
                "skipOnce": False,
                "time": "08:00",
                "weekDays": "[SATURDAY, SUNDAY]",
                "alarmSound": "Beep",
            },
        ],
        "sounds": [
            {"name": "Radio", "type": "STREAM"},
            {"name": "Beep", "type": "FILE"},
        ],
        "lights": [
            {"id": 1, "index": 0, "name": "Bedroom", "brightness": 0},
            {"id": 2, "index": 1, "name": "Hallway", "brightness": 40},
        ],
    }


class DemoAlarmPi:
    """In-memory AlarmPi with the same surface as `AlarmPiHttp`.

    Applies posted alarms and lights by id the way the daemon does and keeps
    a short request log for inspection.
    """

    base_url = "demo://alarmpi/"

    def __init__(self, state: Optional[Dict[str, Any]] = None) -> None:
        self.state: Dict[str, Any] = copy.deepcopy(state) if state is not None else default_demo_state()
        self.active_alarm: Optional[str] = None
        self.requests: List[Dict[str, Any]] = []

    def get_json(self) -> Any:
        self.requests.append({"method": "GET"})
        return copy.deepcopy(self.state)

    def post_json(self, body: Dict[str, Any]) -> str:
        self.requests.append({"method": "POST", "body": copy.deepcopy(body)})
        if not isinstance(body, dict):
            raise StatusError(400, "Bad Request")
        for alarm in body.get("alarms") or []:
            self._update_alarm(alarm)
        for light in body.get("lights") or []:
            self._update_light(light)
        for action in body.get("actions") or []:
            self._run_action(action)
        return "OK"

    def _find(self, key: str, entity_id: Any) -> Dict[str, Any]:
        for entry in self.state.get(key, []):
            if entry.get("id") == entity_id:
                return entry
        raise StatusError(404, f"unknown {key[:-1]} id {entity_id}")

    def _update_alarm(self, alarm: Dict[str, Any]) -> None:
        target = self._find("alarms", alarm.get("id"))
        for key in ("enabled", "oneTimeOnly", "skipOnce"):
            if key in alarm:
                target[key] = bool(alarm[key])
        if "time" in alarm:
            try:
                target["time"] = normalize_time(alarm["time"])
            except ValueError:
                raise StatusError(400, "Bad Request") from None
        if "weekDays" in alarm:
            target["weekDays"] = WeekDays.parse(alarm["weekDays"]).to_wire("string")
        if "alarmSound" in alarm:
            names = {s.get("name") for s in self.state.get("sounds", [])}
            if alarm["alarmSound"] in names:
                target["alarmSound"] = alarm["alarmSound"]
            else:
                log.warning("demo: sound %s not found", alarm["alarmSound"])
        log.info("demo: alarm %s updated", target["id"])

    def _update_light(self, light: Dict[str, Any]) -> None:
        target = self._find("lights", light.get("id"))
        target["brightness"] = clamp_brightness(light.get("brightness", 0))
        log.info("demo: light %s brightness=%s", target["name"], target["brightness"])

    def ring(self, alarm_id: Any = None) -> str:
        """Make an alarm go off (the first enabled one by default)."""
        if alarm_id is None:
            enabled = [a for a in self.state.get("alarms", []) if a.get("enabled")]
            if not enabled:
                raise StatusError(409, "no enabled alarm to ring")
            alarm_id = enabled[0]["id"]
        self.active_alarm = self._find("alarms", alarm_id)["id"]
        log.info("demo: alarm %s ringing", self.active_alarm)
        return self.active_alarm

    def _run_action(self, action: Any) -> None:
        if action == ACTION_STOP_ACTIVE_ALARM:
            if self.active_alarm is None:
                log.info("demo: stopActiveAlarm, no alarm active")
            else:
                log.info("demo: stopped alarm %s", self.active_alarm)
            self.active_alarm = None
            return
        raise StatusError(400, f"unknown action {action}")
