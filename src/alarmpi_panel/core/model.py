from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class WeekDay(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


# Canonical order (Monday..Sunday), same as java.time.DayOfWeek on the device.
WEEKDAYS: Tuple[WeekDay, ...] = tuple(WeekDay)

WEEKDAYS_FORMATS = ("string", "list")

# Device-level command understood by the daemon's "actions" channel.
ACTION_STOP_ACTIVE_ALARM = "stopActiveAlarm"


class WeekDays:
    """Immutable set of weekdays that always iterates Monday..Sunday."""

    __slots__ = ("_days",)

    def __init__(self, days: Iterable[Any] = ()) -> None:
        wanted = {_to_weekday(d) for d in days}
        self._days: Tuple[WeekDay, ...] = tuple(d for d in WEEKDAYS if d in wanted)

    @classmethod
    def parse(cls, value: Any) -> "WeekDays":
        """Parse the weekday field of an alarm.

        The daemon sends ``EnumSet.toString()`` (e.g. ``"[MONDAY, WEDNESDAY]"``)
        and matches day names by containment when reading it back. A JSON list
        of names is accepted as well.
        """
        if value is None:
            return cls()
        if isinstance(value, WeekDays):
            return value
        if isinstance(value, str):
            text = value.upper()
            return cls(d for d in WEEKDAYS if d.value in text)
        if isinstance(value, (list, tuple, set, frozenset)):
            return cls(value)
        raise ValueError(f"Unsupported weekDays value: {value!r}")

    def to_wire(self, fmt: str = "string") -> Any:
        if fmt == "list":
            return [d.value for d in self._days]
        if fmt == "string":
            return "[" + ", ".join(d.value for d in self._days) + "]"
        raise ValueError(f"Unknown weekdays format: {fmt!r}")

    def __contains__(self, day: object) -> bool:
        try:
            return _to_weekday(day) in self._days
        except ValueError:
            return False

    def __iter__(self) -> Iterator[WeekDay]:
        return iter(self._days)

    def __len__(self) -> int:
        return len(self._days)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, WeekDays):
            return self._days == other._days
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._days)

    def __repr__(self) -> str:
        return f"WeekDays({[d.value for d in self._days]!r})"


def _to_weekday(value: Any) -> WeekDay:
    if isinstance(value, WeekDay):
        return value
    try:
        return WeekDay(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown weekday: {value!r}") from None


_TIME_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*$")


def normalize_time(value: Any) -> str:
    """Return *value* as ``HH:MM`` or raise ValueError."""
    m = _TIME_RE.match(str(value or ""))
    if not m:
        raise ValueError(f"Invalid time: {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return f"{hour:02d}:{minute:02d}"


def _coerce_int(x: Any, default: int = 0) -> int:
    try:
        return int(float(x))
    except Exception:
        return int(default)


def clamp_brightness(value: Any) -> int:
    return max(0, min(100, _coerce_int(value, 0)))


def _as_bool(x: Any) -> bool:
    if isinstance(x, str):
        return x.strip().lower() in {"1", "true", "yes", "on"}
    return bool(x)


_ALARM_KEYS = {"id", "time", "enabled", "oneTimeOnly", "skipOnce", "weekDays", "alarmSound", "modified"}
_LIGHT_KEYS = {"id", "index", "name", "brightness"}


@dataclass
class Alarm:
    id: Any
    time: str = "07:00"
    enabled: bool = False
    one_time_only: bool = False
    skip_once: bool = False
    week_days: WeekDays = field(default_factory=WeekDays)
    alarm_sound: Optional[str] = None
    # Local edit flag, never part of the wire format.
    modified: bool = field(default=False, compare=False)
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "Alarm":
        if not isinstance(obj, dict):
            raise ValueError("alarm entry must be a JSON object")
        sound = obj.get("alarmSound")
        return cls(
            id=obj.get("id"),
            time=str(obj.get("time", "07:00") or "07:00"),
            enabled=_as_bool(obj.get("enabled", False)),
            one_time_only=_as_bool(obj.get("oneTimeOnly", False)),
            skip_once=_as_bool(obj.get("skipOnce", False)),
            week_days=WeekDays.parse(obj.get("weekDays")),
            alarm_sound=None if sound is None else str(sound),
            extra={k: v for k, v in obj.items() if k not in _ALARM_KEYS},
        )

    def to_json(self, weekdays_format: str = "string") -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update(
            {
                "id": self.id,
                "time": self.time,
                "enabled": bool(self.enabled),
                "oneTimeOnly": bool(self.one_time_only),
                "skipOnce": bool(self.skip_once),
                "weekDays": self.week_days.to_wire(weekdays_format),
            }
        )
        if self.alarm_sound is not None:
            out["alarmSound"] = self.alarm_sound
        return out


@dataclass(frozen=True)
class Sound:
    name: str
    type: Optional[str] = None

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "Sound":
        if not isinstance(obj, dict):
            raise ValueError("sound entry must be a JSON object")
        kind = obj.get("type")
        return cls(name=str(obj.get("name", "")), type=None if kind is None else str(kind))


@dataclass
class Light:
    id: Any
    index: int = 0
    name: str = ""
    brightness: int = 0
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        self.brightness = clamp_brightness(self.brightness)

    @property
    def is_on(self) -> bool:
        return self.brightness > 0

    @classmethod
    def from_json(cls, obj: Dict[str, Any]) -> "Light":
        if not isinstance(obj, dict):
            raise ValueError("light entry must be a JSON object")
        return cls(
            id=obj.get("id"),
            index=_coerce_int(obj.get("index", 0), 0),
            name=str(obj.get("name", "") or ""),
            brightness=clamp_brightness(obj.get("brightness", 0)),
            extra={k: v for k, v in obj.items() if k not in _LIGHT_KEYS},
        )

    def to_json(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        out.update({"id": self.id, "index": self.index, "name": self.name, "brightness": int(self.brightness)})
        return out


@dataclass
class Snapshot:
    name: str = ""
    alarms: List[Alarm] = field(default_factory=list)
    sounds: List[Sound] = field(default_factory=list)
    lights: List[Light] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> "Snapshot":
        if not isinstance(data, dict):
            raise ValueError("AlarmPi state must be a JSON object")

        def _list(key: str) -> List[Any]:
            raw = data.get(key)
            if raw is None:
                return []
            if not isinstance(raw, list):
                raise ValueError(f"AlarmPi state: '{key}' must be a list")
            return raw

        return cls(
            name=str(data.get("name", "") or ""),
            alarms=[Alarm.from_json(a) for a in _list("alarms")],
            sounds=[Sound.from_json(s) for s in _list("sounds")],
            lights=[Light.from_json(x) for x in _list("lights")],
        )

    def sound_names(self) -> List[str]:
        return [s.name for s in self.sounds]
