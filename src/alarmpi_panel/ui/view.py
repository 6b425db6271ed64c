from __future__ import annotations

"""Two-way binding between mirror entities and rows of editable controls.

Rows are toolkit neutral: every control is a variable created by a factory
``make_var(kind, value)`` with ``kind`` in {"bool", "str", "int"}. The
variables only need ``get()``, ``set()`` and ``trace_add("write", cb)``,
which Tk variables provide. The Tk mixins lay widgets out over these rows.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from alarmpi_panel.core.model import WEEKDAYS, Alarm, Light, WeekDay, WeekDays, clamp_brightness, normalize_time
from alarmpi_panel.core.state import PanelState

log = logging.getLogger(__name__)

VarFactory = Callable[[str, Any], Any]

POWER_ON = "on"
POWER_OFF = "off"
DEFAULT_ON_BRIGHTNESS = 30


class InvalidFieldError(ValueError):
    def __init__(self, index: int, field_name: str, value: Any) -> None:
        self.index = index
        self.field_name = field_name
        self.value = value
        super().__init__(f"alarm index {index}: invalid {field_name} {value!r}")


@dataclass
class AlarmRow:
    index: int
    enabled: Any
    time: Any
    one_time_only: Any
    skip_once: Any
    days: Dict[WeekDay, Any]
    sound: Any
    sound_options: List[str] = field(default_factory=list)

    @classmethod
    def render(
        cls,
        index: int,
        alarm: Alarm,
        sound_options: List[str],
        make_var: VarFactory,
        on_modified: Callable[[int], None],
    ) -> "AlarmRow":
        row = cls(
            index=index,
            enabled=make_var("bool", bool(alarm.enabled)),
            time=make_var("str", alarm.time),
            one_time_only=make_var("bool", bool(alarm.one_time_only)),
            skip_once=make_var("bool", bool(alarm.skip_once)),
            days={d: make_var("bool", d in alarm.week_days) for d in WEEKDAYS},
            sound=make_var("str", alarm.alarm_sound or ""),
            sound_options=list(sound_options),
        )
        # Traces go on after the initial values so rendering itself is clean.
        for var in row.variables():
            var.trace_add("write", lambda *_a, r=row: on_modified(r.index))
        return row

    def variables(self) -> List[Any]:
        return [self.enabled, self.time, self.one_time_only, self.skip_once, *self.days.values(), self.sound]

    def checked_days(self) -> WeekDays:
        return WeekDays(d for d in WEEKDAYS if bool(self.days[d].get()))

    def pull(self, alarm: Alarm) -> Alarm:
        """Copy the live control values into *alarm*; nothing is written if a value is invalid.

        The time is normalized to ``HH:MM``: an unpadded device time such as
        ``"7:00"`` comes back as ``"07:00"``. The daemon always sends ``HH:mm``,
        so for device data the round trip is exact.
        """
        raw_time = self.time.get()
        try:
            time = normalize_time(raw_time)
        except ValueError:
            raise InvalidFieldError(self.index, "time", raw_time) from None
        sound = str(self.sound.get() or "")

        alarm.enabled = bool(self.enabled.get())
        alarm.time = time
        alarm.one_time_only = bool(self.one_time_only.get())
        alarm.skip_once = bool(self.skip_once.get())
        alarm.week_days = self.checked_days()
        alarm.alarm_sound = sound or None
        return alarm


@dataclass
class LightRow:
    """Off/on radio pair and brightness slider: three views of one integer."""

    index: int
    power: Any
    brightness: Any
    on_brightness: int = DEFAULT_ON_BRIGHTNESS
    _busy: bool = field(default=False, repr=False)

    @classmethod
    def render(
        cls,
        index: int,
        light: Light,
        make_var: VarFactory,
        resolve: Callable[[int], Light],
        on_change: Callable[[Light], None],
        on_brightness: int = DEFAULT_ON_BRIGHTNESS,
    ) -> "LightRow":
        row = cls(
            index=index,
            power=make_var("str", POWER_ON if light.is_on else POWER_OFF),
            brightness=make_var("int", int(light.brightness)),
            on_brightness=clamp_brightness(on_brightness) or DEFAULT_ON_BRIGHTNESS,
        )
        row.power.trace_add("write", lambda *_a: row._power_changed(resolve, on_change))
        row.brightness.trace_add("write", lambda *_a: row._brightness_changed(resolve, on_change))
        return row

    @property
    def on_checked(self) -> bool:
        return self.power.get() == POWER_ON

    @property
    def off_checked(self) -> bool:
        return self.power.get() == POWER_OFF

    def slider_value(self) -> int:
        return clamp_brightness(self.brightness.get())

    # user gestures (what the widgets do when clicked or dragged)

    def click_on(self) -> None:
        self.power.set(POWER_ON)

    def click_off(self) -> None:
        self.power.set(POWER_OFF)

    def slide(self, value: Any) -> None:
        self.brightness.set(value)

    # handlers

    def _power_changed(self, resolve: Callable[[int], Light], on_change: Callable[[Light], None]) -> None:
        if self._busy:
            return
        light = resolve(self.index)
        switched_on = self.power.get() == POWER_ON
        if switched_on == light.is_on:
            # re-click on the already selected radio button
            return
        light.brightness = self.on_brightness if switched_on else 0
        log.info("light %s switched %s", light.name, "on" if switched_on else "off")
        self._busy = True
        try:
            self.brightness.set(light.brightness)
        finally:
            self._busy = False
        on_change(light)

    def _brightness_changed(self, resolve: Callable[[int], Light], on_change: Callable[[Light], None]) -> None:
        if self._busy:
            return
        light = resolve(self.index)
        value = self.slider_value()
        if value == light.brightness and self.on_checked == light.is_on:
            return
        light.brightness = value
        log.debug("light %s brightness changed to %s", light.name, light.brightness)
        self._busy = True
        try:
            self.power.set(POWER_ON if light.brightness > 0 else POWER_OFF)
        finally:
            self._busy = False
        on_change(light)


class ViewSynchronizer:
    def __init__(
        self,
        state: PanelState,
        make_var: VarFactory,
        on_light_change: Optional[Callable[[Light], None]] = None,
        light_on_brightness: int = DEFAULT_ON_BRIGHTNESS,
    ) -> None:
        self.state = state
        self.make_var = make_var
        self.on_light_change = on_light_change or (lambda _light: None)
        self.light_on_brightness = light_on_brightness
        self.alarm_rows: List[AlarmRow] = []
        self.light_rows: List[LightRow] = []

    def render(self) -> None:
        """Rebuild all rows from the mirror (no rows without a snapshot)."""
        snap = self.state.snapshot
        sounds = snap.sound_names() if snap else []
        self.alarm_rows = [
            AlarmRow.render(i, alarm, sounds, self.make_var, self.state.mark_dirty)
            for i, alarm in enumerate(self.state.alarms)
        ]
        self.light_rows = [
            LightRow.render(
                i,
                light,
                self.make_var,
                self.state.light_at,
                self._light_changed,
                on_brightness=self.light_on_brightness,
            )
            for i, light in enumerate(self.state.lights)
        ]
        log.debug("rendered %s alarm rows, %s light rows", len(self.alarm_rows), len(self.light_rows))

    def _light_changed(self, light: Light) -> None:
        self.on_light_change(light)

    def pull(self, index: int) -> Alarm:
        return self.alarm_rows[index].pull(self.state.alarm_at(index))

    def pull_dirty(self) -> List[Tuple[int, Alarm]]:
        """Pull view state into every modified alarm, in mirror order.

        All rows are validated before any alarm is touched.
        """
        indices = self.state.dirty_indices()
        for i in indices:
            row = self.alarm_rows[i]
            try:
                normalize_time(row.time.get())
            except ValueError:
                raise InvalidFieldError(i, "time", row.time.get()) from None
        return [(i, self.pull(i)) for i in indices]
