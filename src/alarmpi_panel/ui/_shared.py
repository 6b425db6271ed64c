from __future__ import annotations

import tkinter as tk
from typing import Any, Callable

from alarmpi_panel.core.model import WEEKDAYS

_VAR_TYPES = {
    "bool": tk.BooleanVar,
    "str": tk.StringVar,
    "int": tk.IntVar,
}


def tk_var_factory(master: tk.Misc) -> Callable[[str, Any], tk.Variable]:
    """Variable factory for `ViewSynchronizer`, bound to *master*."""

    def make_var(kind: str, value: Any) -> tk.Variable:
        return _VAR_TYPES[kind](master=master, value=value)

    return make_var


# (i18n key, column width) of the alarm table, weekday columns follow.
ALARM_COLUMNS = [
    ("alarms.enabled", 6),
    ("alarms.time", 7),
    ("alarms.one_time_only", 9),
    ("alarms.skip_once", 14),
] + [(f"day.{d.value}", 4) for d in WEEKDAYS] + [("alarms.sound", 16)]

LIGHT_COLUMNS = [
    ("lights.name", 20),
    ("lights.off", 5),
    ("lights.on", 5),
    ("lights.brightness", 28),
]

SLIDER_LENGTH = 220

# End of shared helpers/constants
