from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import List

from alarmpi_panel.ui.view import POWER_OFF, POWER_ON

from .._shared import LIGHT_COLUMNS, SLIDER_LENGTH


class LightsMixin:
    """Light table: off/on radio pair plus brightness slider, posted on every change."""

    def _build_lights_tab(self, parent: ttk.Frame) -> None:
        self._light_table = ttk.Frame(parent)
        self._light_table.pack(fill="x", anchor="n")
        for col, (key, width) in enumerate(LIGHT_COLUMNS):
            ttk.Label(self._light_table, text=self.t(key), width=width, anchor="w").grid(row=0, column=col, sticky="w", padx=(0, 4))
        self._light_widgets: List[tk.Widget] = []

    def _layout_light_rows(self) -> None:
        for w in self._light_widgets:
            w.destroy()
        self._light_widgets = []

        table = self._light_table
        for row in self.view.light_rows:
            light = self.panel.light_at(row.index)
            widgets: List[tk.Widget] = [
                ttk.Label(table, text=light.name, width=20, anchor="w"),
                ttk.Radiobutton(table, variable=row.power, value=POWER_OFF),
                ttk.Radiobutton(table, variable=row.power, value=POWER_ON),
                ttk.Scale(table, from_=0, to=100, orient="horizontal", variable=row.brightness, length=SLIDER_LENGTH),
            ]
            for col, w in enumerate(widgets):
                w.grid(row=row.index + 1, column=col, sticky="w", padx=(0, 4), pady=2)
            self._light_widgets.extend(widgets)
