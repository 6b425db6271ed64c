from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import List

from alarmpi_panel.core.model import WEEKDAYS

from .._shared import ALARM_COLUMNS


class AlarmsMixin:
    """Alarm table: one editable row per alarm, submitted as a batch."""

    def _build_alarms_tab(self, parent: ttk.Frame) -> None:
        self._alarm_table = ttk.Frame(parent)
        self._alarm_table.pack(fill="x", anchor="n")
        for col, (key, width) in enumerate(ALARM_COLUMNS):
            ttk.Label(self._alarm_table, text=self.t(key), width=width, anchor="w").grid(row=0, column=col, sticky="w", padx=(0, 4))
        self._alarm_widgets: List[tk.Widget] = []

        btns = ttk.Frame(parent)
        btns.pack(fill="x", pady=(10, 0))
        self.btn_alarms_submit = ttk.Button(btns, text=self.t("alarms.submit"), command=self._submit_alarms, state="disabled")
        self.btn_alarms_submit.pack(side="left")

    def _layout_alarm_rows(self) -> None:
        for w in self._alarm_widgets:
            w.destroy()
        self._alarm_widgets = []

        table = self._alarm_table
        for row in self.view.alarm_rows:
            r = row.index + 1
            widgets: List[tk.Widget] = [
                ttk.Checkbutton(table, variable=row.enabled),
                ttk.Entry(table, textvariable=row.time, width=7),
                ttk.Checkbutton(table, variable=row.one_time_only),
                ttk.Checkbutton(table, variable=row.skip_once),
            ]
            widgets += [ttk.Checkbutton(table, variable=row.days[d]) for d in WEEKDAYS]
            widgets.append(ttk.Combobox(table, textvariable=row.sound, values=row.sound_options, state="readonly", width=16))
            for col, w in enumerate(widgets):
                w.grid(row=r, column=col, sticky="w", padx=(0, 4), pady=2)
            self._alarm_widgets.extend(widgets)

    def _on_submit_enabled(self, enabled: bool) -> None:
        self.btn_alarms_submit.configure(state="normal" if enabled else "disabled")

    def _submit_alarms(self) -> None:
        batch = self.batcher.submit_alarms(on_done=self._report_sent)
        if batch is not None:
            self.status.set(self.t("common.status.sending"))
