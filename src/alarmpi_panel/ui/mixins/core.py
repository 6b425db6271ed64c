from __future__ import annotations

import logging
import tkinter as tk
from pathlib import Path
from tkinter import messagebox, ttk
from typing import Any, Optional

from alarmpi_panel import __version__
from alarmpi_panel.core.model import Light, Snapshot
from alarmpi_panel.core.state import PanelState
from alarmpi_panel.i18n import error_message, normalize_lang, t as _t
from alarmpi_panel.io.config import AppConfig, load_config
from alarmpi_panel.io.http import RequestResult
from alarmpi_panel.services.dispatch import ThreadDispatcher
from alarmpi_panel.services.sync import AlarmPiClient, LightSubmitDebouncer, SnapshotLoader, SubmissionBatcher, create_client
from alarmpi_panel.ui.view import InvalidFieldError, ViewSynchronizer

from .._shared import tk_var_factory

log = logging.getLogger(__name__)


class CoreMixin:
    """Window skeleton, request pump, alerts and the load/reload flow."""

    def __init__(
        self,
        cfg: Optional[AppConfig] = None,
        cfg_path: Optional[Path] = None,
        client: Optional[AlarmPiClient] = None,
    ) -> None:
        super().__init__()
        self.project_root = Path.cwd()
        self.cfg_path = cfg_path or (self.project_root / "config.json")
        self.cfg = cfg or load_config(self.cfg_path)
        self.lang = normalize_lang(self.cfg.ui.language)
        self.t = lambda k, **kw: _t(self.lang, k, **kw)
        self.title(f"{self.t('app.title')} {__version__}")
        self.geometry("980x460")

        # `self.state` is taken by Tk (wm_state), hence `panel`.
        self.panel = PanelState()
        self.client = client or create_client(self.cfg)
        self.dispatcher = ThreadDispatcher()
        self.view = ViewSynchronizer(
            self.panel,
            tk_var_factory(self),
            on_light_change=lambda light: self.light_debouncer.push(light),
            light_on_brightness=self.cfg.ui.light_on_brightness,
        )
        self.loader = SnapshotLoader(self.client, self.panel, self.dispatcher, alert=self._alert)
        self.batcher = SubmissionBatcher(
            self.client,
            self.panel,
            self.view,
            self.dispatcher,
            alert=self._alert,
            weekdays_format=self.cfg.ui.weekdays_format,
        )
        self.light_debouncer = LightSubmitDebouncer(
            send=self._send_light,
            schedule=self.after,
            cancel=self.after_cancel,
            delay_ms=self.cfg.ui.light_submit_delay_ms,
        )

        self.device_name = tk.StringVar(master=self, value="")
        self.status = tk.StringVar(master=self, value=self.t("common.status.not_loaded"))
        self._build_ui()

        self.panel.on_snapshot(self._on_snapshot)
        self.panel.on_submit_enabled(self._on_submit_enabled)

        self.after(self.cfg.ui.queue_poll_ms, self._pump_requests)
        self.after(100, self._reload_data)

    # ---- layout

    def _build_ui(self) -> None:
        bar = ttk.Frame(self)
        bar.pack(fill="x", padx=10, pady=(10, 6))
        ttk.Label(bar, textvariable=self.device_name, font=("TkDefaultFont", 14, "bold")).pack(side="left")
        ttk.Button(bar, text=self.t("common.reload"), command=self._reload_data).pack(side="right")
        ttk.Button(bar, text=self.t("alarms.stop_active"), command=self._stop_active_alarm).pack(side="right", padx=8)

        nb = ttk.Notebook(self)
        nb.pack(fill="both", expand=True, padx=10)
        tab_alarms = ttk.Frame(nb, padding=8)
        tab_lights = ttk.Frame(nb, padding=8)
        nb.add(tab_alarms, text=self.t("tab.alarms"))
        nb.add(tab_lights, text=self.t("tab.lights"))
        self._build_alarms_tab(tab_alarms)
        self._build_lights_tab(tab_lights)

        ttk.Label(self, textvariable=self.status, anchor="w").pack(fill="x", padx=10, pady=(4, 8))

    # ---- requests

    def _pump_requests(self) -> None:
        try:
            self.dispatcher.drain()
        finally:
            self.after(self.cfg.ui.queue_poll_ms, self._pump_requests)

    def _alert(self, error: Exception) -> None:
        if isinstance(error, InvalidFieldError):
            msg = self.t("err.invalid_time", n=error.index + 1, value=error.value)
        else:
            msg = error_message(self.lang, error)
        self.status.set(msg)
        messagebox.showerror(self.t("msg.error"), msg, parent=self)

    def _reload_data(self) -> None:
        # Light edits still waiting for their debounce go out before the reload.
        self.light_debouncer.flush()
        self.status.set(self.t("common.status.loading", url=self.client.base_url))
        self.loader.load()

    def _on_snapshot(self, snapshot: Optional[Snapshot]) -> None:
        self.view.render()
        self._layout_alarm_rows()
        self._layout_light_rows()
        if snapshot is None:
            self.device_name.set("")
            return
        self.device_name.set(snapshot.name)
        self.status.set(
            self.t(
                "common.status.loaded",
                name=snapshot.name or self.t("app.title"),
                alarms=len(snapshot.alarms),
                lights=len(snapshot.lights),
            )
        )

    def _report_sent(self, result: RequestResult) -> None:
        if result.ok:
            self.status.set(self.t("common.status.sent"))

    # ---- lights: every edit is posted, slider drags are coalesced

    def _send_light(self, light: Light) -> None:
        self.batcher.submit_light(light, on_done=self._report_sent)

    def _stop_active_alarm(self) -> None:
        self.batcher.stop_active_alarm(on_done=self._report_sent)

    # ---- Tk plumbing

    def report_callback_exception(self, exc: Any, val: Any, tb: Any) -> None:
        log.error("Exception in Tk callback", exc_info=(exc, val, tb))
        messagebox.showerror(self.t("msg.error"), str(val), parent=self)
