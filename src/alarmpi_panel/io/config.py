from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from alarmpi_panel import __version__
from alarmpi_panel.core.model import WEEKDAYS_FORMATS
from alarmpi_panel.io.http import DEFAULT_PORT, HttpConfig

DEMO_SCHEME = "demo://"


@dataclass(frozen=True)
class DeviceConfig:
    # Empty host means 127.0.0.1; "demo://..." selects the built-in demo device.
    host: str = ""
    port: int = DEFAULT_PORT

    @property
    def is_demo(self) -> bool:
        return self.host.strip().lower().startswith(DEMO_SCHEME)


@dataclass(frozen=True)
class UiConfig:
    # UI language: de|en
    language: str = "de"

    # Brightness a light gets when switched on via the "on" radio button.
    light_on_brightness: int = 30

    # Slider drags are coalesced into one POST after this delay.
    light_submit_delay_ms: int = 150

    # How weekDays are sent: "string" ("[MONDAY, FRIDAY]", what the daemon parses) or "list".
    weekdays_format: str = "string"

    # How often the Tk loop drains finished requests.
    queue_poll_ms: int = 50


@dataclass(frozen=True)
class AppConfig:
    version: str = __version__
    device: DeviceConfig = field(default_factory=DeviceConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    ui: UiConfig = field(default_factory=UiConfig)


def default_config_path(project_root: Optional[Path] = None) -> Path:
    if project_root is None:
        project_root = Path.cwd()
    return project_root / "config.json"


def _coerce_int(x: Any, default: int) -> int:
    try:
        return int(x)
    except Exception:
        return default


def _coerce_float(x: Any, default: float) -> float:
    try:
        return float(x)
    except Exception:
        return default


def _load_json(path: Path) -> Dict[str, Any]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("config.json must contain a JSON object")
    return raw


def load_config(path: Optional[Path] = None) -> AppConfig:
    path = Path(path) if path else default_config_path()
    if not path.exists():
        cfg = AppConfig()
        save_config(cfg, path)
        return cfg

    raw = _load_json(path)

    dev_raw = raw.get("device", {}) if isinstance(raw.get("device"), dict) else {}
    port = _coerce_int(dev_raw.get("port", DeviceConfig.port), DeviceConfig.port)
    if not 0 < port < 65536:
        port = DeviceConfig.port
    device = DeviceConfig(
        host=str(dev_raw.get("host", DeviceConfig.host) or ""),
        port=port,
    )

    http_raw = raw.get("http", {}) if isinstance(raw.get("http"), dict) else {}
    http = HttpConfig(
        timeout_seconds=_coerce_float(http_raw.get("timeout_seconds", HttpConfig.timeout_seconds), HttpConfig.timeout_seconds),
        user_agent=str(http_raw.get("user_agent", HttpConfig.user_agent) or HttpConfig.user_agent),
    )

    ui_raw = raw.get("ui", {}) if isinstance(raw.get("ui"), dict) else {}
    weekdays_format = str(ui_raw.get("weekdays_format", UiConfig.weekdays_format) or "").strip().lower()
    if weekdays_format not in WEEKDAYS_FORMATS:
        weekdays_format = UiConfig.weekdays_format
    on_brightness = _coerce_int(ui_raw.get("light_on_brightness", UiConfig.light_on_brightness), UiConfig.light_on_brightness)
    if not 1 <= on_brightness <= 100:
        on_brightness = UiConfig.light_on_brightness
    ui = UiConfig(
        language=str(ui_raw.get("language", UiConfig.language) or UiConfig.language),
        light_on_brightness=on_brightness,
        light_submit_delay_ms=max(0, _coerce_int(ui_raw.get("light_submit_delay_ms", UiConfig.light_submit_delay_ms), UiConfig.light_submit_delay_ms)),
        weekdays_format=weekdays_format,
        queue_poll_ms=max(10, _coerce_int(ui_raw.get("queue_poll_ms", UiConfig.queue_poll_ms), UiConfig.queue_poll_ms)),
    )

    cfg = AppConfig(
        version=str(raw.get("version", __version__)),
        device=device,
        http=http,
        ui=ui,
    )

    # Write back missing blocks so users see every option
    if any(k not in raw for k in ("device", "http", "ui")):
        save_config(cfg, path)

    return cfg


def save_config(cfg: AppConfig, path: Optional[Path] = None) -> Path:
    path = Path(path) if path else default_config_path()
    obj = {
        "version": cfg.version,
        "device": {
            "host": cfg.device.host,
            "port": cfg.device.port,
        },
        "http": {
            "timeout_seconds": cfg.http.timeout_seconds,
            "user_agent": cfg.http.user_agent,
        },
        "ui": {
            "language": cfg.ui.language,
            "light_on_brightness": cfg.ui.light_on_brightness,
            "light_submit_delay_ms": cfg.ui.light_submit_delay_ms,
            "weekdays_format": cfg.ui.weekdays_format,
            "queue_poll_ms": cfg.ui.queue_poll_ms,
        },
    }
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
