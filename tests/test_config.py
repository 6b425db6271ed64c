import json

import pytest

from alarmpi_panel.io.config import AppConfig, DeviceConfig, load_config, save_config


def test_first_run_writes_defaults(tmp_path):
    path = tmp_path / "config.json"
    cfg = load_config(path)
    assert path.exists()
    assert cfg.device.host == ""
    assert cfg.device.port == 3948
    assert cfg.ui.language == "de"
    assert cfg.ui.light_on_brightness == 30
    assert cfg.ui.weekdays_format == "string"
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert set(raw) == {"version", "device", "http", "ui"}


def test_save_then_load_keeps_values(tmp_path):
    path = tmp_path / "config.json"
    cfg = AppConfig(device=DeviceConfig(host="alarmpi.local", port=4000))
    save_config(cfg, path)
    loaded = load_config(path)
    assert loaded.device == cfg.device
    assert loaded.ui == cfg.ui
    assert loaded.http == cfg.http


def test_bad_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "device": {"host": None, "port": "abc"},
                "http": {"timeout_seconds": "soon"},
                "ui": {"weekdays_format": "csv", "light_on_brightness": 0, "queue_poll_ms": 1},
            }
        ),
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.device.host == ""
    assert cfg.device.port == 3948
    assert cfg.http.timeout_seconds == 8.0
    assert cfg.ui.weekdays_format == "string"
    assert cfg.ui.light_on_brightness == 30
    assert cfg.ui.queue_poll_ms == 10


def test_missing_blocks_are_written_back(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"device": {"host": "10.0.0.2"}}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.device.host == "10.0.0.2"
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert "ui" in raw and "http" in raw


def test_non_object_config_is_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_demo_host_detection():
    assert DeviceConfig(host="demo://alarmpi").is_demo
    assert not DeviceConfig(host="192.168.1.20").is_demo
