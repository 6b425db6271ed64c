from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from alarmpi_panel.io.config import DEMO_SCHEME, AppConfig, default_config_path, load_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="alarmpi-panel", description="AlarmPi control panel")
    parser.add_argument("--version", action="store_true", help="print version and exit")
    parser.add_argument("--config", type=Path, default=None, help="path to config.json (default: ./config.json)")
    parser.add_argument("--host", default=None, help="AlarmPi host (empty: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=None, help="AlarmPi port")
    parser.add_argument("--lang", choices=["de", "en"], default=None, help="UI language")
    parser.add_argument("--demo", action="store_true", help="use the built-in demo AlarmPi")
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    return parser


def apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    device = cfg.device
    if args.host is not None:
        device = replace(device, host=args.host)
    if args.port is not None:
        device = replace(device, port=args.port)
    if args.demo:
        device = replace(device, host=DEMO_SCHEME + "alarmpi")
    ui = cfg.ui
    if args.lang is not None:
        ui = replace(ui, language=args.lang)
    return replace(cfg, device=device, ui=ui)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        from alarmpi_panel import __version__
        print(__version__)
        return 0

    cfg_path = args.config or default_config_path()
    cfg = apply_overrides(load_config(cfg_path), args)

    # Lazy-import GUI so that `--version` (and headless environments)
    # don't require tkinter.
    from alarmpi_panel.ui.app import run_gui
    run_gui(cfg=cfg, cfg_path=cfg_path, level=logging.DEBUG if args.debug else logging.INFO)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
