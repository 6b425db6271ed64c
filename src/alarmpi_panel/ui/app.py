from __future__ import annotations

"""UI entrypoint.

The Tkinter application itself lives in `ui/app_main.py` and `ui/mixins/*`.
"""

import logging
from pathlib import Path
from typing import Optional

from alarmpi_panel.io.config import AppConfig
from alarmpi_panel.io.logging_setup import setup_logging

from .app_main import App


def run_gui(cfg: Optional[AppConfig] = None, cfg_path: Optional[Path] = None, level: int = logging.INFO) -> None:
    """Start the Tkinter GUI application.

    This entrypoint is imported by `alarmpi_panel.__main__`.
    Logs are written to ./logs next to config.json.
    """
    setup_logging(base_dir=Path(cfg_path).parent if cfg_path else Path.cwd(), level=level)

    app = App(cfg=cfg, cfg_path=cfg_path)
    app.mainloop()
