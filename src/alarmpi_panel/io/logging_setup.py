from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from alarmpi_panel import __version__

LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"

# requests logs every connection at DEBUG through urllib3
_NOISY = ("urllib3",)

_log_path: Optional[Path] = None


def log_file_for(base_dir: Path, day: Optional[datetime] = None) -> Path:
    return Path(base_dir) / "logs" / f"alarmpi_{(day or datetime.now()).strftime('%Y-%m-%d')}.log"


def setup_logging(base_dir: Optional[Path] = None, level: int = logging.INFO) -> Path:
    """Log to ./logs/alarmpi_YYYY-MM-DD.log (under *base_dir*) and stdout.

    Uncaught exceptions on the main thread and on request worker threads are
    logged too. Calling it again only returns the log path.
    """
    global _log_path
    if _log_path is not None:
        return _log_path

    log_path = log_file_for(Path(base_dir) if base_dir else Path.cwd())
    log_path.parent.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)
    for handler in (logging.FileHandler(log_path, encoding="utf-8"), logging.StreamHandler(sys.stdout)):
        handler.setLevel(level)
        handler.setFormatter(fmt)
        root.addHandler(handler)
    for name in _NOISY:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    crash_log = logging.getLogger("alarmpi_panel.unhandled")

    def _excepthook(exc_type, exc, tb):
        crash_log.error("Unhandled exception", exc_info=(exc_type, exc, tb))
        sys.__excepthook__(exc_type, exc, tb)

    def _thread_excepthook(args):
        crash_log.error(
            "Unhandled exception in thread %s",
            getattr(args.thread, "name", "?"),
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook

    _log_path = log_path
    logging.getLogger(__name__).info("AlarmPi panel %s, logging to %s", __version__, log_path)
    return log_path
