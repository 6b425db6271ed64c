from __future__ import annotations

# Thin composition layer: the window is assembled from mixins.
import tkinter as tk

from .mixins.core import CoreMixin
from .mixins.alarms import AlarmsMixin
from .mixins.lights import LightsMixin


class App(CoreMixin, tk.Tk, AlarmsMixin, LightsMixin):
    """Main GUI application class (composed from mixins)."""
    pass
