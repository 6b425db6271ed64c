from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from alarmpi_panel.core.model import Alarm, Light, Snapshot

log = logging.getLogger(__name__)


class PanelState:
    """Local mirror of the device state plus per-alarm dirty tracking.

    Only the UI thread mutates this object. Alarms are addressed by their
    index in the snapshot's alarm list, which is also the row handle used
    by the view.
    """

    def __init__(self) -> None:
        self.snapshot: Optional[Snapshot] = None
        # Bumped on every replace(); completions from an older mirror are stale.
        self.generation = 0
        self._revisions: Dict[int, int] = {}
        self._submitting = False
        self._last_enabled = False
        self._snapshot_listeners: List[Callable[[Optional[Snapshot]], None]] = []
        self._enabled_listeners: List[Callable[[bool], None]] = []

    # ---- listeners

    def on_snapshot(self, cb: Callable[[Optional[Snapshot]], None]) -> None:
        self._snapshot_listeners.append(cb)

    def on_submit_enabled(self, cb: Callable[[bool], None]) -> None:
        self._enabled_listeners.append(cb)

    def _notify_enabled(self, force: bool = False) -> None:
        enabled = self.submit_enabled
        if not force and enabled == self._last_enabled:
            return
        self._last_enabled = enabled
        for cb in list(self._enabled_listeners):
            cb(enabled)

    # ---- mirror

    @property
    def loaded(self) -> bool:
        return self.snapshot is not None

    @property
    def alarms(self) -> List[Alarm]:
        return self.snapshot.alarms if self.snapshot else []

    @property
    def lights(self) -> List[Light]:
        return self.snapshot.lights if self.snapshot else []

    def alarm_at(self, index: int) -> Alarm:
        return self.alarms[index]

    def light_at(self, index: int) -> Light:
        return self.lights[index]

    def replace(self, snapshot: Optional[Snapshot]) -> None:
        """Swap in a freshly loaded snapshot (or drop the mirror with None)."""
        self.snapshot = snapshot
        self.generation += 1
        self._revisions = {}
        self._submitting = False
        for alarm in self.alarms:
            alarm.modified = False
        log.info(
            "mirror replaced: %s alarms, %s lights",
            len(self.alarms),
            len(self.lights),
        )
        for cb in list(self._snapshot_listeners):
            cb(snapshot)
        self._notify_enabled(force=True)

    # ---- dirty tracking

    def mark_dirty(self, index: int) -> None:
        alarm = self.alarm_at(index)
        alarm.modified = True
        self._revisions[index] = self._revisions.get(index, 0) + 1
        log.debug("alarm index=%s id=%s marked as modified", index, alarm.id)
        self._notify_enabled()

    def clear(self, index: int) -> None:
        self.alarm_at(index).modified = False
        self._notify_enabled()

    def clear_all(self) -> None:
        for alarm in self.alarms:
            alarm.modified = False
        self._notify_enabled()

    def revision(self, index: int) -> int:
        return self._revisions.get(index, 0)

    def dirty_indices(self) -> List[int]:
        return [i for i, a in enumerate(self.alarms) if a.modified]

    def clear_submitted(self, revisions: Dict[int, int]) -> None:
        """Clear flags of submitted alarms that were not edited again meanwhile."""
        for index, rev in revisions.items():
            if index >= len(self.alarms):
                continue
            if self.revision(index) == rev:
                self.alarms[index].modified = False
            else:
                log.debug("alarm index=%s edited during submit, stays modified", index)
        self._notify_enabled()

    @property
    def any_dirty(self) -> bool:
        return any(a.modified for a in self.alarms)

    # ---- submission gate

    @property
    def submitting(self) -> bool:
        return self._submitting

    def begin_submit(self) -> None:
        self._submitting = True
        self._notify_enabled()

    def end_submit(self) -> None:
        self._submitting = False
        self._notify_enabled()

    @property
    def submit_enabled(self) -> bool:
        return self.any_dirty and not self._submitting
