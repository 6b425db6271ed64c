import copy

import pytest

from alarmpi_panel.core.model import WEEKDAYS, Snapshot, WeekDay
from alarmpi_panel.core.state import PanelState
from alarmpi_panel.ui.view import InvalidFieldError, ViewSynchronizer

from conftest import make_fake_var


def _rendered(snapshot_json, **kwargs):
    state = PanelState()
    state.replace(Snapshot.from_json(snapshot_json))
    changes = []
    view = ViewSynchronizer(state, make_fake_var, on_light_change=changes.append, **kwargs)
    view.render()
    return state, view, changes


def test_render_populates_alarm_controls(scenario_snapshot):
    _state, view, _ = _rendered(scenario_snapshot)
    row = view.alarm_rows[0]
    assert row.index == 0
    assert row.enabled.get() is True
    assert row.time.get() == "07:00"
    assert row.one_time_only.get() is False
    assert [d for d in WEEKDAYS if row.days[d].get()] == [WeekDay.MONDAY, WeekDay.WEDNESDAY]
    assert row.sound.get() == "beep"
    assert row.sound_options == ["beep", "radio"]


def test_render_leaves_every_alarm_clean(scenario_snapshot):
    state, _view, _ = _rendered(scenario_snapshot)
    assert state.dirty_indices() == []
    assert state.submit_enabled is False


def test_render_then_pull_reproduces_alarm(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    before = copy.deepcopy(state.alarms)
    for i in range(len(state.alarms)):
        view.pull(i)
    assert state.alarms == before
    for old, new in zip(before, state.alarms):
        assert (new.enabled, new.time, new.one_time_only, new.skip_once, new.week_days, new.alarm_sound) == (
            old.enabled,
            old.time,
            old.one_time_only,
            old.skip_once,
            old.week_days,
            old.alarm_sound,
        )


@pytest.mark.parametrize("control", ["enabled", "time", "one_time_only", "skip_once", "sound"])
def test_editing_any_control_marks_only_its_alarm(scenario_snapshot, control):
    state, view, _ = _rendered(scenario_snapshot)
    var = getattr(view.alarm_rows[1], control)
    var.set("10:15" if control == "time" else ("beep" if control == "sound" else not var.get()))
    assert [a.modified for a in state.alarms] == [False, True]
    assert state.submit_enabled is True


def test_editing_a_day_checkbox_marks_the_alarm(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    view.alarm_rows[0].days[WeekDay.FRIDAY].set(True)
    assert state.dirty_indices() == [0]


def test_pull_rebuilds_days_in_canonical_order(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    row = view.alarm_rows[0]
    row.days[WeekDay.SUNDAY].set(True)
    row.days[WeekDay.MONDAY].set(False)
    row.days[WeekDay.TUESDAY].set(True)
    alarm = view.pull(0)
    assert list(alarm.week_days) == [WeekDay.TUESDAY, WeekDay.WEDNESDAY, WeekDay.SUNDAY]


def test_pull_dirty_only_touches_modified_alarms(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    view.alarm_rows[0].time.set("6:05")
    # edited in the view but never flagged: must not be pulled
    view.alarm_rows[1].enabled._value = True
    pulled = view.pull_dirty()
    assert [i for i, _ in pulled] == [0]
    assert state.alarms[0].time == "06:05"
    assert state.alarms[1].enabled is False


def test_pull_dirty_rejects_invalid_time_without_touching_mirror(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    view.alarm_rows[0].enabled.set(False)
    view.alarm_rows[1].time.set("25:00")
    with pytest.raises(InvalidFieldError) as exc:
        view.pull_dirty()
    assert exc.value.index == 1
    assert state.alarms[0].enabled is True
    assert state.alarms[1].time == "09:30"


def test_empty_sound_selection_pulls_as_none(scenario_snapshot):
    snap = copy.deepcopy(scenario_snapshot)
    del snap["alarms"][0]["alarmSound"]
    state, view, _ = _rendered(snap)
    assert view.alarm_rows[0].sound.get() == ""
    assert view.pull(0).alarm_sound is None


def test_render_without_snapshot_has_no_rows():
    view = ViewSynchronizer(PanelState(), make_fake_var)
    view.render()
    assert view.alarm_rows == []
    assert view.light_rows == []


# ---- lights


def test_light_render_reflects_brightness(scenario_snapshot):
    snap = copy.deepcopy(scenario_snapshot)
    snap["lights"].append({"id": 6, "index": 1, "name": "Desk", "brightness": 55})
    _state, view, _ = _rendered(snap)
    off_row, on_row = view.light_rows
    assert (off_row.on_checked, off_row.off_checked, off_row.slider_value()) == (False, True, 0)
    assert (on_row.on_checked, on_row.off_checked, on_row.slider_value()) == (True, False, 55)


@pytest.mark.parametrize("value", [0, 1, 30, 100])
def test_slider_drives_radio_state(scenario_snapshot, value):
    state, view, changes = _rendered(scenario_snapshot)
    row = view.light_rows[0]
    row.slide(5)
    row.slide(value)
    light = state.lights[0]
    assert light.brightness == value
    assert row.on_checked is (value > 0)
    assert row.off_checked is (value == 0)
    assert changes[-1] is light


def test_slider_float_values_are_truncated(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    view.light_rows[0].slide("42.7")
    assert state.lights[0].brightness == 42


def test_click_on_sets_default_brightness(scenario_snapshot):
    state, view, changes = _rendered(scenario_snapshot)
    row = view.light_rows[0]
    row.click_on()
    assert state.lights[0].brightness == 30
    assert row.slider_value() == 30
    assert row.on_checked and not row.off_checked
    assert changes == [state.lights[0]]


def test_click_on_uses_configured_brightness(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot, light_on_brightness=75)
    view.light_rows[0].click_on()
    assert state.lights[0].brightness == 75


def test_click_off_zeroes_brightness(scenario_snapshot):
    state, view, changes = _rendered(scenario_snapshot)
    row = view.light_rows[0]
    row.slide(80)
    row.click_off()
    assert state.lights[0].brightness == 0
    assert row.slider_value() == 0
    assert row.off_checked and not row.on_checked
    assert len(changes) == 2


def test_reclicking_selected_radio_changes_nothing(scenario_snapshot):
    state, view, changes = _rendered(scenario_snapshot)
    row = view.light_rows[0]
    row.slide(70)
    row.click_on()
    assert state.lights[0].brightness == 70
    assert len(changes) == 1


def test_light_edits_do_not_touch_alarm_dirty_state(scenario_snapshot):
    state, view, _ = _rendered(scenario_snapshot)
    view.light_rows[0].click_on()
    assert state.submit_enabled is False


def test_slider_jitter_within_one_step_posts_nothing(scenario_snapshot):
    _state, view, changes = _rendered(scenario_snapshot)
    row = view.light_rows[0]
    row.slide("40.2")
    row.slide("40.8")
    assert len(changes) == 1


def test_unpadded_device_time_is_shown_as_sent_and_pulled_padded(scenario_snapshot):
    snap = copy.deepcopy(scenario_snapshot)
    snap["alarms"][0]["time"] = "7:00"
    state, view, _ = _rendered(snap)
    assert view.alarm_rows[0].time.get() == "7:00"
    assert state.dirty_indices() == []
    assert view.pull(0).time == "07:00"
