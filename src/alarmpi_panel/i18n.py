from __future__ import annotations

from typing import Any, Dict

LANGS = ("de", "en")

_STRINGS: Dict[str, Dict[str, str]] = {
    "de": {
        "app.title": "AlarmPi",
        "common.reload": "Neu laden",
        "common.status.loading": "Lade Daten von {url} ...",
        "common.status.loaded": "{name}: {alarms} Alarme, {lights} Lichter",
        "common.status.not_loaded": "Keine Daten",
        "common.status.sending": "Sende ...",
        "common.status.sent": "Gespeichert",
        "msg.error": "AlarmPi",
        "err.transport": "Verbindung zu AlarmPi gescheitert. Fehlercode: {e}",
        "err.status": "Fehler bei Kommunikation mit AlarmPi: {e}",
        "err.protocol": "Ungültige Daten von AlarmPi: {e}",
        "err.internal": "Interner Fehler bei Anfrage an AlarmPi: {e}",
        "err.invalid_time": "Ungültige Uhrzeit in Alarm {n}: {value}",
        "tab.alarms": "Alarme",
        "tab.lights": "Lichter",
        "alarms.enabled": "Aktiv",
        "alarms.time": "Uhrzeit",
        "alarms.one_time_only": "Einmalig",
        "alarms.skip_once": "Einmal aussetzen",
        "alarms.sound": "Sound",
        "alarms.submit": "Übernehmen",
        "alarms.stop_active": "Alarm beenden",
        "day.MONDAY": "Mo",
        "day.TUESDAY": "Di",
        "day.WEDNESDAY": "Mi",
        "day.THURSDAY": "Do",
        "day.FRIDAY": "Fr",
        "day.SATURDAY": "Sa",
        "day.SUNDAY": "So",
        "lights.name": "Name",
        "lights.off": "Aus",
        "lights.on": "An",
        "lights.brightness": "Helligkeit",
    },
    "en": {
        "app.title": "AlarmPi",
        "common.reload": "Reload",
        "common.status.loading": "Loading data from {url} ...",
        "common.status.loaded": "{name}: {alarms} alarms, {lights} lights",
        "common.status.not_loaded": "No data",
        "common.status.sending": "Sending ...",
        "common.status.sent": "Saved",
        "msg.error": "AlarmPi",
        "err.transport": "Connection to AlarmPi failed. Error: {e}",
        "err.status": "Error communicating with AlarmPi: {e}",
        "err.protocol": "Invalid data from AlarmPi: {e}",
        "err.internal": "Internal error while talking to AlarmPi: {e}",
        "err.invalid_time": "Invalid time in alarm {n}: {value}",
        "tab.alarms": "Alarms",
        "tab.lights": "Lights",
        "alarms.enabled": "Enabled",
        "alarms.time": "Time",
        "alarms.one_time_only": "One time only",
        "alarms.skip_once": "Skip once",
        "alarms.sound": "Sound",
        "alarms.submit": "Submit",
        "alarms.stop_active": "Stop alarm",
        "day.MONDAY": "Mon",
        "day.TUESDAY": "Tue",
        "day.WEDNESDAY": "Wed",
        "day.THURSDAY": "Thu",
        "day.FRIDAY": "Fri",
        "day.SATURDAY": "Sat",
        "day.SUNDAY": "Sun",
        "lights.name": "Name",
        "lights.off": "Off",
        "lights.on": "On",
        "lights.brightness": "Brightness",
    },
}


def normalize_lang(lang: Any) -> str:
    s = str(lang or "").strip().lower()[:2]
    return s if s in LANGS else "de"


def t(lang: str, key: str, **kw: Any) -> str:
    table = _STRINGS.get(normalize_lang(lang), _STRINGS["de"])
    text = table.get(key) or _STRINGS["de"].get(key) or key
    if kw:
        try:
            return text.format(**kw)
        except (KeyError, IndexError, ValueError):
            return text
    return text


def error_message(lang: str, error: Exception) -> str:
    """Localized alert text for a failed AlarmPi request."""
    kind = getattr(error, "kind", "transport")
    if kind not in {"transport", "status", "protocol", "internal"}:
        kind = "transport"
    return t(lang, f"err.{kind}", e=error)
