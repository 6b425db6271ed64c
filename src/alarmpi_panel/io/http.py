from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

log = logging.getLogger(__name__)

DEFAULT_PORT = 3948
LOCAL_HOST = "127.0.0.1"


@dataclass(frozen=True)
class HttpConfig:
    timeout_seconds: float = 8.0
    user_agent: str = "AlarmPiPanel (+requests)"

    def timeout(self) -> Optional[float]:
        return self.timeout_seconds if self.timeout_seconds and self.timeout_seconds > 0 else None


class AlarmPiError(Exception):
    """Base class for failed requests against the AlarmPi."""

    kind = "error"


class TransportError(AlarmPiError):
    """Device unreachable (connection refused, DNS, timeout...)."""

    kind = "transport"


class StatusError(AlarmPiError):
    """Device answered with a status outside 2xx."""

    kind = "status"

    def __init__(self, status: int, reason: str = "") -> None:
        self.status = int(status)
        self.reason = reason or ""
        super().__init__(f"HTTP {self.status} {self.reason}".strip())


class ProtocolError(AlarmPiError):
    """Device answered 2xx but the body could not be used."""

    kind = "protocol"


class InternalError(AlarmPiError):
    """A request function failed with something other than an AlarmPi error."""

    kind = "internal"


@dataclass(frozen=True)
class RequestResult:
    ok: bool
    data: Any = None
    error: Optional[AlarmPiError] = None

    @classmethod
    def success(cls, data: Any = None) -> "RequestResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: AlarmPiError) -> "RequestResult":
        return cls(ok=False, error=error)


def resolve_host(host: Optional[str]) -> str:
    """Empty host (e.g. nothing configured) means the local machine."""
    h = (host or "").strip()
    return h if h else LOCAL_HOST


def build_base_url(host: Optional[str], port: int = DEFAULT_PORT) -> str:
    return f"http://{resolve_host(host)}:{int(port)}/"


class AlarmPiHttp:
    """Thin requests wrapper for the AlarmPi JSON endpoint (shared session, fixed timeout).

    No retries; a failed POST is re-triggered by the user.
    """

    def __init__(self, base_url: str, cfg: Optional[HttpConfig] = None, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url
        self.cfg = cfg or HttpConfig()
        self._sess = session or requests.Session()

    def _send(self, method: str, **kwargs: Any) -> requests.Response:
        headers = {"User-Agent": self.cfg.user_agent}
        if "json" in kwargs:
            headers["Content-Type"] = "application/json"
        try:
            r = self._sess.request(method, self.base_url, headers=headers, timeout=self.cfg.timeout(), **kwargs)
            r.raise_for_status()
            return r
        except requests.HTTPError as e:
            resp = e.response
            status = resp.status_code if resp is not None else 0
            reason = (resp.reason or "") if resp is not None else str(e)
            log.warning("%s %s failed: HTTP %s %s", method, self.base_url, status, reason)
            raise StatusError(status, reason) from e
        except requests.RequestException as e:
            log.warning("%s %s failed: %s", method, self.base_url, e)
            raise TransportError(str(e)) from e

    def get_json(self) -> Any:
        r = self._send("GET")
        log.info("GET request successfully processed, status=%s", r.status_code)
        try:
            return r.json()
        except ValueError as e:
            raise ProtocolError(f"invalid JSON from AlarmPi: {e}") from e

    def post_json(self, body: Dict[str, Any]) -> str:
        r = self._send("POST", json=body)
        log.info("POST request successfully processed, status=%s", r.status_code)
        log.debug("received AlarmPi data: %s", r.text)
        return r.text


def guarded(fn: Callable[..., Any], *args: Any) -> RequestResult:
    """Run a request function and fold AlarmPi errors into a RequestResult."""
    try:
        return RequestResult.success(fn(*args))
    except AlarmPiError as e:
        return RequestResult.failure(e)
