"""
Redmine issue tracker gateway.

All outbound HTTP calls to Redmine go through this class.
Direct `requests` calls in services or blueprints are FORBIDDEN.

  - Auth: X-Redmine-API-Key header (the key must belong to a Redmine
    administrator, otherwise /users.json is refused)
  - Retry: GET only, max 2 extra attempts, backoff 1 s → 4 s
  - POST is never retried: a timed-out POST may still have created the
    issue, and a second one would file a duplicate ticket
  - Timeout: 30 s (configurable)
  - Failures raise ExternalServiceError with Redmine's own message

Testability: pass a mock `session` (and `sleep`) to RedmineGateway().
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import requests

from onboarder.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

# ── Retry constants ────────────────────────────────────────────────────────
_RETRY_MAX = 2
_RETRY_BACKOFF_SECONDS = [1, 4]

_DEFAULT_TIMEOUT = 30
_PAGE_LIMIT = 100


class TrackerResult:
    """Structured outcome of one gateway request.

    Attributes:
        ok:           True if the call succeeded (HTTP 2xx + no exception).
        status_code:  HTTP status code (None on network-level failure).
        data:         Parsed JSON body, else None.
        error:        Human-readable error message or None.
        duration_ms:  Round-trip latency in milliseconds.
    """

    __slots__ = ("ok", "status_code", "data", "error", "duration_ms")

    def __init__(
        self,
        *,
        ok: bool,
        status_code: int | None,
        data: dict | list | None,
        error: str | None,
        duration_ms: int,
    ) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def raise_for_error(self) -> "TrackerResult":
        if not self.ok:
            raise ExternalServiceError(self.error or "Unknown error", status_code=self.status_code)
        return self


def _error_message(resp: requests.Response) -> str:
    """Redmine reports failures as {"errors": [...]}; fall back to the raw body."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("errors"):
        return "; ".join(str(e) for e in body["errors"])
    text = (resp.text or "").strip()
    return f"HTTP {resp.status_code}: {text[:500]}" if text else f"HTTP {resp.status_code}"


class RedmineGateway:
    """Redmine REST API gateway.

    Usage:
        gw = RedmineGateway("https://redmine.example.com", api_key="...")
        token = gw.post_attachment(b"...")
        issue_id = gw.post_issue({"project_id": 3, "subject": "...", "uploads": [...]})
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        session: requests.Session | None = None,
        timeout: int = _DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self._api_key = api_key
        self._session: requests.Session | None = session
        self.timeout = timeout
        self._sleep = sleep

    # ── HTTP session ─────────────────────────────────────────────────────────

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def server_uri(self) -> str:
        return self.base_url

    # ── Core request dispatcher ───────────────────────────────────────────────

    def _headers(self, content_type: str) -> dict:
        headers = {"Content-Type": content_type, "Accept": "application/json"}
        if self._api_key:
            headers["X-Redmine-API-Key"] = self._api_key
        return headers

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict | None = None,
        data: bytes | None = None,
        params: dict | None = None,
    ) -> TrackerResult:
        """Execute one request against Redmine. Never raises.

        GET requests are retried on network errors and non-2xx responses
        (except 4xx, which will not change on retry).
        """
        url = f"{self.base_url}{path}"
        content_type = "application/octet-stream" if data is not None else "application/json"
        kwargs: dict[str, Any] = {"headers": self._headers(content_type), "timeout": self.timeout}
        if json_body is not None:
            kwargs["json"] = json_body
        if data is not None:
            kwargs["data"] = data
        if params:
            kwargs["params"] = params

        attempts = _RETRY_MAX + 1 if method.upper() == "GET" else 1
        last_error = "Unknown error"
        last_status: int | None = None

        for attempt in range(attempts):
            t0 = time.perf_counter()
            try:
                resp = self.session.request(method, url, **kwargs)
            except requests.Timeout:
                last_error = f"Request timed out after {self.timeout}s"
                last_status = None
            except requests.RequestException as exc:
                last_error = str(exc)[:500]
                last_status = None
            else:
                duration_ms = int((time.perf_counter() - t0) * 1000)
                last_status = resp.status_code
                if resp.ok:
                    try:
                        body = resp.json() if resp.content else {}
                    except ValueError:
                        body = {}
                    return TrackerResult(
                        ok=True, status_code=resp.status_code, data=body,
                        error=None, duration_ms=duration_ms,
                    )
                last_error = _error_message(resp)
                if 400 <= resp.status_code < 500:
                    break

            logger.warning(
                "Redmine request failed attempt=%d/%d method=%s url=%s status=%s error=%s",
                attempt + 1, attempts, method, url, last_status, last_error,
                extra={"tracker_status": last_status},
            )
            if attempt < attempts - 1:
                sleep_s = _RETRY_BACKOFF_SECONDS[min(attempt, len(_RETRY_BACKOFF_SECONDS) - 1)]
                logger.info("Retrying Redmine request in %ss (attempt %d)", sleep_s, attempt + 2)
                self._sleep(sleep_s)

        return TrackerResult(
            ok=False, status_code=last_status, data=None, error=last_error, duration_ms=0,
        )

    def _get_all(self, path: str, collection: str) -> list[dict]:
        """Follow Redmine offset/limit pagination to the end."""
        items: list[dict] = []
        offset = 0
        while True:
            result = self.request(
                "GET", path, params={"offset": offset, "limit": _PAGE_LIMIT},
            ).raise_for_error()
            body = result.data or {}
            page = body.get(collection) or []
            items.extend(page)
            total = body.get("total_count")
            offset += len(page)
            if not page or total is None or offset >= int(total):
                return items

    # ── Redmine operations ─────────────────────────────────────────────────────

    def list_projects(self) -> list[dict]:
        """Return every project as {id, identifier, name, ...}."""
        return self._get_all("/projects.json", "projects")

    def list_users(self) -> list[dict]:
        """Return every user as {id, login, firstname, lastname, ...}."""
        return self._get_all("/users.json", "users")

    def post_attachment(self, content: bytes) -> str:
        """Upload raw bytes; return the upload token to attach to an issue."""
        result = self.request("POST", "/uploads.json", data=content).raise_for_error()
        token = ((result.data or {}).get("upload") or {}).get("token")
        if not token:
            raise ExternalServiceError("Upload response carried no token", result.status_code)
        return token

    def post_issue(self, fields: dict) -> int:
        """Create an issue; return its numeric id.

        ``fields`` follows Redmine's issue payload: project_id, subject,
        description, assigned_to_id, due_date, and optionally
        parent_issue_id and uploads.
        """
        result = self.request("POST", "/issues.json", json_body={"issue": fields}).raise_for_error()
        issue_id = ((result.data or {}).get("issue") or {}).get("id")
        if issue_id is None:
            raise ExternalServiceError("Issue response carried no id", result.status_code)
        logger.info(
            "Redmine issue created id=%s subject=%r", issue_id, fields.get("subject"),
            extra={"issue_id": int(issue_id), "duration_ms": result.duration_ms},
        )
        return int(issue_id)
