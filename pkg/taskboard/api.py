"""
Remote Task API client.

Thin wrapper over the application's task REST endpoints:

    GET    {base}/tasks        → JSON array of tasks
    POST   {base}/tasks        → created task
    PATCH  {base}/tasks/{id}   → updated task
    DELETE {base}/tasks/{id}   → (body ignored)

Every failure (transport, non-2xx, bad JSON) surfaces as TaskApiError.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class TaskApiError(Exception):
    """Raised when the remote task API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TaskApiClient:
    """Calls the remote task endpoints over a shared requests session."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str = "",
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["X-API-Key"] = api_key

    def _url(self, *parts: str) -> str:
        return "/".join([self.base_url, *(quote(str(p), safe="") for p in parts)])

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if payload is not None:
            kwargs["json"] = payload

        try:
            r = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            raise TaskApiError(f"{method} {url}: {e}") from e

        if not r.ok:
            raise TaskApiError(
                f"{method} {url}: HTTP {r.status_code}: {_error_message(r)}",
                status_code=r.status_code,
            )

        if method == "DELETE" or not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise TaskApiError(f"{method} {url}: invalid JSON response", status_code=r.status_code) from e

    def list_tasks(self) -> List[Dict[str, Any]]:
        data = self._request("GET", self._url("tasks"))
        if not isinstance(data, list):
            raise TaskApiError(f"GET {self._url('tasks')}: expected a JSON array, got {type(data).__name__}")
        return data

    def create_task(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", self._url("tasks"), payload)

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PATCH", self._url("tasks", task_id), fields)

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", self._url("tasks", task_id))


def _error_message(r: requests.Response) -> str:
    """Prefer the API's {"error": ...} body, fall back to the reason phrase."""
    try:
        body = r.json()
    except ValueError:
        return r.reason or "request failed"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return r.reason or "request failed"
