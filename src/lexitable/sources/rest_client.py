"""REST row source: list/get/create/update/delete keyed by row id."""

from typing import Any, Dict, List, Optional

import requests

from ..utils.logging import get_logger
from .file_source import unwrap_rows

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10


class RowSourceError(RuntimeError):
    """Raised when the backing API rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RestRowClient:
    """
    Thin client for one REST resource (e.g. ``/api/clients``).

    The bearer token is passed in explicitly; the client keeps no global
    session state beyond its own ``requests.Session``.
    """

    def __init__(
        self,
        base_url: str,
        resource: str,
        *,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        resource_key: Optional[str] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.resource = "/" + resource.strip("/")
        self.timeout_seconds = timeout_seconds
        self.resource_key = resource_key or self.resource.rsplit("/", 1)[-1]
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json", "Content-Type": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _url(self, row_id: Any = None) -> str:
        if row_id is None:
            return f"{self.base_url}{self.resource}"
        return f"{self.base_url}{self.resource}/{row_id}"

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self.session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as exc:
            logger.error(f"{method} {url} failed: {exc}")
            raise RowSourceError(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise RowSourceError(
                f"{method} {url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise RowSourceError(f"{method} {url} returned invalid JSON", response.status_code) from exc

    def list_rows(self) -> List[Dict[str, Any]]:
        payload = self._request("GET", self._url())
        rows = unwrap_rows(payload, self.resource_key)
        logger.debug(f"Fetched {len(rows)} rows from {self._url()}")
        return rows

    def get_row(self, row_id: Any) -> Optional[Dict[str, Any]]:
        return self._request("GET", self._url(row_id))

    def create_row(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._request("POST", self._url(), json=data)

    def update_row(self, row_id: Any, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self._request("PUT", self._url(row_id), json=data)

    def delete_row(self, row_id: Any) -> None:
        self._request("DELETE", self._url(row_id))
