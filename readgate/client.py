"""HTTP client for the material progress API.

Implements the committer interface ``PageTimer`` expects, so a timer running
next to the reader can checkpoint into a remote service.
"""
import logging
from typing import Any, Optional

import httpx

from readgate.core.config import settings
from readgate.core.errors import NetworkError, error_from_name
from readgate.schemas import DownloadStatus, PageCountResponse, PageState, ReadingSession

logger = logging.getLogger(__name__)


class MaterialProgressClient:
    """Thin wrapper over the /material-progress endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        token = token or settings.PROGRESS_API_TOKEN
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self.http = httpx.Client(
            base_url=base_url or settings.PROGRESS_API_URL,
            headers=headers,
            timeout=timeout or settings.PROGRESS_API_TIMEOUT,
            transport=transport,
        )

    def close(self):
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        try:
            response = self.http.request(method, path, json=json)
        except httpx.TransportError as e:
            raise NetworkError(f"{method} {path} failed: {e}")

        if response.status_code >= 500:
            raise NetworkError(f"{method} {path} returned {response.status_code}")
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            detail = body.get("detail") or response.reason_phrase
            raise error_from_name(body.get("error"), str(detail))
        return response.json()["data"]

    def initialize(self, material_id: str, total_pages: int) -> ReadingSession:
        data = self._request("POST", f"/material-progress/{material_id}/initialize", {"totalPages": total_pages})
        return ReadingSession.model_validate(data)

    def start_page(self, material_id: str, page_number: int) -> ReadingSession:
        data = self._request("POST", f"/material-progress/{material_id}/pages/{page_number}/start")
        return ReadingSession.model_validate(data)

    def commit_page_time(self, material_id: str, page_number: int, time_spent: int) -> ReadingSession:
        data = self._request(
            "PUT",
            f"/material-progress/{material_id}/pages/{page_number}/time",
            {"timeSpent": time_spent},
        )
        return ReadingSession.model_validate(data)

    def complete_page(self, material_id: str, page_number: int) -> ReadingSession:
        data = self._request("POST", f"/material-progress/{material_id}/pages/{page_number}/complete")
        return ReadingSession.model_validate(data)

    def get_progress(self, material_id: str) -> ReadingSession:
        data = self._request("GET", f"/material-progress/{material_id}/progress")
        return ReadingSession.model_validate(data)

    def page_progress(self, material_id: str, page_number: int) -> PageState:
        data = self._request("GET", f"/material-progress/{material_id}/pages/{page_number}/progress")
        return PageState.model_validate(data)

    def can_download(self, material_id: str) -> DownloadStatus:
        data = self._request("GET", f"/material-progress/{material_id}/can-download")
        return DownloadStatus.model_validate(data)

    def page_count(self, material_id: str) -> PageCountResponse:
        data = self._request("GET", f"/materials/{material_id}/page-count")
        return PageCountResponse.model_validate(data)
