"""Async client for the learning platform's student content endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from .config import ApiSettings, get_api_settings
from .models import ContentItem

logger = logging.getLogger(__name__)


class ContentApiError(RuntimeError):
    """Raised when the platform API cannot be reached or rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _unwrap_envelope(payload: Any) -> List[Any]:
    if isinstance(payload, dict):
        payload = payload.get("data")
    if isinstance(payload, list):
        return payload
    return []


def parse_contents(payload: Any) -> List[ContentItem]:
    """Validate every entry of a content response, skipping malformed ones."""

    items: List[ContentItem] = []
    for index, entry in enumerate(_unwrap_envelope(payload)):
        try:
            items.append(ContentItem.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Skipping malformed content entry #%d: %s", index, exc.errors()[:1])
    return items


class ContentApiClient:
    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_api_settings()
        self._client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            headers=self._headers(),
            timeout=self.settings.timeout,
            transport=transport,
            follow_redirects=True,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.token:
            headers["Authorization"] = f"Bearer {self.settings.token}"
        return headers

    async def __aenter__(self) -> "ContentApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ContentApiError(f"{method} {path} failed with status {status}", status) from exc
        except httpx.HTTPError as exc:
            raise ContentApiError(f"{method} {path} failed: {exc}") from exc
        return response

    async def fetch_contents(self) -> List[ContentItem]:
        response = await self._request("GET", self.settings.contents_path)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ContentApiError("Content response is not valid JSON") from exc
        items = parse_contents(payload)
        logger.debug("Fetched %d content item(s)", len(items))
        return items

    async def submit_homework(
        self,
        homework_id: str,
        submission_link: str,
        description: str = "",
    ) -> Dict[str, Any]:
        link = (submission_link or "").strip()
        if not link:
            raise ValueError("Please provide a submission link")

        response = await self._request(
            "POST",
            self.settings.homework_submission_path,
            json={
                "homeworkId": homework_id,
                "submissionLink": link,
                "description": (description or "").strip(),
            },
        )
        try:
            body = response.json()
        except ValueError:
            body = None
        return body if isinstance(body, dict) else {}

    def resolve_file_url(self, file_url: str) -> str:
        return resolve_file_url(self.settings.base_url, file_url)


def resolve_file_url(base_url: str, file_url: str) -> str:
    if file_url.startswith("http"):
        return file_url
    if not file_url.startswith("/"):
        file_url = "/" + file_url
    return f"{base_url.rstrip('/')}{file_url}"


__all__ = [
    "ContentApiClient",
    "ContentApiError",
    "parse_contents",
    "resolve_file_url",
]
