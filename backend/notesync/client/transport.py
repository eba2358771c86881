"""HTTP transport for the notes API, built on httpx."""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from notesync.config import settings
from notesync.errors import (
    AuthError,
    NotesSyncError,
    NotFoundOrUnauthorized,
    ServerError,
    TransientServerError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SESSION_EXPIRED = "Session expired. Please login again."


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def error_for_response(response: httpx.Response) -> NotesSyncError | None:
    """Map a response to the error it represents, or None for a success."""
    data = _json_or_empty(response)
    message = data.get("error") or data.get("detail") or "An error occurred"
    status = response.status_code
    if response.is_success:
        if data.get("success") is False:
            return ServerError(str(message), status)
        return None
    if status == 401:
        return AuthError(str(message))
    if status in (400, 422):
        return ValidationError(str(message))
    if status == 404:
        return NotFoundOrUnauthorized(str(message))
    if status >= 500:
        return TransientServerError(str(message), status)
    return ServerError(str(message), status)


class NotesApiClient:
    """One method per notes endpoint; every call returns the decoded JSON body.

    ``token`` and ``on_unauthorized`` come from the auth service. A 401 from
    any endpoint invokes ``on_unauthorized`` before ``AuthError`` is raised.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        token: Callable[[], str | None],
        on_unauthorized: Callable[[], None],
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._token = token
        self._on_unauthorized = on_unauthorized
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout if timeout is not None else settings.client_timeout,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "NotesApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json, headers=self._headers())
        except httpx.TransportError as e:
            logger.warning("Transport failure", extra={"method": method, "path": path, "error": str(e)})
            raise TransportError(str(e) or type(e).__name__) from e
        error = error_for_response(response)
        if isinstance(error, AuthError):
            self._on_unauthorized()
            raise AuthError(SESSION_EXPIRED)
        if error is not None:
            logger.debug(
                "Request rejected",
                extra={"method": method, "path": path, "status": response.status_code},
            )
            raise error
        return _json_or_empty(response)

    async def fetch_notes(self) -> dict[str, Any]:
        return await self._request("GET", "/notes")

    async def create_note(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/notes", json=payload)

    async def delete_note(self, note_id: int) -> dict[str, Any]:
        return await self._request("DELETE", "/notes", json={"noteId": note_id})

    async def update_note_title(self, note_id: int, title: str) -> dict[str, Any]:
        return await self._request("PUT", "/notes/title", json={"noteId": note_id, "title": title})

    async def update_note_body(self, note_id: int, body: str) -> dict[str, Any]:
        return await self._request("PUT", "/notes/body", json={"noteId": note_id, "body": body})

    async def create_subitem(self, note_id: int, text: str) -> dict[str, Any]:
        return await self._request("POST", "/notes/subitems", json={"noteId": note_id, "text": text})

    async def update_subitem_checkbox(self, subitem_id: int, is_checked: bool) -> dict[str, Any]:
        return await self._request(
            "PATCH", f"/notes/subitems/checkbox/{subitem_id}", json={"isChecked": is_checked}
        )

    async def update_subitem_text(self, subitem_id: int, text: str) -> dict[str, Any]:
        return await self._request("PATCH", f"/notes/subitems/text/{subitem_id}", json={"text": text})

    async def delete_subitem(self, subitem_id: int) -> dict[str, Any]:
        return await self._request("DELETE", f"/notes/subitems/{subitem_id}")

    async def reorder_notes(self, note_ids: list[int]) -> dict[str, Any]:
        return await self._request("PUT", "/notes/reorder", json={"noteIds": note_ids})
