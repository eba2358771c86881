"""Client-side auth service: holds the bearer token and the current identity."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from notesync.client.transport import error_for_response
from notesync.config import settings
from notesync.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    username: str


class AuthService:
    def __init__(
        self,
        base_url: str = "",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout if timeout is not None else settings.client_timeout,
        )
        self._token: str | None = None
        self.current_user: CurrentUser | None = None
        self._logout_listeners: list[Callable[[], None]] = []

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def token(self) -> str | None:
        return self._token

    def on_logout(self, listener: Callable[[], None]) -> None:
        self._logout_listeners.append(listener)

    async def _post_credentials(self, path: str, username: str, password: str) -> CurrentUser:
        try:
            response = await self._client.post(path, json={"username": username, "password": password})
        except httpx.TransportError as e:
            raise TransportError(str(e) or type(e).__name__) from e
        error = error_for_response(response)
        if error is not None:
            raise error
        data: dict[str, Any] = response.json()
        self._token = data["access_token"]
        self.current_user = CurrentUser(user_id=data["user_id"], username=data["username"])
        logger.info("Authenticated", extra={"user_id": self.current_user.user_id})
        return self.current_user

    async def login(self, username: str, password: str) -> CurrentUser:
        return await self._post_credentials("/auth/login", username, password)

    async def register(self, username: str, password: str) -> CurrentUser:
        return await self._post_credentials("/auth/register", username, password)

    def logout(self) -> None:
        """Forget the credential and identity. Also the session-expiry handler."""
        was_authenticated = self._token is not None
        self._token = None
        self.current_user = None
        if was_authenticated:
            logger.info("Logged out")
        for listener in list(self._logout_listeners):
            listener()
