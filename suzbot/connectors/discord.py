"""Discord REST connector (httpx based).

Only the four calls the pipeline needs are implemented: reading the recent
channel history, sending a message, crossposting it and checking the token.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

import httpx

from suzbot.errors import AuthenticationError, ChatError, ConnectionFailedError
from suzbot.models.domain import ChatMessage
from suzbot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE = "https://discord.com/api/v10"


class ChatClient(Protocol):
    def read_recent_messages(self, channel_id: str, limit: int) -> List[ChatMessage]: ...  # noqa: D401
    def send_message(self, channel_id: str, embed: Dict[str, Any]) -> ChatMessage: ...  # noqa: D401
    def crosspost(self, channel_id: str, message_id: str) -> None: ...  # noqa: D401
    def close(self) -> None: ...  # noqa: D401


class DiscordClient:
    """Bot-token Discord client; use as a context manager so the connection is always closed."""

    def __init__(
        self,
        token: str,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._http = httpx.Client(
            base_url=api_base.rstrip("/"),
            headers={
                "Authorization": f"Bot {token}",
                "User-Agent": "DiscordBot (https://www.suz.cvut.cz, 0.1.0)",
            },
            timeout=timeout,
            transport=transport,
        )
        self.user: Optional[Dict[str, Any]] = None

    @classmethod
    def connect(cls, token: str, **kwargs: Any) -> "DiscordClient":
        client = cls(token, **kwargs)
        try:
            client.open()
        except Exception:
            client.close()
            raise
        return client

    def open(self) -> None:
        """Verify the token; raises a fatal error when the bot cannot log in."""
        try:
            resp = self._http.get("/users/@me")
        except httpx.HTTPError as exc:
            raise ConnectionFailedError(f"Failed to reach Discord: {exc}") from exc
        if resp.status_code in (401, 403):
            raise AuthenticationError(f"Discord rejected the bot token (HTTP {resp.status_code})")
        if resp.status_code >= 400:
            raise ConnectionFailedError(f"Failed to init the bot (HTTP {resp.status_code})")
        self.user = resp.json()
        logger.info("discord.connected", extra={"bot": self.user.get("username")})

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "DiscordClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ChatError(f"Discord {method} {path} failed: {exc}") from exc
        if resp.status_code >= 400:
            raise ChatError(f"Discord {method} {path} returned HTTP {resp.status_code}: {resp.text[:200]}")
        return resp

    def read_recent_messages(self, channel_id: str, limit: int) -> List[ChatMessage]:
        resp = self._request("GET", f"/channels/{channel_id}/messages", params={"limit": limit})
        return [ChatMessage.model_validate(item) for item in resp.json()]

    def send_message(self, channel_id: str, embed: Dict[str, Any]) -> ChatMessage:
        resp = self._request("POST", f"/channels/{channel_id}/messages", json={"embeds": [embed]})
        return ChatMessage.model_validate(resp.json())

    def crosspost(self, channel_id: str, message_id: str) -> None:
        self._request("POST", f"/channels/{channel_id}/messages/{message_id}/crosspost")
