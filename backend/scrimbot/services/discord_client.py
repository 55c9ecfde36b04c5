# Minimal Discord REST client, only what the schedule message needs
import logging

import httpx

from scrimbot.core.config import settings
from scrimbot.core.constants import DISCORD_UNKNOWN_MESSAGE

logger = logging.getLogger(__name__)


class MessageNotFound(httpx.HTTPStatusError):
    """The message was deleted (discord json error 10008)."""


def _raise_for_status(res: httpx.Response):
    if res.is_error:
        try:
            code = res.json().get("code")
        except ValueError:
            code = None

        if code == DISCORD_UNKNOWN_MESSAGE:
            raise MessageNotFound(
                f"unknown message: {res.request.url}",
                request=res.request,
                response=res,
            )

    res.raise_for_status()


class DiscordClient:
    def __init__(self, token: str | None = None, transport=None):
        self.base_url = settings.DISCORD_API_BASE_URL
        self.token = token if token is not None else settings.DISCORD_BOT_TOKEN
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bot {self.token}"},
            timeout=settings.HTTP_TIMEOUT,
            transport=self.transport,
        )

    async def send_message(self, channel_id: int, payload: dict) -> int:
        logger.info("DISCORD API CALLED: send_message %s", channel_id)

        async with self._client() as client:
            res = await client.post(f"/channels/{channel_id}/messages", json=payload)
            _raise_for_status(res)
            return int(res.json()["id"])

    async def edit_message(self, channel_id: int, message_id: int, payload: dict):
        logger.info("DISCORD API CALLED: edit_message %s/%s", channel_id, message_id)

        async with self._client() as client:
            res = await client.patch(
                f"/channels/{channel_id}/messages/{message_id}", json=payload
            )
            _raise_for_status(res)
