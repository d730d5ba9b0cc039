"""Common utilities for command handlers."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from ..config import Config
from ..errors import DeliveryError
from ..output import is_blank, split_text
from .context import CommandContext

LOGGER = logging.getLogger(__name__)

SendMessageFn = Callable[[str, str], Awaitable[object]]


class BaseCommandHandler:
    """Provides helper methods for replying to the invoking channel.

    Chunking always comes from the ``Config`` the message was handled with.
    """

    def __init__(self, send_message: Optional[SendMessageFn] = None) -> None:
        self._send_message = send_message

    async def _reply(self, context: CommandContext, config: Config, text: str) -> None:
        await self._send(context.channel, text, config)

    async def _send(self, channel: str, text: str, config: Config) -> bool:
        if not self._send_message:
            raise RuntimeError("send_message not bound for command handler")
        delivered = True
        for chunk in split_text(text, config.chunk_size, config.split_char):
            if is_blank(chunk):
                continue
            try:
                await self._send_message(channel, chunk)
            except DeliveryError as exc:
                LOGGER.error("Failed to send to channel %s: %s", channel, exc)
                delivered = False
        return delivered
