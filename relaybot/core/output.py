"""Delivers command output to the right destination in platform-sized chunks."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, List, Optional

from ..chat_adapters.i_chat_adapter import IChatAdapter
from .errors import DeliveryError
from .models import DeliveryMode, DispatchResult, IncomingMessage

LOGGER = logging.getLogger(__name__)

CODE_BLOCK_FENCE = "```"
DM_FAILURE_NOTICE = "Failed to send you a DM. Did you disable DM in your privacy settings?"


def split_text(text: str, chunk_size: int, delimiter: str = "\n") -> List[str]:
    """Split ``text`` into ordered chunks of at most ``chunk_size`` characters.

    Each chunk ends just after the last ``delimiter`` lying wholly inside the
    window, or is hard-cut at ``chunk_size`` when the window has none. Joining
    the chunks gives back ``text`` exactly.
    """

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if len(text) <= chunk_size:
        return [text]

    chunks = []
    start = 0
    while start < len(text):
        limit = start + chunk_size
        if limit >= len(text):
            chunks.append(text[start:])
            break
        end = limit
        if delimiter:
            found = text.rfind(delimiter, start, limit)
            if found != -1:
                end = found + len(delimiter)
        chunks.append(text[start:end])
        start = end
    return chunks


def is_blank(chunk: str) -> bool:
    """Discord rejects messages with no visible content."""
    return not chunk.strip()


def wrap_code_block(chunk: str) -> str:
    newline = "" if chunk.endswith("\n") else "\n"
    return f"{CODE_BLOCK_FENCE}\n{chunk}{newline}{CODE_BLOCK_FENCE}"


class OutputRouter:
    """Routes dispatch results to a public channel or a private message."""

    def __init__(self, adapter_getter: Callable[[], Optional[IChatAdapter]]) -> None:
        self._adapter_getter = adapter_getter

    async def deliver(
        self,
        result: DispatchResult,
        message: IncomingMessage,
        chunk_size: int,
        delimiter: str,
    ) -> List[bool]:
        """Send every non-blank chunk in order and report per-chunk success."""

        adapter = self._adapter_getter()
        if adapter is None:
            LOGGER.warning("Chat adapter not bound; dropping reply to %s", message.author_id)
            return []

        chunks = [chunk for chunk in split_text(result.text, chunk_size, delimiter) if not is_blank(chunk)]
        if not chunks:
            LOGGER.debug("Reply to %s is blank; nothing to send", message.author_id)
            return []
        if result.code_block:
            chunks = [wrap_code_block(chunk) for chunk in chunks]

        if result.mode == DeliveryMode.PRIVATE:
            return await self._send_private(adapter, message, chunks)
        return await self.send_chunks(
            lambda text: adapter.send_message(message.channel_id, text),
            chunks,
            destination=f"channel {message.channel_id}",
        )

    async def send_chunks(
        self,
        send: Callable[[str], Awaitable[object]],
        chunks: List[str],
        destination: str,
    ) -> List[bool]:
        results = []
        for index, chunk in enumerate(chunks):
            try:
                await send(chunk)
            except DeliveryError as exc:
                LOGGER.error(
                    "Failed to send chunk %d/%d to %s: %s", index + 1, len(chunks), destination, exc
                )
                results.append(False)
            else:
                results.append(True)
        return results

    async def _send_private(
        self,
        adapter: IChatAdapter,
        message: IncomingMessage,
        chunks: List[str],
    ) -> List[bool]:
        results = await self.send_chunks(
            lambda text: adapter.send_private(message.author_id, text),
            chunks,
            destination=f"user {message.author_id}",
        )
        if not all(results):
            try:
                await adapter.send_message(message.channel_id, DM_FAILURE_NOTICE)
            except DeliveryError as exc:
                LOGGER.error("Could not notify channel %s of DM failure: %s", message.channel_id, exc)
        return results
