"""Chat adapter abstraction."""

from __future__ import annotations

import abc
from typing import List, Optional


class IChatAdapter(abc.ABC):
    """Abstraction for chat platform integrations (Discord, etc.).

    Implementations raise ``DeliveryError`` when the platform refuses a send.
    """

    @abc.abstractmethod
    async def send_message(self, channel: str, text: str) -> Optional[str]:
        """Send a message to a channel.

        Returns:
            The message ID if available, None otherwise.
        """

    @abc.abstractmethod
    async def send_private(self, user_id: str, text: str) -> Optional[str]:
        """Open a private channel with a user and send a message there."""

    @abc.abstractmethod
    async def edit_message(self, channel: str, message_id: str, text: str) -> None:
        """Replace the content of a message previously sent by the bot."""

    @abc.abstractmethod
    async def list_emoji(self, guild_id: str) -> List[str]:
        """Return the custom emoji of a guild, rendered for chat."""

    @abc.abstractmethod
    async def start(self) -> None:
        """Begin listening for events."""

    @abc.abstractmethod
    async def stop(self) -> None:
        """Shutdown the adapter."""
