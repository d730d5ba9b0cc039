"""Discord adapter using discord.py."""

from __future__ import annotations

import logging
from typing import List, Optional

import discord

from .i_chat_adapter import IChatAdapter
from ..core.errors import DeliveryError
from ..core.models import IncomingMessage
from ..core.router import Router

LOGGER = logging.getLogger(__name__)


class DiscordAdapter(IChatAdapter):
    def __init__(self, token: str, router: Router, client: Optional[discord.Client] = None) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        self._token = token
        self._router = router
        self._client = client or discord.Client(intents=intents)
        self._client.event(self.on_message)
        self._client.event(self.on_ready)

    async def send_message(self, channel: str, text: str) -> Optional[str]:
        target = await self._get_channel(channel)
        try:
            message = await target.send(text)
        except discord.HTTPException as exc:
            raise DeliveryError(f"Failed to send Discord message to {channel}: {exc}") from exc
        return str(message.id)

    async def send_private(self, user_id: str, text: str) -> Optional[str]:
        try:
            user = self._client.get_user(int(user_id)) or await self._client.fetch_user(int(user_id))
            message = await user.send(text)
        except (ValueError, discord.HTTPException) as exc:
            raise DeliveryError(f"Failed to send DM to {user_id}: {exc}") from exc
        return str(message.id)

    async def edit_message(self, channel: str, message_id: str, text: str) -> None:
        target = await self._get_channel(channel)
        try:
            message = await target.fetch_message(int(message_id))
            await message.edit(content=text)
        except (ValueError, discord.HTTPException) as exc:
            raise DeliveryError(f"Failed to edit message {message_id} in {channel}: {exc}") from exc

    async def list_emoji(self, guild_id: str) -> List[str]:
        try:
            guild = self._client.get_guild(int(guild_id)) or await self._client.fetch_guild(int(guild_id))
        except (ValueError, discord.HTTPException) as exc:
            raise DeliveryError(f"Failed to look up guild {guild_id}: {exc}") from exc
        return [str(emoji) for emoji in guild.emojis]

    async def start(self) -> None:
        LOGGER.info("Connecting to Discord")
        await self._client.start(self._token)

    async def stop(self) -> None:
        if not self._client.is_closed():
            await self._client.close()

    async def on_ready(self) -> None:
        LOGGER.info("Logged in to Discord as %s", self._client.user)

    async def on_message(self, message: discord.Message) -> None:
        event = self.to_incoming(message)
        if event.is_from_self:
            return
        await self._router.handle_message(event)

    def to_incoming(self, message: discord.Message) -> IncomingMessage:
        """Convert a Discord message to a platform-agnostic IncomingMessage."""
        author = message.author
        own_user = self._client.user
        roles: tuple[str, ...] = ()
        if isinstance(author, discord.Member):
            roles = tuple(str(role.id) for role in author.roles)
        return IncomingMessage(
            text=message.content or "",
            author_id=str(author.id),
            author_username=author.name,
            channel_id=str(message.channel.id),
            is_from_self=own_user is not None and author.id == own_user.id,
            platform_roles=roles,
            guild_id=str(message.guild.id) if message.guild else None,
        )

    async def _get_channel(self, channel: str) -> discord.abc.Messageable:
        try:
            channel_id = int(channel)
            target = self._client.get_channel(channel_id) or await self._client.fetch_channel(channel_id)
        except (ValueError, discord.HTTPException, discord.InvalidData) as exc:
            raise DeliveryError(f"Failed to resolve Discord channel {channel}: {exc}") from exc
        # Categories and forums have no message history to post into.
        if not isinstance(target, discord.abc.Messageable):
            raise DeliveryError(f"Discord channel {channel} does not accept messages")
        return target
