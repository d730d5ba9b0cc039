"""Built-in routines reachable through ``function`` commands."""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from ...chat_adapters.i_chat_adapter import IChatAdapter
from ..config import Config
from ..errors import DeliveryError
from .authorizer import allowed_commands
from .base import BaseCommandHandler, SendMessageFn
from .context import CommandContext

LOGGER = logging.getLogger(__name__)

CHANNEL_MENTION = re.compile(r"^<#(\d+)>$")


class BuiltinFunction(str, Enum):
    POST_MESSAGE = "postmessage"
    EDIT_MESSAGE = "editmessage"
    LIST_EMOJI = "listemoji"
    LIST_COMMANDS = "listcommands"

    @classmethod
    def lookup(cls, name: str) -> Optional["BuiltinFunction"]:
        try:
            return cls(name.strip().lower())
        except ValueError:
            return None


BuiltinHandler = Callable[[CommandContext, Config], Awaitable[None]]


def _channel_id(raw: str) -> str:
    match = CHANNEL_MENTION.match(raw)
    return match.group(1) if match else raw


class BuiltinCommandHandler(BaseCommandHandler):
    """Runs built-ins; each one performs its own delivery."""

    def __init__(
        self,
        adapter_getter: Callable[[], Optional[IChatAdapter]],
        send_message: Optional[SendMessageFn] = None,
    ) -> None:
        super().__init__(send_message)
        self._adapter_getter = adapter_getter
        self._handlers: Dict[BuiltinFunction, BuiltinHandler] = {
            BuiltinFunction.POST_MESSAGE: self.handle_post_message,
            BuiltinFunction.EDIT_MESSAGE: self.handle_edit_message,
            BuiltinFunction.LIST_EMOJI: self.handle_list_emoji,
            BuiltinFunction.LIST_COMMANDS: self.handle_list_commands,
        }

    async def run(self, name: str, context: CommandContext, config: Config) -> bool:
        """Run the named built-in. Unknown names are logged and ignored."""

        function = BuiltinFunction.lookup(name)
        if function is None:
            LOGGER.error("Unknown built-in function %r for command %s", name, context.resolution.name)
            return False
        LOGGER.info(
            "User %s (%s) running built-in %s",
            context.message.author_username,
            context.message.author_id,
            function.value,
        )
        await self._handlers[function](context, config)
        return True

    async def handle_post_message(self, context: CommandContext, config: Config) -> None:
        parts = context.raw_args.strip().split(None, 1)
        if len(parts) < 2:
            await self._reply(
                context,
                config,
                f"Usage: `{config.command_key} {context.resolution.name} <channel id> <message>`",
            )
            return
        channel, text = _channel_id(parts[0]), parts[1]
        if not await self._send(channel, text, config):
            await self._reply(context, config, f"Could not post a message to channel `{channel}`.")

    async def handle_edit_message(self, context: CommandContext, config: Config) -> None:
        parts = context.raw_args.strip().split(None, 2)
        if len(parts) < 3:
            await self._reply(
                context,
                config,
                f"Usage: `{config.command_key} {context.resolution.name} <channel id> <message id> <message>`",
            )
            return
        channel, message_id, text = _channel_id(parts[0]), parts[1], parts[2]
        adapter = self._adapter_getter()
        if adapter is None:
            LOGGER.warning("Chat adapter not bound; cannot edit message %s", message_id)
            return
        try:
            await adapter.edit_message(channel, message_id, text)
        except DeliveryError as exc:
            LOGGER.error("Failed to edit message %s in channel %s: %s", message_id, channel, exc)
            await self._reply(context, config, f"Could not edit message `{message_id}`.")

    async def handle_list_emoji(self, context: CommandContext, config: Config) -> None:
        guild_id = context.raw_args.strip().split()[0] if context.raw_args.strip() else context.message.guild_id
        if not guild_id:
            await self._reply(context, config, "Emoji can only be listed for a server.")
            return
        adapter = self._adapter_getter()
        if adapter is None:
            LOGGER.warning("Chat adapter not bound; cannot list emoji for %s", guild_id)
            return
        try:
            emoji = await adapter.list_emoji(guild_id)
        except DeliveryError as exc:
            LOGGER.error("Failed to list emoji for guild %s: %s", guild_id, exc)
            await self._reply(context, config, "Could not list emoji for that server.")
            return
        if not emoji:
            await self._reply(context, config, "No custom emoji found.")
            return
        await self._reply(context, config, "\n".join(emoji))

    async def handle_list_commands(self, context: CommandContext, config: Config) -> None:
        names = allowed_commands(
            ((name, definition.roles) for name, definition in config.commands.items()),
            context.message,
            config.roles,
        )
        lines = config.commands.build_help_lines(config.command_key, names)
        await self._reply(context, config, "\n".join(lines))
