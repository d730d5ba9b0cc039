"""Routes incoming chat messages through resolution, authorization and dispatch."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..chat_adapters.i_chat_adapter import IChatAdapter
from .commands.authorizer import authorize
from .commands.builtins import BuiltinCommandHandler
from .commands.context import CommandContext
from .commands.dispatcher import ActionDispatcher
from .commands.parser import parse_command, strip_command_name
from .commands.resolver import resolve
from .config import Config
from .models import ActionKind, IncomingMessage
from .output import OutputRouter

LOGGER = logging.getLogger(__name__)


class Router:
    """Central orchestrator translating chat messages into command actions."""

    def __init__(self, config: Config, dispatcher: Optional[ActionDispatcher] = None) -> None:
        self._config = config
        self._chat_adapter: Optional[IChatAdapter] = None
        self._dispatcher = dispatcher or ActionDispatcher()
        self._output = OutputRouter(lambda: self._chat_adapter)
        self._builtins = BuiltinCommandHandler(
            adapter_getter=lambda: self._chat_adapter,
            send_message=self._send_message,
        )

    @property
    def config(self) -> Config:
        return self._config

    def bind_adapter(self, adapter: IChatAdapter) -> None:
        """Attach the chat adapter so the router can send replies."""

        self._chat_adapter = adapter

    def apply_config(self, new_config: Config) -> None:
        """Publish a fully built configuration; in-flight messages keep the old one."""

        self._config = new_config
        LOGGER.info("Applied configuration with %d command(s)", len(new_config.commands))

    async def handle_message(self, event: IncomingMessage) -> List[bool]:
        """Process one incoming message and return per-chunk delivery results."""

        if event.is_from_self:
            return []

        config = self._config
        parsed = parse_command(event.text, config.command_key)
        if parsed is None:
            LOGGER.debug("Ignoring non-command message in channel %s", event.channel_id)
            return []

        resolution = resolve(parsed.tokens, config.commands)
        if not resolution.found:
            LOGGER.debug(
                'User:%s ID:%s Command:"%s" Status:"Command is invalid"',
                event.author_username,
                event.author_id,
                event.text,
            )
            return []

        LOGGER.info('User:%s ID:%s Command:"%s"', event.author_username, event.author_id, event.text)
        definition = config.commands[resolution.name]
        if not authorize(definition.roles, event, config.roles):
            LOGGER.warning(
                'User:%s ID:%s does not have permission to run command "%s"',
                event.author_username,
                event.author_id,
                resolution.name,
            )
            return []

        context = CommandContext(
            message=event,
            resolution=resolution,
            raw_args=strip_command_name(parsed.body, resolution.consumed),
        )

        if definition.action.kind == ActionKind.FUNCTION:
            await self._builtins.run(definition.action.payload, context, config)
            return []

        result = await self._dispatcher.dispatch(definition, resolution.args, context, config)
        if result is None:
            return []
        return await self._output.deliver(result, event, config.chunk_size, config.split_char)

    async def _send_message(self, channel: str, text: str) -> Optional[str]:
        if not self._chat_adapter:
            LOGGER.warning("Chat adapter not bound; dropping message: %s", text)
            return None
        return await self._chat_adapter.send_message(channel, text)
