"""Shared fixtures for command handler tests."""

from __future__ import annotations

from typing import Dict, List

import pytest

from relaybot.core.commands.authorizer import RoleTables
from relaybot.core.commands.context import CommandContext
from relaybot.core.commands.registry import CommandTable
from relaybot.core.config import Config
from relaybot.core.errors import DeliveryError
from relaybot.core.models import (
    Action,
    ActionKind,
    CommandDefinition,
    IncomingMessage,
    Resolution,
    RoleRef,
)


def make_definition(
    name: str,
    payload: str,
    *kinds: ActionKind,
    roles: tuple[str, ...] = ("all",),
    secret: bool = False,
    help: str | None = None,
) -> CommandDefinition:
    return CommandDefinition(
        name=name,
        action=Action(kinds=frozenset(kinds or (ActionKind.MESSAGE,)), payload=payload),
        roles=tuple(RoleRef.parse(role) for role in roles),
        secret=secret,
        help=help,
    )


class DummyChatAdapter:
    """Captures messages emitted through the adapter interface."""

    def __init__(self) -> None:
        self.messages: List[Dict[str, str]] = []
        self.private: List[Dict[str, str]] = []
        self.edits: List[Dict[str, str]] = []
        self.emoji: Dict[str, List[str]] = {}
        self.fail_channels: set[str] = set()
        self.fail_private = False

    async def send_message(self, channel: str, text: str) -> str:
        if channel in self.fail_channels:
            raise DeliveryError(f"cannot send to {channel}")
        self.messages.append({"channel": channel, "text": text})
        return str(len(self.messages))

    async def send_private(self, user_id: str, text: str) -> str:
        if self.fail_private:
            raise DeliveryError(f"cannot DM {user_id}")
        self.private.append({"user": user_id, "text": text})
        return str(len(self.private))

    async def edit_message(self, channel: str, message_id: str, text: str) -> None:
        if channel in self.fail_channels:
            raise DeliveryError(f"cannot edit in {channel}")
        self.edits.append({"channel": channel, "message_id": message_id, "text": text})

    async def list_emoji(self, guild_id: str) -> List[str]:
        if guild_id not in self.emoji:
            raise DeliveryError(f"unknown guild {guild_id}")
        return self.emoji[guild_id]

    async def start(self) -> None:
        return None

    async def stop(self) -> None:
        return None


@pytest.fixture
def chat_adapter():
    return DummyChatAdapter()


@pytest.fixture
def role_tables():
    return RoleTables(
        command_roles={"mods": frozenset({"1001", "1002"}), "owners": frozenset({"1001"})},
        discord_roles={"admins": "555", "members": "777"},
    )


@pytest.fixture
def command_table():
    return CommandTable(
        [
            make_definition("hello", "Hello {0}!", help="Say hello"),
            make_definition("camera", "camera list"),
            make_definition("camera snapshot", "snapshot of {0}", roles=("mods",)),
            make_definition("weather", "https://wttr.in/{0}", ActionKind.API),
            make_definition("motd", "motd.txt", ActionKind.FILE, roles=("discord:members",)),
            make_definition("uptime", "uptime", ActionKind.SHELL, roles=("owners",)),
            make_definition("secret", "psst", secret=True),
            make_definition("broken", "x", ActionKind.API, ActionKind.FILE),
            make_definition("ghost", "boo", roles=("nobody",)),
            make_definition("commands", "listcommands", ActionKind.FUNCTION, help="List commands"),
            make_definition("say", "postmessage", ActionKind.FUNCTION, roles=("mods",)),
            make_definition("edit", "editmessage", ActionKind.FUNCTION, roles=("mods",)),
            make_definition("emoji", "listemoji", ActionKind.FUNCTION),
            make_definition("mystery", "dance", ActionKind.FUNCTION),
        ]
    )


@pytest.fixture
def test_config(command_table, role_tables, tmp_path):
    """Create a real Config suitable for tests."""
    return Config(
        command_key="!bot",
        commands=command_table,
        discord_token="token",
        roles=role_tables,
        shell_enabled=True,
        shell="/bin/sh",
        chunk_size=1980,
        split_char="\n",
        file_root=tmp_path,
    )


@pytest.fixture
def make_message():
    def _make(
        text: str = "!bot hello",
        author_id: str = "1001",
        platform_roles: tuple[str, ...] = (),
        channel_id: str = "C100",
        guild_id: str | None = "G1",
    ) -> IncomingMessage:
        return IncomingMessage(
            text=text,
            author_id=author_id,
            author_username=f"user{author_id}",
            channel_id=channel_id,
            platform_roles=platform_roles,
            guild_id=guild_id,
        )

    return _make


@pytest.fixture
def make_context(make_message):
    def _make(name: str, raw_args: str = "", **message_kwargs) -> CommandContext:
        return CommandContext(
            message=make_message(**message_kwargs),
            resolution=Resolution(name=name, found=True, consumed=len(name.split())),
            raw_args=raw_args,
        )

    return _make
