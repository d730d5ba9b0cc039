"""Tests for BuiltinCommandHandler."""

from __future__ import annotations

from dataclasses import replace

import pytest

from relaybot.core.commands.builtins import BuiltinCommandHandler, BuiltinFunction


class TestBuiltinCommands:
    """Built-in handler tests."""

    @pytest.fixture
    def handler(self, chat_adapter):
        return BuiltinCommandHandler(
            adapter_getter=lambda: chat_adapter,
            send_message=chat_adapter.send_message,
        )

    def test_lookup_is_case_insensitive(self):
        assert BuiltinFunction.lookup(" ListCommands ") == BuiltinFunction.LIST_COMMANDS
        assert BuiltinFunction.lookup("dance") is None

    @pytest.mark.asyncio
    async def test_unknown_function_is_noop(self, handler, chat_adapter, test_config, make_context):
        handled = await handler.run("dance", make_context("mystery"), test_config)
        assert handled is False
        assert chat_adapter.messages == []

    @pytest.mark.asyncio
    async def test_post_message_to_channel(self, handler, chat_adapter, test_config, make_context):
        context = make_context("say", raw_args="<#200> Server restarts at Noon")
        await handler.run("postmessage", context, test_config)
        assert chat_adapter.messages == [{"channel": "200", "text": "Server restarts at Noon"}]

    @pytest.mark.asyncio
    async def test_post_message_usage(self, handler, chat_adapter, test_config, make_context):
        await handler.run("postmessage", make_context("say", raw_args="200"), test_config)
        assert chat_adapter.messages[-1]["channel"] == "C100"
        assert "Usage" in chat_adapter.messages[-1]["text"]

    @pytest.mark.asyncio
    async def test_post_message_failure_is_reported(self, handler, chat_adapter, test_config, make_context):
        chat_adapter.fail_channels.add("200")
        await handler.run("postmessage", make_context("say", raw_args="200 hi"), test_config)
        assert chat_adapter.messages == [
            {"channel": "C100", "text": "Could not post a message to channel `200`."}
        ]

    @pytest.mark.asyncio
    async def test_edit_message(self, handler, chat_adapter, test_config, make_context):
        await handler.run("editmessage", make_context("edit", raw_args="200 9001 New Text"), test_config)
        assert chat_adapter.edits == [{"channel": "200", "message_id": "9001", "text": "New Text"}]

    @pytest.mark.asyncio
    async def test_edit_message_failure(self, handler, chat_adapter, test_config, make_context):
        chat_adapter.fail_channels.add("200")
        await handler.run("editmessage", make_context("edit", raw_args="200 9001 New"), test_config)
        assert chat_adapter.edits == []
        assert "Could not edit" in chat_adapter.messages[-1]["text"]

    @pytest.mark.asyncio
    async def test_list_emoji_defaults_to_current_guild(self, handler, chat_adapter, test_config, make_context):
        chat_adapter.emoji["G1"] = ["<:party:1>", "<:cat:2>"]
        await handler.run("listemoji", make_context("emoji"), test_config)
        assert chat_adapter.messages[-1]["text"] == "<:party:1>\n<:cat:2>"

    @pytest.mark.asyncio
    async def test_list_emoji_outside_guild(self, handler, chat_adapter, test_config, make_context):
        await handler.run("listemoji", make_context("emoji", guild_id=None), test_config)
        assert "server" in chat_adapter.messages[-1]["text"]

    @pytest.mark.asyncio
    async def test_list_commands_only_shows_allowed(self, handler, chat_adapter, test_config, make_context):
        await handler.run("listcommands", make_context("commands", author_id="9999"), test_config)
        output = chat_adapter.messages[-1]["text"]
        assert "Available commands" in output
        assert "`!bot hello` – Say hello" in output
        assert "camera snapshot" not in output
        assert "ghost" not in output

    @pytest.mark.asyncio
    async def test_list_commands_for_moderator(self, handler, chat_adapter, test_config, make_context):
        await handler.run("listcommands", make_context("commands", author_id="1002"), test_config)
        assert "`!bot camera snapshot`" in chat_adapter.messages[-1]["text"]

    @pytest.mark.asyncio
    async def test_reply_chunks_with_message_config(self, handler, chat_adapter, test_config, make_context):
        chat_adapter.emoji["G1"] = ["<:a:1>", "<:b:2>"]
        await handler.run("listemoji", make_context("emoji"), replace(test_config, chunk_size=7))
        assert [m["text"] for m in chat_adapter.messages] == ["<:a:1>\n", "<:b:2>"]
