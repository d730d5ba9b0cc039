"""Executes the action configured for a resolved command."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from ..config import Config
from ..executors import FileLoader, HttpFetcher, ShellRunner
from ..models import ActionKind, CommandDefinition, DeliveryMode, DispatchResult
from .context import CommandContext
from .template import expand

LOGGER = logging.getLogger(__name__)

API_FAILURE_MESSAGE = "Could not fetch a response from the remote service."
STDERR_MARKER = "STDERR:\n-------\n"


class ActionDispatcher:
    """Maps an action kind to its side effect and produces the reply text.

    Returns ``None`` whenever nothing should be sent back to the user.
    """

    def __init__(
        self,
        fetcher: Optional[HttpFetcher] = None,
        shell_runner: Optional[ShellRunner] = None,
        file_loader: Optional[FileLoader] = None,
    ) -> None:
        self._fetcher = fetcher or HttpFetcher()
        self._shell_runner = shell_runner or ShellRunner()
        self._file_loader = file_loader or FileLoader()

    async def dispatch(
        self,
        definition: CommandDefinition,
        args: Mapping[int, str],
        context: CommandContext,
        config: Config,
    ) -> Optional[DispatchResult]:
        action = definition.action
        kind = action.kind
        if kind is None:
            LOGGER.error(
                "Refusing command %s: mutually exclusive actions configured (%s)",
                definition.name,
                ", ".join(sorted(k.value for k in action.kinds)),
            )
            return None
        if kind == ActionKind.FUNCTION:
            LOGGER.error("Built-in command %s cannot be dispatched as an action", definition.name)
            return None

        expanded = expand(action.payload, args)
        mode = DeliveryMode.PRIVATE if definition.secret else DeliveryMode.PUBLIC

        if kind == ActionKind.MESSAGE:
            return DispatchResult(text=expanded, mode=mode)
        if kind == ActionKind.API:
            return DispatchResult(text=await self._call_api(expanded, config), mode=mode)
        if kind == ActionKind.FILE:
            text = await self._load_file(expanded, config)
            return None if text is None else DispatchResult(text=text, mode=mode)
        if kind == ActionKind.SHELL:
            text = await self._run_shell(definition, expanded, context, config)
            return None if text is None else DispatchResult(text=text, mode=mode, code_block=True)

        LOGGER.error("Unsupported action kind %s for command %s", kind, definition.name)
        return None

    async def _call_api(self, url: str, config: Config) -> str:
        result = await self._fetcher.fetch(url, timeout=config.http_timeout)
        if result.error:
            LOGGER.error("Could not connect to api url %s: %s", url, result.error)
            return API_FAILURE_MESSAGE
        if not result.ok:
            LOGGER.error("Api url %s returned HTTP status %s", url, result.status)
            return API_FAILURE_MESSAGE
        return result.body

    async def _load_file(self, requested: str, config: Config) -> Optional[str]:
        try:
            return await self._file_loader.load(config.file_root, requested)
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.error("Error loading file %s: %s", requested, exc)
            return None

    async def _run_shell(
        self,
        definition: CommandDefinition,
        command: str,
        context: CommandContext,
        config: Config,
    ) -> Optional[str]:
        if not config.shell_available:
            LOGGER.error(
                "Cannot run shell command %s when shellenable = false or no shell is set",
                definition.name,
            )
            return None

        LOGGER.info(
            "User %s (%s) running shell command %s: %s",
            context.message.author_username,
            context.message.author_id,
            definition.name,
            command,
        )
        result = await self._shell_runner.run(config.shell, command, timeout=config.shell_timeout)
        if result.error:
            LOGGER.error("Error executing command %r: %s", command, result.error)

        stdout = result.stdout if result.stdout.strip() else ""
        stderr = result.stderr if result.stderr.strip() else ""
        if not stdout and not stderr:
            LOGGER.info("Shell command %s produced no output", definition.name)
            return None

        output = stdout
        if stderr:
            separator = "\n" if output and not output.endswith("\n") else ""
            output = f"{output}{separator}{STDERR_MARKER}{stderr}"
        return output
