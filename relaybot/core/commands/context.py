"""Shared data passed to command handlers."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import IncomingMessage, Resolution


@dataclass(frozen=True)
class CommandContext:
    message: IncomingMessage
    resolution: Resolution
    raw_args: str = ""

    @property
    def channel(self) -> str:
        return self.message.channel_id
