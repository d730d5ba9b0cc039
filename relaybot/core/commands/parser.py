"""Lightweight parser for prefixed chat commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ParsedCommand:
    body: str
    tokens: List[str]


def parse_command(text: str, command_key: str) -> Optional[ParsedCommand]:
    """Parse message text into a structured command.

    A message is a command only when it starts, case-insensitively, with the
    command key followed by a single space. ``body`` keeps the original case;
    ``tokens`` are lower-cased and whitespace separated.
    """

    if not text or not command_key:
        return None
    marker = f"{command_key} "
    if not text.lower().startswith(marker.lower()):
        return None

    body = text[len(marker) :]
    tokens = body.lower().split()
    if not tokens:
        return None
    return ParsedCommand(body=body, tokens=tokens)


def strip_command_name(body: str, consumed: int) -> str:
    """Drop the first ``consumed`` whitespace-separated words from ``body``."""

    remainder = body.lstrip()
    for _ in range(consumed):
        parts = remainder.split(None, 1)
        remainder = parts[1] if len(parts) > 1 else ""
    return remainder
