"""Longest-prefix matching of message tokens against the command table."""

from __future__ import annotations

from typing import Container, Sequence

from ..models import Resolution


def resolve(tokens: Sequence[str], table: Container[str]) -> Resolution:
    """Find the longest registered command name that prefixes ``tokens``.

    Every matching prefix replaces the previous best match, so a short command
    that is also a prefix of a longer one never wins. Tokens after the match
    become positional arguments indexed from 0.
    """

    resolution = Resolution()
    candidate = ""
    for index, token in enumerate(tokens):
        candidate = token if index == 0 else f"{candidate} {token}"
        if candidate in table:
            remaining = tokens[index + 1 :]
            resolution = Resolution(
                name=candidate,
                found=True,
                args={position: value for position, value in enumerate(remaining)},
                consumed=index + 1,
            )
    return resolution
