"""Positional placeholder substitution for command actions."""

from __future__ import annotations

import re
from typing import Mapping

PLACEHOLDER = re.compile(r"\{(\d+)\}")


def expand(template: str, args: Mapping[int, str]) -> str:
    """Replace ``{i}`` with ``args[i]`` in a single pass.

    Placeholders without a matching argument stay in the output untouched, and
    substituted values are never scanned again.
    """

    def _substitute(match: re.Match) -> str:
        value = args.get(int(match.group(1)))
        return match.group(0) if value is None else value

    return PLACEHOLDER.sub(_substitute, template)
