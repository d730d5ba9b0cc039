"""Immutable table of configured chat commands."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence

from ..models import CommandDefinition


def normalize_command_name(name: str) -> str:
    """Lower-case and collapse whitespace so names match message tokens."""
    return " ".join(str(name).lower().split())


class CommandTable(Mapping[str, CommandDefinition]):
    """Read-only mapping from space-joined command name to its definition."""

    def __init__(self, definitions: Iterable[CommandDefinition] = ()) -> None:
        self._lookup: Dict[str, CommandDefinition] = {
            normalize_command_name(definition.name): definition for definition in definitions
        }

    def __getitem__(self, name: str) -> CommandDefinition:
        return self._lookup[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._lookup))

    def __len__(self) -> int:
        return len(self._lookup)

    def __repr__(self) -> str:
        return f"CommandTable({sorted(self._lookup)!r})"

    def build_help_lines(self, command_key: str, names: Optional[Sequence[str]] = None) -> list[str]:
        """Render help text for the given commands (all commands by default)."""

        selected = sorted(names) if names is not None else list(self)
        lines = ["Available commands:"]
        for name in selected:
            definition = self._lookup[name]
            description = f" – {definition.help}" if definition.help else ""
            lines.append(f"- `{command_key} {name}`{description}")
        if not selected:
            lines.append("- (none)")
        return lines
