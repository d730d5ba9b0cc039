"""Domain models for relaybot."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple


class ActionKind(str, Enum):
    MESSAGE = "message"
    API = "api"
    FILE = "file"
    SHELL = "shell"
    FUNCTION = "function"


@dataclass(frozen=True)
class Action:
    """What a command does once authorized.

    ``kinds`` normally holds a single entry. Several entries mean the command
    was configured with mutually exclusive kinds and must never run.
    """

    kinds: FrozenSet[ActionKind]
    payload: str

    @property
    def kind(self) -> Optional[ActionKind]:
        if len(self.kinds) != 1:
            return None
        return next(iter(self.kinds))

    @property
    def is_conflicting(self) -> bool:
        return len(self.kinds) > 1


class RoleKind(Enum):
    ALL = "all"
    NAMED = "named"
    PLATFORM = "platform"


PLATFORM_ROLE_PREFIX = "discord:"


@dataclass(frozen=True)
class RoleRef:
    kind: RoleKind
    name: str = ""

    @classmethod
    def parse(cls, raw: str) -> "RoleRef":
        value = str(raw).strip().lower()
        if value == "all":
            return cls(RoleKind.ALL)
        if value.startswith(PLATFORM_ROLE_PREFIX):
            return cls(RoleKind.PLATFORM, value[len(PLATFORM_ROLE_PREFIX) :].strip())
        return cls(RoleKind.NAMED, value)

    def __str__(self) -> str:
        if self.kind == RoleKind.ALL:
            return "all"
        if self.kind == RoleKind.PLATFORM:
            return f"{PLATFORM_ROLE_PREFIX}{self.name}"
        return self.name


@dataclass(frozen=True)
class CommandDefinition:
    name: str
    action: Action
    roles: Tuple[RoleRef, ...] = ()
    secret: bool = False
    help: Optional[str] = None


@dataclass
class Resolution:
    """Outcome of matching message tokens against the command table."""

    name: str = ""
    found: bool = False
    args: Dict[int, str] = field(default_factory=dict)
    consumed: int = 0


@dataclass(frozen=True)
class IncomingMessage:
    text: str
    author_id: str
    author_username: str
    channel_id: str
    is_from_self: bool = False
    platform_roles: Tuple[str, ...] = ()
    guild_id: Optional[str] = None


class DeliveryMode(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


@dataclass(frozen=True)
class DispatchResult:
    text: str
    mode: DeliveryMode = DeliveryMode.PUBLIC
    code_block: bool = False
