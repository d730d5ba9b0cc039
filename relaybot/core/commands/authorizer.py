"""Role-based authorization for configured commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Sequence

from ..models import IncomingMessage, RoleKind, RoleRef

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoleTables:
    """Configured role memberships.

    ``command_roles`` maps a role name to the user ids that hold it.
    ``discord_roles`` maps a role name to the platform role id.
    """

    command_roles: Dict[str, FrozenSet[str]] = field(default_factory=dict)
    discord_roles: Dict[str, str] = field(default_factory=dict)


def is_role_valid(role: RoleRef, tables: RoleTables) -> bool:
    if role.kind == RoleKind.ALL:
        return True
    if role.kind == RoleKind.PLATFORM:
        return bool(role.name) and role.name in tables.discord_roles
    return bool(role.name) and role.name in tables.command_roles


def role_grants(role: RoleRef, user: IncomingMessage, tables: RoleTables) -> bool:
    if role.kind == RoleKind.ALL:
        return True
    if role.kind == RoleKind.PLATFORM:
        platform_id = tables.discord_roles.get(role.name)
        if platform_id is None or not user.platform_roles:
            return False
        return platform_id in user.platform_roles
    return user.author_id in tables.command_roles.get(role.name, frozenset())


def authorize(roles: Sequence[RoleRef], user: IncomingMessage, tables: RoleTables) -> bool:
    """Return True when any required role admits ``user``.

    Fails closed: no roles, or any role reference that does not resolve against
    the configured tables, denies everyone.
    """

    if not roles:
        LOGGER.warning("No roles configured; denying user %s (%s)", user.author_username, user.author_id)
        return False

    invalid = [role for role in roles if not is_role_valid(role, tables)]
    if invalid:
        LOGGER.error(
            "Invalid role reference(s) %s; denying user %s (%s)",
            ", ".join(str(role) for role in invalid),
            user.author_username,
            user.author_id,
        )
        return False

    return any(role_grants(role, user, tables) for role in roles)


def allowed_commands(
    definitions: Iterable[tuple[str, Sequence[RoleRef]]],
    user: IncomingMessage,
    tables: RoleTables,
) -> list[str]:
    """Names of the commands ``user`` may run, without per-denial logging."""

    names = []
    for name, roles in definitions:
        if not roles or not all(is_role_valid(role, tables) for role in roles):
            continue
        if any(role_grants(role, user, tables) for role in roles):
            names.append(name)
    return names
