"""Configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .commands.authorizer import RoleTables
from .commands.registry import CommandTable, normalize_command_name
from .errors import ConfigError
from .models import Action, ActionKind, CommandDefinition, RoleRef

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("config.yaml")
ENV_FILE_NAME = ".env"
DEFAULT_CHUNK_SIZE = 1980
DEFAULT_SPLIT_CHAR = "\n"
DEFAULT_SHELL_TIMEOUT = 60.0
DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_CANARY_INTERVAL = 60
SECRET_FLAG = "secret"
ACTION_FLAGS = {kind.value: kind for kind in ActionKind if kind != ActionKind.MESSAGE}


@dataclass(frozen=True)
class CanaryConfig:
    url: str
    interval: int = DEFAULT_CANARY_INTERVAL


@dataclass
class Config:
    command_key: str
    commands: CommandTable
    discord_token: str = ""
    roles: RoleTables = field(default_factory=RoleTables)
    shell_enabled: bool = False
    shell: Optional[str] = None
    shell_timeout: float = DEFAULT_SHELL_TIMEOUT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    split_char: str = DEFAULT_SPLIT_CHAR
    file_root: Path = Path("/")
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    canary: Optional[CanaryConfig] = None
    config_path: Optional[Path] = None
    settings: Dict[str, Any] = field(default_factory=dict)

    @property
    def shell_available(self) -> bool:
        return self.shell_enabled and bool(self.shell)

    def display_items(self) -> List[Tuple[str, Any]]:
        """Sorted raw settings with secrets masked, for --displayconfig."""
        items = []
        for key in sorted(self.settings):
            value = self.settings[key]
            if key == "discordtoken" and value:
                value = "********"
            items.append((key, value))
        return items


def resolve_config_path(config_path: Path | str | None) -> Path:
    """Resolve and validate the YAML configuration file."""
    target = Path(config_path).expanduser() if config_path else DEFAULT_CONFIG_FILE
    target = target.resolve()
    if not target.exists():
        raise ConfigError(f"Config file {target} does not exist")
    if not target.is_file():
        raise ConfigError(f"Config file {target} is not a file")
    return target


def load_config(config_path: Path | str | None = None) -> Config:
    """Load relaybot configuration from the provided or default file."""
    path = resolve_config_path(config_path)
    _load_env_file(path.parent / ENV_FILE_NAME)
    settings = _read_settings(path)
    return build_config(settings, config_path=path)


def build_config(settings: Dict[str, Any], config_path: Optional[Path] = None) -> Config:
    """Validate raw settings into a typed, immutable-in-practice Config."""
    settings = {str(key).lower(): value for key, value in settings.items()}

    token = os.getenv("DISCORD_TOKEN") or settings.get("discordtoken")
    if not token:
        raise ConfigError("No discordtoken configured (set discordtoken or DISCORD_TOKEN)")

    command_key = settings.get("commandkey")
    if not isinstance(command_key, str) or not command_key.strip():
        raise ConfigError("commandkey must be a non-empty string")

    command_roles = _load_command_roles(settings.get("commandroles"))
    discord_roles = _load_discord_roles(settings.get("discordroles"))
    legacy_perms = _load_legacy_perms(settings.get("commandperms"))
    commands = _load_commands(settings.get("commands"), legacy_perms)

    shell_enabled = _as_bool(settings.get("shellenable", False), "shellenable")
    shell = settings.get("shell")
    if shell is not None and not isinstance(shell, str):
        raise ConfigError("shell must be a string path")
    if shell_enabled and not shell:
        raise ConfigError("If shellenable=true, a shell must be defined")

    chunk_size = _as_int(settings.get("chunksize", DEFAULT_CHUNK_SIZE), "chunksize")
    if chunk_size <= 0:
        raise ConfigError("chunksize must be positive")

    split_char = settings.get("splitchar", DEFAULT_SPLIT_CHAR)
    if not isinstance(split_char, str):
        raise ConfigError("splitchar must be a string")

    canary = None
    if _as_bool(settings.get("canaryenable", False), "canaryenable"):
        canary_url = settings.get("canaryurl")
        if not isinstance(canary_url, str) or not canary_url:
            raise ConfigError("canaryenable=true requires canaryurl")
        interval = _as_int(settings.get("canaryinterval", DEFAULT_CANARY_INTERVAL), "canaryinterval")
        if interval <= 0:
            raise ConfigError("canaryinterval must be positive")
        canary = CanaryConfig(url=canary_url, interval=interval)

    if not commands:
        LOGGER.warning("No commands configured")

    return Config(
        command_key=command_key.strip(),
        commands=commands,
        discord_token=str(token),
        roles=RoleTables(command_roles=command_roles, discord_roles=discord_roles),
        shell_enabled=shell_enabled,
        shell=shell,
        shell_timeout=_as_float(settings.get("shelltimeout", DEFAULT_SHELL_TIMEOUT), "shelltimeout"),
        chunk_size=chunk_size,
        split_char=split_char,
        file_root=Path(str(settings.get("fileroot", "/"))).expanduser(),
        http_timeout=_as_float(settings.get("httptimeout", DEFAULT_HTTP_TIMEOUT), "httptimeout"),
        canary=canary,
        config_path=config_path,
        settings=settings,
    )


def _load_env_file(path: Path) -> None:
    if not path.exists():
        LOGGER.debug("No .env file found at %s; relying on shell environment.", path)
        return
    load_dotenv(dotenv_path=path, override=False)


def _read_settings(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} was found but could not be parsed: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config structure at {path}")
    return data


def _load_command_roles(raw: Any) -> Dict[str, FrozenSet[str]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("commandroles must be a mapping of role name to user ids")
    roles = {}
    for name, members in raw.items():
        if members is None:
            members = []
        if not isinstance(members, list):
            raise ConfigError(f"commandroles.{name} must be a list of user ids")
        roles[str(name).lower()] = frozenset(str(member) for member in members)
    return roles


def _load_discord_roles(raw: Any) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("discordroles must be a mapping of role name to Discord role id")
    roles = {}
    for name, role_id in raw.items():
        if not isinstance(role_id, (int, str)) or isinstance(role_id, bool):
            raise ConfigError(f"discordroles.{name} must be a role id")
        roles[str(name).lower()] = str(role_id)
    return roles


def _load_legacy_perms(raw: Any) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("commandperms must be a mapping of command name to role")
    return {normalize_command_name(name): str(role) for name, role in raw.items()}


def _load_commands(raw: Any, legacy_perms: Dict[str, str]) -> CommandTable:
    if raw is None:
        return CommandTable()
    if not isinstance(raw, dict):
        raise ConfigError("commands must be a mapping of command name to action")

    definitions = []
    for raw_name, cfg in raw.items():
        name = normalize_command_name(raw_name)
        if not name:
            raise ConfigError("Command names must not be empty")
        if isinstance(cfg, str):
            definition = _parse_legacy_command(name, cfg)
        elif isinstance(cfg, dict):
            definition = _parse_command_mapping(name, cfg)
        else:
            raise ConfigError(f"Command {name} must be a string or a mapping")

        if not definition.roles and name in legacy_perms:
            definition = CommandDefinition(
                name=definition.name,
                action=definition.action,
                roles=(RoleRef.parse(legacy_perms[name]),),
                secret=definition.secret,
                help=definition.help,
            )
        if definition.action.is_conflicting:
            LOGGER.warning(
                "Command %s combines mutually exclusive actions (%s); it will never run",
                name,
                ", ".join(sorted(kind.value for kind in definition.action.kinds)),
            )
        if not definition.roles:
            LOGGER.warning("Command %s has no roles configured; nobody can run it", name)
        definitions.append(definition)
    return CommandTable(definitions)


def _parse_legacy_command(name: str, value: str) -> CommandDefinition:
    """Parse ``secret|api|https://...`` style definitions."""
    parts = value.split("|")
    kinds = set()
    secret = False
    index = 0
    while index < len(parts) - 1:
        flag = parts[index].strip().lower()
        if flag == SECRET_FLAG:
            secret = True
        elif flag in ACTION_FLAGS:
            kinds.add(ACTION_FLAGS[flag])
        else:
            break
        index += 1
    payload = "|".join(parts[index:])
    return CommandDefinition(
        name=name,
        action=Action(kinds=frozenset(kinds or {ActionKind.MESSAGE}), payload=payload),
        secret=secret,
    )


def _parse_command_mapping(name: str, cfg: Dict[str, Any]) -> CommandDefinition:
    cfg = {str(key).lower(): value for key, value in cfg.items()}
    kinds = []
    payload = ""
    for kind in ActionKind:
        if kind.value not in cfg:
            continue
        value = cfg[kind.value]
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ConfigError(f"Command {name}: {kind.value} must be a string")
        if not kinds:
            payload = str(value)
        kinds.append(kind)
    if not kinds:
        raise ConfigError(
            f"Command {name} must define one of: " + ", ".join(kind.value for kind in ActionKind)
        )

    raw_roles = cfg.get("roles", [])
    if isinstance(raw_roles, str):
        raw_roles = [raw_roles]
    if not isinstance(raw_roles, list):
        raise ConfigError(f"Command {name}: roles must be a list")
    roles = tuple(RoleRef.parse(role) for role in raw_roles)

    help_text = cfg.get("help")
    if help_text is not None and not isinstance(help_text, str):
        raise ConfigError(f"Command {name}: help must be a string")

    return CommandDefinition(
        name=name,
        action=Action(kinds=frozenset(kinds), payload=payload),
        roles=roles,
        secret=_as_bool(cfg.get("secret", False), f"{name}.secret"),
        help=help_text,
    )


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false", "yes", "no", "1", "0"):
        return value.lower() in ("true", "yes", "1")
    raise ConfigError(f"{key} must be a boolean")


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer") from exc


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be a number") from exc
