"""Core domain logic for relaybot."""

from .config import CanaryConfig, Config, build_config, load_config
from .errors import (
    ConfigError,
    DeliveryError,
    RelayBotError,
)
from .models import (
    Action,
    ActionKind,
    CommandDefinition,
    DeliveryMode,
    DispatchResult,
    IncomingMessage,
    Resolution,
    RoleKind,
    RoleRef,
)
from .router import Router

__all__ = [
    "CanaryConfig",
    "Config",
    "build_config",
    "load_config",
    "Action",
    "ActionKind",
    "CommandDefinition",
    "DeliveryMode",
    "DispatchResult",
    "IncomingMessage",
    "Resolution",
    "RoleKind",
    "RoleRef",
    "RelayBotError",
    "ConfigError",
    "DeliveryError",
    "Router",
]
