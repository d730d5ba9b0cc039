"""Custom exception hierarchy for relaybot."""


class RelayBotError(Exception):
    """Base error type."""


class ConfigError(RelayBotError):
    pass


class DeliveryError(RelayBotError):
    """Raised when the chat platform refuses or fails to deliver a message."""
