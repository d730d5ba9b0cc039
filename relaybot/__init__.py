"""relaybot - a configurable Discord command bot."""

__version__ = "0.7.0"
