"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import signal
from pathlib import Path
from typing import Sequence

from . import __version__
from .chat_adapters.discord_adapter import DiscordAdapter
from .core import Config, ConfigError, Router, load_config
from .core.config import DEFAULT_CONFIG_FILE
from .core.heartbeat import CanaryHeartbeat

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relaybot",
        description="relaybot - configurable Discord command bot",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_FILE),
        help="Configuration file: /path/to/file.yaml (default: ./config.yaml)",
    )
    parser.add_argument(
        "--displayconfig",
        action="store_true",
        help="Display configuration and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Display version and exit",
    )
    return parser


def cli(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.getLogger().setLevel(getattr(logging, log_level_name, logging.INFO))

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        LOGGER.error("Configuration error: %s", exc)
        return 1

    if args.displayconfig:
        display_config(config)
        return 0

    try:
        return asyncio.run(_run_async(config))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")
        return 130


def display_config(config: Config) -> None:
    for key, value in config.display_items():
        print(f"CONFIG: {key} : {value}")


def run() -> None:
    raise SystemExit(cli())


async def _run_async(config: Config) -> int:
    """Run until a stop signal or a dead connection; returns the exit code."""
    LOGGER.info("Loaded %s command(s) from %s", len(config.commands), config.config_path)

    router = Router(config)
    adapter = DiscordAdapter(token=config.discord_token, router=router)
    router.bind_adapter(adapter)
    heartbeat = CanaryHeartbeat(config.canary) if config.canary else None

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _request_shutdown() -> None:
        LOGGER.info("Shutdown requested")
        stop_event.set()

    def _request_reload() -> None:
        _reload_config(router, config.config_path)

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_shutdown)
        except NotImplementedError:
            # Windows event loops do not support signal handlers.
            pass
    if hasattr(signal, "SIGHUP"):
        try:
            loop.add_signal_handler(signal.SIGHUP, _request_reload)
        except NotImplementedError:
            pass

    adapter_task = asyncio.create_task(adapter.start())
    if heartbeat:
        heartbeat.start()
    LOGGER.info("relaybot %s is now running. Press CTRL-C to exit.", __version__)

    stop_task = asyncio.create_task(stop_event.wait())
    await asyncio.wait({adapter_task, stop_task}, return_when=asyncio.FIRST_COMPLETED)

    if heartbeat:
        await heartbeat.stop()
    await adapter.stop()
    stop_task.cancel()
    exit_code = 0
    if adapter_task.done() and adapter_task.exception():
        LOGGER.error("Discord connection failed: %s", adapter_task.exception())
        exit_code = 1
    else:
        await adapter_task
    LOGGER.info("Shutdown complete")
    return exit_code


def _reload_config(router: Router, config_path: Path | None) -> None:
    try:
        new_config = load_config(config_path)
    except ConfigError as exc:
        LOGGER.error("Failed to reload config: %s", exc)
        return
    if new_config.discord_token != router.config.discord_token:
        LOGGER.warning("discordtoken changed; restart relaybot for it to take effect")
    router.apply_config(new_config)


if __name__ == "__main__":
    raise SystemExit(cli())
