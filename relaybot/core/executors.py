"""Blocking side effects used by command actions, run off the event loop."""

from __future__ import annotations

import asyncio
import logging
import posixpath
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

LOGGER = logging.getLogger(__name__)


@dataclass
class FetchResult:
    body: str = ""
    status: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300


@dataclass
class ShellResult:
    stdout: str = ""
    stderr: str = ""
    returncode: Optional[int] = None
    error: Optional[str] = None


class HttpFetcher:
    """Performs bounded HTTP GET requests."""

    async def fetch(self, url: str, timeout: float) -> FetchResult:
        def _execute() -> FetchResult:
            with requests.get(url, timeout=timeout) as response:
                return FetchResult(body=response.text, status=response.status_code)

        try:
            return await asyncio.to_thread(_execute)
        except requests.RequestException as exc:
            return FetchResult(error=str(exc))


class ShellRunner:
    """Runs a command line through a configured shell program."""

    async def run(self, shell: str, command: str, timeout: float) -> ShellResult:
        def _execute() -> ShellResult:
            try:
                completed = subprocess.run(
                    [shell, "-c", command],
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                return ShellResult(
                    stdout=_decode(exc.stdout),
                    stderr=_decode(exc.stderr),
                    error=f"timed out after {timeout:g}s",
                )
            except OSError as exc:
                return ShellResult(error=str(exc))

            error = None
            if completed.returncode != 0:
                error = f"exit status {completed.returncode}"
            return ShellResult(
                stdout=completed.stdout or "",
                stderr=completed.stderr or "",
                returncode=completed.returncode,
                error=error,
            )

        return await asyncio.to_thread(_execute)


class FileLoader:
    """Reads files confined to a root directory."""

    @staticmethod
    def resolve_path(root: Path, requested: str) -> Path:
        # Anchoring at "/" before normalizing swallows any leading "..".
        cleaned = posixpath.normpath(posixpath.join("/", requested.replace("\\", "/")))
        return Path(root) / cleaned.lstrip("/")

    async def load(self, root: Path, requested: str) -> str:
        path = self.resolve_path(root, requested)
        LOGGER.debug("Loading file %s (requested %s)", path, requested)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
