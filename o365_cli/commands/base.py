"""
Base command class — Abstract interface for all CLI commands.
A command owns a typed options dataclass, validates it before touching the
network, and runs against an explicit SpoSession.
"""

from __future__ import annotations

import argparse
import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from ..config import HttpConfig
from ..errors import ValidationError
from ..safety.guardian import RequestGuard
from ..spo.client import SpoClient
from ..spo.session import SpoSession

logger = logging.getLogger("o365_cli.commands")

_SPO_HOST_RE = re.compile(r"^[a-z0-9-]+\.sharepoint\.[a-z]{2,}$")

_GUID_RE = re.compile(
    r"^\{?[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\}?$",
    re.IGNORECASE,
)


def is_valid_guid(value: Optional[str]) -> bool:
    if not value:
        return False
    if value.startswith("{") != value.endswith("}"):
        return False
    return bool(_GUID_RE.match(value))


def is_valid_sharepoint_url(value: Optional[str]) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    if parsed.scheme.lower() != "https" or parsed.query or parsed.fragment:
        return False
    return bool(_SPO_HOST_RE.match((parsed.hostname or "").lower()))


@dataclass
class GlobalOptions:
    """Options every command accepts."""
    debug: bool = False
    verbose: bool = False


class CommandResult:
    """Standardized result from a command run."""

    def __init__(self, command_name: str):
        self.command_name = command_name
        self.output: list[str] = []
        self.data: dict[str, Any] = {}
        self.metadata: dict[str, Any] = {
            "command": command_name,
            "started_at": None,
            "completed_at": None,
            "duration_seconds": 0,
        }

    def log(self, message: str):
        self.output.append(message)


class BaseCommand(ABC):
    """
    Abstract base class for all commands.

    Subclasses implement validate() and run(). The base class provides:
      - Session check before any request
      - SpoClient construction with a fresh bearer token
      - Timing metadata and the DONE marker in debug/verbose mode
    """

    name: str = "base"
    description: str = "Base command"

    def __init__(
        self,
        session: SpoSession,
        http: Optional[HttpConfig] = None,
        guard: Optional[RequestGuard] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.http = http or HttpConfig()
        self.guard = guard or RequestGuard()
        self.transport = transport

    # --- CLI wiring ---

    @classmethod
    def add_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Register command-specific options on its subparser."""
        pass

    @classmethod
    @abstractmethod
    def options_from_args(cls, args: argparse.Namespace) -> GlobalOptions:
        raise NotImplementedError

    # --- Execution ---

    @abstractmethod
    def validate(self, options: GlobalOptions) -> None:
        """Raise ValidationError if options are unusable."""
        raise NotImplementedError

    @abstractmethod
    async def run(self, options: GlobalOptions, result: CommandResult):
        raise NotImplementedError

    async def execute(self, options: GlobalOptions) -> CommandResult:
        """Validate, check the session, then run the command."""
        self.validate(options)
        self.session.ensure_connected()

        result = CommandResult(self.name)
        result.metadata["started_at"] = time.time()
        logger.info(f"[{self.name}] Starting...")

        await self.run(options, result)

        result.metadata["completed_at"] = time.time()
        result.metadata["duration_seconds"] = round(
            result.metadata["completed_at"] - result.metadata["started_at"], 2
        )
        if options.debug or options.verbose:
            result.log("DONE")
        return result

    async def open_client(self, url: str) -> SpoClient:
        """Build an SpoClient authenticated for the origin of `url`."""
        token = await self.session.get_access_token(url)
        return SpoClient(token, guard=self.guard, http=self.http, transport=self.transport)


def require(value: Any, option: str) -> None:
    if value is None or value == "":
        raise ValidationError(f"Required option {option} not specified")
