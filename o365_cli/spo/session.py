"""
Explicit SharePoint session passed into each command invocation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from ..auth.authenticator import resource_for
from ..errors import AuthError

logger = logging.getLogger("o365_cli.spo")

# Called with a resource (https://tenant.sharepoint.com), returns a bearer token
TokenProvider = Callable[[str], Awaitable[str]]


@dataclass
class SpoSession:
    """The site a user is signed in to and how to get tokens for it."""
    url: str = ""
    token_provider: Optional[TokenProvider] = None
    profile_name: str = ""
    _tokens: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def connected(self) -> bool:
        return bool(self.url) and self.token_provider is not None

    def ensure_connected(self) -> None:
        if not self.connected:
            raise AuthError("Log in to a SharePoint Online site first")

    async def get_access_token(self, url: str) -> str:
        """
        Return a bearer token for the origin of `url`.

        Any failure from the provider is surfaced as AuthError carrying the
        provider's message.
        """
        self.ensure_connected()
        resource = resource_for(url)
        if resource in self._tokens:
            return self._tokens[resource]
        try:
            token = await self.token_provider(resource)
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(str(e)) from e
        if not token:
            raise AuthError(f"No access token returned for {resource}")
        logger.debug(f"Obtained access token for {resource}")
        self._tokens[resource] = token
        return token
