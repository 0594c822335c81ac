"""
Authentication module — Supports certificate-based and delegated device-code auth.
Uses MSAL for token acquisition; tokens are scoped to a SharePoint origin.
"""

from __future__ import annotations

import base64
import getpass
import logging
import os
from typing import Optional
from urllib.parse import urlparse

from cryptography.hazmat.primitives.hashes import SHA1
from cryptography.hazmat.primitives.serialization import pkcs12, Encoding, PrivateFormat, NoEncryption
import msal

from ..config import AuthConfig, CERT_PASSWORD_ENV
from ..errors import AuthError

logger = logging.getLogger("o365_cli.auth")


class AuthenticationError(AuthError):
    """Raised when MSAL cannot issue a token."""
    pass


def resource_for(url: str) -> str:
    """Return the token resource (scheme://host) for a SharePoint URL."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise AuthenticationError(f"Cannot derive a token resource from URL: {url}")
    return f"{parsed.scheme}://{parsed.netloc}".lower()


class Authenticator:
    """
    Handles MSAL-based authentication for SharePoint Online.
    Supports:
      - Certificate-based app-only authentication
      - Delegated authentication (device code flow)
    Tokens are cached per resource for the lifetime of the instance.
    """

    def __init__(self, config: AuthConfig):
        self.config = config
        self._tokens: dict[str, str] = {}
        self._app: Optional[msal.ClientApplication] = None

    async def acquire_token(self, resource: str) -> str:
        """Acquire an access token for `resource` based on the configured auth mode."""
        resource = resource.rstrip("/")
        if resource in self._tokens:
            return self._tokens[resource]

        if self.config.mode == "certificate":
            token = self._acquire_certificate_token(resource)
        elif self.config.mode == "delegated":
            token = self._acquire_delegated_token(resource)
        else:
            raise AuthenticationError(f"Unknown auth mode: {self.config.mode}")

        self._tokens[resource] = token
        return token

    def _load_certificate(self) -> dict:
        """Read the base64 PFX and return an MSAL client_credential dict."""
        cert_config = self.config.certificate
        cert_path = cert_config.certificate_path
        password = cert_config.certificate_password or os.environ.get(CERT_PASSWORD_ENV, "")
        if not password:
            password = getpass.getpass("Enter the certificate password: ")

        try:
            with open(cert_path, "r") as f:
                cert_bytes = base64.b64decode(f.read().strip())

            private_key, certificate, _ = pkcs12.load_key_and_certificates(
                cert_bytes, password.encode("utf-8") if password else None
            )
            private_key_pem = private_key.private_bytes(
                Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()
            ).decode("utf-8")
            thumbprint = certificate.fingerprint(SHA1()).hex()
        except FileNotFoundError:
            raise AuthenticationError(f"Certificate file not found: {cert_path}")
        except (ValueError, TypeError, AttributeError) as e:
            raise AuthenticationError(f"Failed to load certificate: {e}")

        logger.info(f"Certificate loaded. Thumbprint: {thumbprint}")
        return {"thumbprint": thumbprint, "private_key": private_key_pem}

    def _acquire_certificate_token(self, resource: str) -> str:
        """Acquire token using certificate-based client credentials."""
        cert_config = self.config.certificate
        if not cert_config:
            raise AuthenticationError("Certificate auth config not provided.")

        if self._app is None:
            self._app = msal.ConfidentialClientApplication(
                client_id=cert_config.client_id,
                authority=f"https://login.microsoftonline.com/{cert_config.tenant_id}",
                client_credential=self._load_certificate(),
            )

        logger.info(f"Requesting app-only token for {resource}")
        result = self._app.acquire_token_for_client(scopes=[f"{resource}/.default"])
        return self._token_from(result, "Certificate auth failed")

    def _acquire_delegated_token(self, resource: str) -> str:
        """Acquire token using delegated (device code) flow."""
        deleg_config = self.config.delegated
        if not deleg_config:
            raise AuthenticationError("Delegated auth config not provided.")

        if self._app is None:
            self._app = msal.PublicClientApplication(
                client_id=deleg_config.client_id,
                authority=f"https://login.microsoftonline.com/{deleg_config.tenant_id}",
            )
        scopes = [f"{resource}{deleg_config.scope_suffix}"]

        accounts = self._app.get_accounts()
        if accounts:
            result = self._app.acquire_token_silent(scopes, account=accounts[0])
            if result and "access_token" in result:
                return result["access_token"]

        flow = self._app.initiate_device_flow(scopes=scopes)
        if "user_code" not in flow:
            raise AuthenticationError(
                f"Device code flow failed: {flow.get('error_description', 'Unknown')}"
            )

        print(f"\n{'='*60}")
        print(f"  To sign in, open: {flow['verification_uri']}")
        print(f"  Enter code: {flow['user_code']}")
        print(f"{'='*60}\n")

        result = self._app.acquire_token_by_device_flow(flow)
        return self._token_from(result, "Delegated auth failed")

    @staticmethod
    def _token_from(result: dict, prefix: str) -> str:
        if "access_token" in result:
            logger.info("Token acquired.")
            return result["access_token"]
        error = result.get("error_description", result.get("error", "Unknown"))
        raise AuthenticationError(f"{prefix}: {error}")
