"""
Configuration module for o365-cli.
Defines authentication settings, HTTP tuning and the CSOM protocol constants.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


# ─── Tenant Authentication ───────────────────────────────────────────────────

@dataclass
class CertificateAuth:
    """Certificate-based app-only authentication configuration."""
    tenant_id: str
    client_id: str
    certificate_path: str          # Path to base64-encoded PFX
    certificate_password: str = "" # Will be prompted if empty

@dataclass
class DelegatedAuth:
    """Delegated (device code) authentication configuration."""
    tenant_id: str
    client_id: str
    # Relative to the SharePoint origin, e.g. https://contoso.sharepoint.com/.default
    scope_suffix: str = "/.default"

@dataclass
class AuthConfig:
    """Authentication configuration — supports both modes."""
    mode: str = "certificate"  # "certificate" or "delegated"
    certificate: Optional[CertificateAuth] = None
    delegated: Optional[DelegatedAuth] = None


# ─── SharePoint Endpoints ───────────────────────────────────────────────────

PROCESS_QUERY_PATH = "/_vti_bin/client.svc/ProcessQuery"
CONTEXT_INFO_PATH = "/_api/contextinfo"
ODATA_NOMETADATA = "application/json;odata=nometadata"

# Fixed <Request> attributes, emitted in this order
CSOM_SCHEMA_VERSION = "15.0.0.0"
CSOM_LIBRARY_VERSION = "16.0.0.0"
CSOM_APPLICATION_NAME = ".NET Library"
CSOM_NAMESPACE = "http://schemas.microsoft.com/sharepoint/clientquery/2009"

# Throttling (applies to idempotent GETs only; ProcessQuery is never retried)
MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 2.0
MAX_BACKOFF_SECONDS = 60.0
BACKOFF_MULTIPLIER = 2.0

CERT_PASSWORD_ENV = "O365_CLI_CERT_PASSWORD"
HOME_ENV = "O365_CLI_HOME"


@dataclass
class HttpConfig:
    """Transport settings for the SharePoint client."""
    timeout_seconds: float = 60.0
    connect_timeout_seconds: float = 30.0
    max_retries: int = MAX_RETRIES
    initial_backoff_seconds: float = INITIAL_BACKOFF_SECONDS
    max_backoff_seconds: float = MAX_BACKOFF_SECONDS


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class CliConfig:
    """Top-level configuration for a CLI invocation."""
    auth: AuthConfig = field(default_factory=AuthConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    spo_url: str = ""
    debug: bool = False
    verbose: bool = False

    @classmethod
    def from_file(cls, path: str | Path) -> "CliConfig":
        """Load configuration from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        config = cls()
        if "auth" in data:
            auth_data = data["auth"]
            config.auth.mode = auth_data.get("mode", "certificate")
            if "certificate" in auth_data:
                c = auth_data["certificate"]
                config.auth.certificate = CertificateAuth(
                    tenant_id=c["tenant_id"],
                    client_id=c["client_id"],
                    certificate_path=c.get("certificate_path", "./base64.txt"),
                    certificate_password=c.get("certificate_password", ""),
                )
            if "delegated" in auth_data:
                d = auth_data["delegated"]
                config.auth.delegated = DelegatedAuth(
                    tenant_id=d["tenant_id"],
                    client_id=d["client_id"],
                )
        if "http" in data:
            for k, v in data["http"].items():
                if hasattr(config.http, k):
                    setattr(config.http, k, v)
        config.spo_url = data.get("spo_url", "")
        config.debug = data.get("debug", False)
        config.verbose = data.get("verbose", False)
        return config


def config_home() -> Path:
    """Directory holding profiles; overridable via $O365_CLI_HOME."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".o365_cli"

