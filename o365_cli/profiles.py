"""
Connection profiles — named tenant/site credentials for the CLI.

Profiles are stored in:
    ~/.o365_cli/profiles.json   (or $O365_CLI_HOME/profiles.json)

A profile with an spo_url is what makes a session "connected"; commands
pick one with `--profile <name>` or fall back to the default.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import config_home

logger = logging.getLogger("o365_cli.profiles")


@dataclass
class ConnectionProfile:
    """A single named connection profile."""
    name: str
    tenant_id: str
    client_id: str
    spo_url: str = ""                   # e.g. https://contoso.sharepoint.com
    cert_path: str = "./base64.txt"     # base64-encoded PFX; empty for device code
    auth_mode: str = "certificate"      # "certificate" or "delegated"

    def resolve_cert_path(self) -> str:
        """Return absolute cert path, resolving ~ and relative paths."""
        p = Path(self.cert_path).expanduser()
        if not p.is_absolute():
            p = Path.cwd() / p
        return str(p)

    def to_dict(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "spo_url": self.spo_url,
            "cert_path": self.cert_path,
            "auth_mode": self.auth_mode,
        }


@dataclass
class ProfileStore:
    """Manages the collection of profiles on disk."""
    path: Path = field(default_factory=lambda: config_home() / "profiles.json")
    profiles: dict[str, ConnectionProfile] = field(default_factory=dict)
    default_profile: str = ""

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "ProfileStore":
        """Load profiles from disk. Returns an empty store if the file is missing."""
        store = cls(path=path) if path else cls()
        if not store.path.exists():
            return store
        try:
            data = json.loads(store.path.read_text(encoding="utf-8"))
            store.default_profile = data.get("default_profile", "")
            for name, pdata in data.get("profiles", {}).items():
                store.profiles[name] = ConnectionProfile(
                    name=name,
                    tenant_id=pdata["tenant_id"],
                    client_id=pdata["client_id"],
                    spo_url=pdata.get("spo_url", ""),
                    cert_path=pdata.get("cert_path", "./base64.txt"),
                    auth_mode=pdata.get("auth_mode", "certificate"),
                )
        except (json.JSONDecodeError, KeyError) as e:
            logger.warning(f"Failed to parse {store.path}: {e}")
            return cls(path=store.path)
        return store

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "default_profile": self.default_profile,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }
        self.path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def add(self, profile: ConnectionProfile, set_default: bool = False) -> None:
        """Add or overwrite a profile."""
        self.profiles[profile.name] = profile
        if set_default or not self.default_profile:
            self.default_profile = profile.name
        self.save()

    def remove(self, name: str) -> bool:
        """Remove a profile by name. Returns True if it existed."""
        if name not in self.profiles:
            return False
        del self.profiles[name]
        if self.default_profile == name:
            self.default_profile = next(iter(self.profiles), "")
        self.save()
        return True

    def get(self, name: str) -> Optional[ConnectionProfile]:
        """Get a profile by name (case-insensitive)."""
        key = name.lower()
        for pname, profile in self.profiles.items():
            if pname.lower() == key:
                return profile
        return None

    def get_default(self) -> Optional[ConnectionProfile]:
        if self.default_profile:
            return self.profiles.get(self.default_profile)
        if self.profiles:
            return next(iter(self.profiles.values()))
        return None

    def set_default(self, name: str) -> bool:
        """Set the default profile. Returns True if the profile exists."""
        if name not in self.profiles:
            return False
        self.default_profile = name
        self.save()
        return True

    def list_profiles(self) -> list[ConnectionProfile]:
        return sorted(self.profiles.values(), key=lambda p: p.name)


def resolve_profile(
    profile_name: Optional[str] = None,
    store: Optional[ProfileStore] = None,
) -> Optional[ConnectionProfile]:
    """Look up a profile by name, or the default one when no name is given."""
    store = store or ProfileStore.load()
    if profile_name:
        return store.get(profile_name)
    return store.get_default()
