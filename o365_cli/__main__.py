"""
o365-cli — SharePoint Online administration from the command line.

Usage:
    python -m o365_cli spo contenttype field remove -u <webUrl> -i <ctId> -f <fieldLinkId> [-c]
    python -m o365_cli spo contenttype field remove ... --profile contoso --debug

Profile management:
    python -m o365_cli profile add <name> --tenant-id ... --client-id ... --spo-url ...
    python -m o365_cli profile list
    python -m o365_cli profile remove <name>
    python -m o365_cli profile set-default <name>
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from .auth.authenticator import Authenticator
from .commands import ALL_COMMANDS
from .config import AuthConfig, CertificateAuth, CliConfig, DelegatedAuth
from .errors import CommandError, RemoteError
from .profiles import ConnectionProfile, ProfileStore, resolve_profile
from .spo.session import SpoSession

logger = logging.getLogger("o365_cli")


# ---------------------------------------------------------------------------
# Profile management sub-commands
# ---------------------------------------------------------------------------

def _cmd_profile(args: argparse.Namespace, store: ProfileStore) -> int:
    """Handle `profile add|list|remove|set-default` sub-commands."""
    action = args.profile_action

    if action == "list":
        return _profile_list(store)
    elif action == "add":
        return _profile_add(args, store)
    elif action == "remove":
        if store.remove(args.profile_name):
            print(f"Profile '{args.profile_name}' removed.")
            return 0
        print(f"Profile '{args.profile_name}' not found.", file=sys.stderr)
        return 1
    elif action == "set-default":
        if store.set_default(args.profile_name):
            print(f"Default profile set to '{args.profile_name}'.")
            return 0
        print(f"Profile '{args.profile_name}' not found.", file=sys.stderr)
        return 1
    print("Usage: python -m o365_cli profile {add|list|remove|set-default}")
    return 0


def _profile_list(store: ProfileStore) -> int:
    profiles = store.list_profiles()
    if not profiles:
        print("No profiles configured. Add one with:\n")
        print("  python -m o365_cli profile add <name> \\")
        print("    --tenant-id <GUID> --client-id <GUID> --spo-url https://contoso.sharepoint.com")
        return 0

    print(f"\n  {'Name':<20s} {'SharePoint URL':<40s} {'Auth':<12s} {'Default'}")
    print(f"  {'-'*20} {'-'*40} {'-'*12} {'-'*7}")
    for p in profiles:
        marker = "  *" if p.name == store.default_profile else ""
        print(f"  {p.name:<20s} {p.spo_url:<40s} {p.auth_mode:<12s}{marker}")
    print()
    return 0


def _profile_add(args: argparse.Namespace, store: ProfileStore) -> int:
    name = args.profile_name
    if store.get(name):
        print(f"Profile '{name}' already exists. It will be overwritten.")

    profile = ConnectionProfile(
        name=name,
        tenant_id=args.tenant_id,
        client_id=args.client_id,
        spo_url=(args.spo_url or "").rstrip("/"),
        cert_path=args.cert_path,
        auth_mode="delegated" if args.delegated else "certificate",
    )
    store.add(profile, set_default=args.set_default)
    print(f"Profile '{name}' saved.")
    if store.default_profile == name:
        print("Set as default profile.")
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _add_global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--profile", "-p", default=None, help="Connection profile to use")
    parser.add_argument("--config", type=Path, default=None, help="Path to JSON configuration file")
    parser.add_argument("--debug", action="store_true", help="Runs command with debug logging")
    parser.add_argument("--verbose", action="store_true", help="Runs command with verbose logging")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="o365_cli",
        description="Manage SharePoint Online from the command line",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- profile ---
    prof_parser = subparsers.add_parser("profile", help="Manage connection profiles")
    prof_sub = prof_parser.add_subparsers(dest="profile_action")

    add_p = prof_sub.add_parser("add", help="Add or update a profile")
    add_p.add_argument("profile_name", help="Short name for the profile (e.g. 'contoso')")
    add_p.add_argument("--tenant-id", required=True, help="Entra tenant ID (GUID)")
    add_p.add_argument("--client-id", required=True, help="App registration client ID (GUID)")
    add_p.add_argument("--spo-url", required=True, help="SharePoint Online root URL")
    add_p.add_argument("--cert-path", default="./base64.txt", help="Path to base64-encoded PFX")
    add_p.add_argument("--delegated", action="store_true", help="Use device code sign-in")
    add_p.add_argument("--set-default", action="store_true", help="Set as default profile")

    prof_sub.add_parser("list", help="List all profiles")
    rm_p = prof_sub.add_parser("remove", help="Remove a profile")
    rm_p.add_argument("profile_name")
    sd_p = prof_sub.add_parser("set-default", help="Set the default profile")
    sd_p.add_argument("profile_name")

    # --- command tree, one level per word of the command name ---
    groups: dict[tuple, argparse._SubParsersAction] = {(): subparsers}
    for cls in ALL_COMMANDS:
        words = cls.name.split()
        for depth in range(1, len(words)):
            key = tuple(words[:depth])
            if key not in groups:
                group_parser = groups[key[:-1]].add_parser(key[-1])
                groups[key] = group_parser.add_subparsers(dest=f"_level{depth}")
        leaf = groups[tuple(words[:-1])].add_parser(words[-1], help=cls.description)
        cls.add_arguments(leaf)
        _add_global_options(leaf)
        leaf.set_defaults(command_class=cls)

    return parser


# ---------------------------------------------------------------------------
# Session & execution
# ---------------------------------------------------------------------------

def build_session(
    args: argparse.Namespace,
    store: Optional[ProfileStore] = None,
) -> tuple[SpoSession, CliConfig]:
    """Resolve config and profile into an explicit session for this invocation."""
    config = CliConfig.from_file(args.config) if args.config else CliConfig()
    config.debug = config.debug or args.debug
    config.verbose = config.verbose or args.verbose

    profile = resolve_profile(args.profile, store)
    if args.profile and not profile:
        raise CommandError(f"Profile '{args.profile}' not found. Use 'profile list' to see available profiles.")

    if profile:
        config.spo_url = profile.spo_url
        if profile.auth_mode == "delegated":
            config.auth = AuthConfig(
                mode="delegated",
                delegated=DelegatedAuth(tenant_id=profile.tenant_id, client_id=profile.client_id),
            )
        else:
            config.auth = AuthConfig(
                mode="certificate",
                certificate=CertificateAuth(
                    tenant_id=profile.tenant_id,
                    client_id=profile.client_id,
                    certificate_path=profile.resolve_cert_path(),
                ),
            )

    has_credentials = config.auth.certificate is not None or config.auth.delegated is not None
    if not config.spo_url or not has_credentials:
        return SpoSession(), config

    authenticator = Authenticator(config.auth)
    session = SpoSession(
        url=config.spo_url,
        token_provider=authenticator.acquire_token,
        profile_name=profile.name if profile else "",
    )
    return session, config


async def run_command(args: argparse.Namespace, store: Optional[ProfileStore] = None) -> int:
    cls = args.command_class
    options = cls.options_from_args(args)
    session, config = build_session(args, store)

    command = cls(session, http=config.http)
    result = await command.execute(options)
    for line in result.output:
        print(line)
    return 0


def configure_logging(debug: bool, verbose: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def main(argv: Optional[list[str]] = None, store: Optional[ProfileStore] = None) -> int:
    """Entry point for `python -m o365_cli` and the `o365` script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "profile":
        return _cmd_profile(args, store or ProfileStore.load())

    if not hasattr(args, "command_class"):
        parser.print_help()
        return 1

    configure_logging(args.debug, args.verbose)
    try:
        return asyncio.run(run_command(args, store))
    except CommandError as e:
        return report_error(e)


def report_error(error: CommandError) -> int:
    """Print a command failure and return its exit status."""
    logger.debug("Command failed", exc_info=error)
    if isinstance(error, RemoteError):
        logger.debug(f"Server error details: {error.diagnostics()}")
    print(f"Error: {error.message}", file=sys.stderr)
    return error.code


if __name__ == "__main__":
    sys.exit(main())
