"""``keys`` command-line client.

Usage:
    keys [--server URL] [--config PATH] keys [--user U] [--all-of T]... [--one-of T]...
                                             [--none-of T]... [--write PATH] [--force]
    keys [--server URL] [--config PATH] pgp-keys
    keys [--server URL] [--config PATH] known-hosts [--write PATH]
    keys init

Output is a table on a terminal and the raw file format when piped, so
``keys keys > ~/.ssh/authorized_keys`` does what it says.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

import httpx

from keyserver import __version__
from keyserver.cli.client import KeysClient, KeysClientError
from keyserver.cli.config import ClientConfigError, ensure_default_config_exists, load_client_config
from keyserver.cli.output import (
    format_known_hosts_for_pipe,
    format_known_hosts_table,
    format_pgp_keys_for_pipe,
    format_pgp_keys_table,
    format_ssh_keys_for_pipe,
    format_ssh_keys_table,
    summarize_merge,
    write_authorized_keys,
    write_known_hosts,
)
from keyserver.routes.filter import Filter


def _tags(values: Optional[list[str]]) -> Optional[frozenset[str]]:
    return frozenset(values) if values is not None else None


def build_filter(args: argparse.Namespace) -> Filter:
    return Filter(
        user=args.user,
        all_of=_tags(args.all_of),
        one_of=_tags(args.one_of),
        none_of=_tags(args.none_of),
    )


def _emit(text: str) -> None:
    if text:
        print(text)


# ─── Commands ─────────────────────────────────────────────────────────────────


def cmd_keys(args: argparse.Namespace, client: KeysClient) -> int:
    response = client.fetch_ssh_keys(build_filter(args))

    if args.write:
        path = Path(args.write).expanduser()
        result = write_authorized_keys(path, response.keys, force=args.force)
        for line in summarize_merge(result, path, color=sys.stdout.isatty()):
            print(line)
        return 0

    if sys.stdout.isatty():
        print(format_ssh_keys_table(response.version, response.keys))
    else:
        _emit(format_ssh_keys_for_pipe(response.keys))
    return 0


def cmd_pgp_keys(args: argparse.Namespace, client: KeysClient) -> int:
    response = client.fetch_pgp_keys()
    if sys.stdout.isatty():
        print(format_pgp_keys_table(response.version, response.keys))
    else:
        _emit(format_pgp_keys_for_pipe(response.keys))
    return 0


def cmd_known_hosts(args: argparse.Namespace, client: KeysClient) -> int:
    response = client.fetch_known_hosts()

    if args.write:
        path = Path(args.write).expanduser()
        count = write_known_hosts(path, response.known_hosts)
        print(f"Wrote {count} known host entries to {path}")
        return 0

    if sys.stdout.isatty():
        print(format_known_hosts_table(response.version, response.known_hosts))
    else:
        _emit(format_known_hosts_for_pipe(response.known_hosts))
    return 0


# ─── Entry point ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keys", description="Fetch SSH keys, PGP keys and known hosts from a keys server"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--server", help="Keys server URL (overrides the config file)")
    parser.add_argument("--config", help="Path to a client config file")
    sub = parser.add_subparsers(dest="cmd", required=True)

    keys = sub.add_parser("keys", help="List SSH keys or write them to an authorized_keys file")
    keys.add_argument("--user", help="Only keys belonging to this user")
    keys.add_argument("--all-of", dest="all_of", action="append", metavar="TAG",
                      help="Only keys carrying every given tag (repeatable)")
    keys.add_argument("--one-of", dest="one_of", action="append", metavar="TAG",
                      help="Only keys carrying at least one given tag (repeatable)")
    keys.add_argument("--none-of", dest="none_of", action="append", metavar="TAG",
                      help="Only keys carrying none of the given tags (repeatable)")
    keys.add_argument("--write", metavar="PATH",
                      help="Merge the keys into this authorized_keys file")
    keys.add_argument("--force", action="store_true",
                      help="With --write, replace the file instead of merging")
    keys.set_defaults(func=cmd_keys)

    pgp = sub.add_parser("pgp-keys", help="List PGP public keys")
    pgp.set_defaults(func=cmd_pgp_keys)

    known_hosts = sub.add_parser("known-hosts", help="List known hosts or write a known_hosts file")
    known_hosts.add_argument("--write", metavar="PATH",
                             help="Replace this known_hosts file with the server's entries")
    known_hosts.set_defaults(func=cmd_known_hosts)

    init = sub.add_parser("init", help="Create the default client config file")
    init.set_defaults(func=None)

    return parser


def main(argv: Optional[list[str]] = None, transport: Optional[httpx.BaseTransport] = None) -> int:
    """Run the ``keys`` CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        if args.cmd == "init":
            path = Path(args.config).expanduser() if args.config else None
            ensure_default_config_exists(path)
            return 0

        config = load_client_config(args.config)
        client = KeysClient(args.server or config.server_url, transport=transport)
        return args.func(args, client)
    except (KeysClientError, ClientConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
