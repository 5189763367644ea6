"""Terminal and file output for the ``keys`` CLI.

Two renderings per resource:
  - table: padded, coloured columns for an interactive terminal
  - pipe: the raw text format each file expects (authorized_keys lines,
    armored PGP keys, known_hosts lines) for redirection

``merge_authorized_keys`` is the pure core of ``keys --write``; the write_*
helpers do the file I/O around it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from keyserver.models import KnownHost, PGPKey, PublicSSHKey
from keyserver.routes.keys import format_authorized_key
from keyserver.routes.known_hosts import format_known_host_line

# ─── ANSI colours ─────────────────────────────────────────────────────────────
RESET = "\033[0m"
BOLD = "\033[1m"
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"

COLUMN_SPACING = 3
MIN_COLUMN_WIDTH = 4
PGP_PREVIEW_WIDTH = 50


def paint(text: str, *codes: str, enabled: bool = True) -> str:
    if not enabled or not codes:
        return text
    return f"{''.join(codes)}{text}{RESET}"


# ─── Tables ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Column:
    header: str
    color: str = ""


def format_table(
    title: str,
    version: str,
    columns: Sequence[Column],
    rows: Sequence[Sequence[str]],
    empty_message: str,
    color: bool = True,
) -> str:
    """Render ``rows`` as a padded table under a ``<title> <version>`` line.

    Every column but the last is padded to its widest cell (never narrower
    than the header); the last column is left unpadded.
    """
    lines = [f"{paint(title, MAGENTA, BOLD, enabled=color)} {version}", ""]
    if not rows:
        lines.append(paint(empty_message, YELLOW, enabled=color))
        return "\n".join(lines)

    widths = [
        max([len(column.header), MIN_COLUMN_WIDTH] + [len(row[i]) for row in rows])
        for i, column in enumerate(columns)
    ]
    last = len(columns) - 1

    def render(cells: Sequence[str], colors: Sequence[str]) -> str:
        parts = []
        for i, (cell, code) in enumerate(zip(cells, colors)):
            text = cell if i == last else cell.ljust(widths[i] + COLUMN_SPACING)
            parts.append(paint(text, code, enabled=color and bool(code)))
        return "".join(parts).rstrip()

    lines.append(render([c.header for c in columns], [GREEN + BOLD] * len(columns)))
    lines.append("-" * (sum(widths) + COLUMN_SPACING * last))
    for row in rows:
        lines.append(render(row, [c.color for c in columns]))
    return "\n".join(lines)


def format_ssh_keys_table(version: str, keys: Sequence[PublicSSHKey], color: bool = True) -> str:
    return format_table(
        "Keys Server Version:",
        version,
        [Column("NAME", GREEN), Column("USER", BLUE), Column("TAGS", YELLOW), Column("KEY", RED)],
        [(key.name, key.user, ", ".join(key.tags), key.key) for key in keys],
        "No SSH keys found matching the criteria.",
        color,
    )


def _pgp_preview(key: str) -> str:
    # First line of the armored body, after the header and any armor headers.
    body = [line for line in key.strip().splitlines()[1:] if line and ":" not in line]
    preview = body[0] if body else ""
    if len(preview) > PGP_PREVIEW_WIDTH:
        return preview[:PGP_PREVIEW_WIDTH] + "..."
    return preview


def format_pgp_keys_table(version: str, keys: Sequence[PGPKey], color: bool = True) -> str:
    return format_table(
        "PGP Keys Server Version:",
        version,
        [Column("NAME", GREEN), Column("KEY", RED)],
        [(key.name, _pgp_preview(key.key)) for key in keys],
        "No PGP keys found matching the criteria.",
        color,
    )


def format_known_hosts_table(
    version: str, known_hosts: Sequence[KnownHost], color: bool = True
) -> str:
    rows = []
    for known_host in known_hosts:
        for key in known_host.keys:
            flags = [flag for flag, on in (("REVOKED", key.revoked), ("CA", key.cert_authority)) if on]
            rows.append(
                (
                    known_host.name or "",
                    ",".join(known_host.hosts),
                    key.type,
                    ",".join(flags),
                    key.comment or "",
                    key.key,
                )
            )
    return format_table(
        "Known Hosts Server Version:",
        version,
        [
            Column("NAME", GREEN),
            Column("HOSTS", CYAN),
            Column("TYPE", BLUE),
            Column("FLAGS", YELLOW),
            Column("COMMENT", MAGENTA),
            Column("KEY", RED),
        ],
        rows,
        "No known hosts found.",
        color,
    )


# ─── Pipe formats ─────────────────────────────────────────────────────────────


def format_ssh_keys_for_pipe(keys: Sequence[PublicSSHKey]) -> str:
    return "\n".join(format_authorized_key(key) for key in keys)


def format_pgp_keys_for_pipe(keys: Sequence[PGPKey]) -> str:
    return "\n".join(key.key for key in keys)


def format_known_hosts_for_pipe(known_hosts: Sequence[KnownHost]) -> str:
    return "\n".join(
        format_known_host_line(known_host, key)
        for known_host in known_hosts
        for key in known_host.keys
    )


# ─── authorized_keys merge ────────────────────────────────────────────────────


def extract_key_part(line: str) -> str:
    """Return ``<type> <material>`` from an authorized_keys line, dropping any comment."""
    parts = line.split()
    return " ".join(parts[:2])


@dataclass
class MergeResult:
    """Outcome of merging server keys into an authorized_keys file.

    ``existing`` counts the non-blank, non-comment lines found in the file
    before the merge. ``local_only`` holds the lines that matched no server key
    and were kept (empty when forced).
    """

    lines: list[str]
    existing: int
    added: int = 0
    updated: int = 0
    local_only: list[str] = field(default_factory=list)
    forced: bool = False

    @property
    def total(self) -> int:
        return len(self.lines)

    def render(self) -> str:
        return "\n".join(self.lines) + "\n" if self.lines else ""


def merge_authorized_keys(
    existing_text: str,
    server_keys: Sequence[PublicSSHKey],
    force: bool = False,
) -> MergeResult:
    """Merge ``server_keys`` into the contents of an authorized_keys file.

    Blank and ``#`` comment lines are dropped. A line whose key part matches a
    server key is rewritten with the server's ``user@name`` comment, in place.
    Lines matching no server key are kept. Server keys not yet present are
    appended in server order. With ``force`` the result is exactly the server
    keys.
    """
    existing_lines = [
        line
        for line in existing_text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]

    if force:
        return MergeResult(
            lines=[format_authorized_key(key) for key in server_keys],
            existing=len(existing_lines),
            added=len(server_keys),
            forced=True,
        )

    by_key_part: dict[str, PublicSSHKey] = {}
    for key in server_keys:
        by_key_part.setdefault(extract_key_part(key.key), key)

    result = MergeResult(lines=[], existing=len(existing_lines))
    seen: set[str] = set()
    for line in existing_lines:
        key_part = extract_key_part(line)
        seen.add(key_part)
        server_key = by_key_part.get(key_part)
        if server_key is None:
            result.lines.append(line)
            result.local_only.append(line)
            continue
        new_line = format_authorized_key(server_key)
        if new_line != line:
            result.updated += 1
        result.lines.append(new_line)

    for key in server_keys:
        key_part = extract_key_part(key.key)
        if key_part not in seen:
            seen.add(key_part)
            result.lines.append(format_authorized_key(key))
            result.added += 1

    return result


def describe_local_key(line: str) -> str:
    parts = line.split()
    return " ".join(parts[2:]) if len(parts) >= 3 else "local key"


def summarize_merge(result: MergeResult, path: Path, color: bool = True) -> list[str]:
    """Human-readable report lines for a completed ``keys --write``."""
    if result.forced:
        return [
            f"Wrote {result.total} keys to {path} (overwriting {result.existing} existing keys)"
        ]

    if result.added:
        message = f"Added {result.added} new keys to {path} (now {result.total} total keys)"
        if result.updated:
            message += f" and updated comments for {result.updated} existing keys"
    else:
        message = f"Server keys are already present locally at {path} ({result.total} total keys)"
        if result.updated:
            message += f" but updated comments for {result.updated} keys"
    messages = [message]

    if result.local_only:
        count = paint(str(len(result.local_only)), YELLOW, BOLD, enabled=color)
        force = paint("--force", YELLOW, BOLD, enabled=color)
        messages.append(f"{count} local keys were not removed (use {force} to remove)")
        if len(result.local_only) <= 3:
            sample = ", ".join(describe_local_key(line) for line in result.local_only)
        else:
            sample = f"{len(result.local_only)} keys"
        messages.append(f"   Keys that would be removed: {paint(sample, YELLOW, enabled=color)}")
    return messages


# ─── File writers ─────────────────────────────────────────────────────────────


def write_authorized_keys(
    path: Path, server_keys: Sequence[PublicSSHKey], force: bool = False
) -> MergeResult:
    """Merge ``server_keys`` into the authorized_keys file at ``path``.

    Raises:
        OSError: The file or its parent directory cannot be read or written.
    """
    existing_text = path.read_text() if path.exists() else ""
    result = merge_authorized_keys(existing_text, server_keys, force)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(result.render())
    return result


def write_known_hosts(path: Path, known_hosts: Sequence[KnownHost]) -> int:
    """Replace the file at ``path`` with the server's known_hosts lines.

    Returns the number of lines written.
    """
    content = format_known_hosts_for_pipe(known_hosts)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content + "\n" if content else "")
    return content.count("\n") + 1 if content else 0
