#!/usr/bin/env python
"""
Hosts command - verify and manage trusted SSH host keys.
"""

from __future__ import annotations

from typing import Optional

from rich.markup import escape

from hostlink.cli.formatting.output import ConsoleOutput
from hostlink.config.defaults import DEFAULT_SSH_PORT
from hostlink.context import HostlinkContext
from hostlink.trust import FingerprintStatus, HostIdentity


async def verify(
    host: str,
    port: int = DEFAULT_SSH_PORT,
    accept: bool = False,
    context: Optional[HostlinkContext] = None,
    console: Optional[ConsoleOutput] = None,
) -> int:
    """Fetch and classify a host key. With ``accept``, trust a NEW or CHANGED key."""
    console = console or ConsoleOutput()
    context = context or HostlinkContext.create()
    identity = HostIdentity.of(host, port)
    label = escape(identity.key)

    result = await context.verifier.verify(host, port)
    console.print_fingerprint(identity.key, result)

    if result.status is FingerprintStatus.ERROR:
        return 1
    if result.status is FingerprintStatus.MATCH:
        return 0
    if result.status is FingerprintStatus.CHANGED:
        console.print_warning(
            "The host key has changed. This could indicate a man-in-the-middle attack."
        )
    if not accept:
        console.print("[dim]Re-run with --accept to trust this key[/dim]")
        return 2 if result.status is FingerprintStatus.CHANGED else 0

    context.verifier.accept(result, host, port)
    console.print_success(f"Trusted {label} ({result.fingerprint})")
    return 0


def run(
    action: str = "list",
    host: Optional[str] = None,
    port: int = DEFAULT_SSH_PORT,
    context: Optional[HostlinkContext] = None,
    console: Optional[ConsoleOutput] = None,
) -> int:
    """Run the synchronous hosts subcommands (list, show, remove, clear)."""
    console = console or ConsoleOutput()
    context = context or HostlinkContext.create()
    store = context.store

    if action == "list":
        records = store.get_all()
        if not records:
            console.print("[dim]No known hosts[/dim]")
            return 0
        console.print_known_hosts(records)
        return 0

    elif action in ("show", "remove"):
        if not host:
            console.print(f"[yellow]Usage: hostlink hosts {action} <host> [--port N][/yellow]")
            return 1
        identity = HostIdentity.of(host, port)
        label = escape(identity.key)
        if action == "show":
            record = store.get(identity)
            if record is None:
                console.print_info(f"{label} is not a known host")
                return 1
            console.print_known_hosts([record])
            return 0
        if context.verifier.forget(host, port):
            console.print_success(f"Removed {label}")
            return 0
        console.print_info(f"{label} was not a known host")
        return 1

    elif action == "clear":
        count = len(store)
        store.clear()
        console.print_success(f"Cleared {count} known hosts")
        return 0

    console.print_error(f"Unknown hosts action: {action}")
    return 1
