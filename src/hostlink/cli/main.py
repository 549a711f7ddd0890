#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from hostlink.config.defaults import DEFAULT_SSH_PORT


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostlink",
        description="hostlink - file-transfer sessions and SSH host key trust",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # --- hosts ---
    hosts_p = subparsers.add_parser("hosts", help="Verify and manage trusted host keys")
    hosts_sub = hosts_p.add_subparsers(dest="hosts_action")

    verify_p = hosts_sub.add_parser("verify", help="Fetch and classify a host key")
    verify_p.add_argument("host", help="Host name or address")
    verify_p.add_argument("--port", "-p", type=int, default=DEFAULT_SSH_PORT, help="SSH port")
    verify_p.add_argument("--accept", action="store_true", help="Trust a new or changed key")

    hosts_sub.add_parser("list", help="List known hosts")

    show_p = hosts_sub.add_parser("show", help="Show one known host")
    show_p.add_argument("host")
    show_p.add_argument("--port", "-p", type=int, default=DEFAULT_SSH_PORT)

    remove_p = hosts_sub.add_parser("remove", help="Forget a host key")
    remove_p.add_argument("host")
    remove_p.add_argument("--port", "-p", type=int, default=DEFAULT_SSH_PORT)

    hosts_sub.add_parser("clear", help="Forget all host keys")

    # --- ftp ---
    ftp_p = subparsers.add_parser("ftp", help="One-shot FTP/FTPS file operations")
    ftp_p.add_argument("action", choices=["ls", "cat", "get", "put", "mkdir", "rm"])
    ftp_p.add_argument("host", help="Server host")
    ftp_p.add_argument("remote_path", nargs="?", default="/", help="Remote path")
    ftp_p.add_argument("--user", "-u", required=True, help="Username")
    ftp_p.add_argument("--password", "-P", help="Password (or HOSTLINK_FTP_PASSWORD)")
    ftp_p.add_argument("--port", "-p", type=int, help="Port (default 21, or 990 with --secure)")
    ftp_p.add_argument("--secure", action="store_true", help="Use implicit FTPS")
    ftp_p.add_argument("--local", "-l", help="Local file for get/put")

    subparsers.add_parser("version", help="Show version")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    load_dotenv(Path.cwd() / ".env")

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("hostlink").setLevel(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "version":
        from hostlink import __version__
        print(f"hostlink {__version__}")
        return 0

    from hostlink.cli.commands import ftp, hosts

    try:
        if args.command == "hosts":
            if args.hosts_action == "verify":
                return asyncio.run(hosts.verify(args.host, args.port, accept=args.accept))
            elif args.hosts_action in ("list", "show", "remove", "clear"):
                return hosts.run(
                    args.hosts_action,
                    host=getattr(args, "host", None),
                    port=getattr(args, "port", DEFAULT_SSH_PORT),
                )
            parser.parse_args(["hosts", "--help"])
            return 1
        elif args.command == "ftp":
            password = args.password or os.environ.get("HOSTLINK_FTP_PASSWORD")
            return asyncio.run(ftp.run(
                action=args.action,
                host=args.host,
                username=args.user,
                password=password,
                port=args.port,
                secure=args.secure,
                remote_path=args.remote_path,
                local_path=args.local,
            ))
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
