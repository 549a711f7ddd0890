#!/usr/bin/env python
"""
FTP command - one-shot file operations against an FTP/FTPS server.
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Optional

from rich.markup import escape

from hostlink.cli.formatting.output import ConsoleOutput
from hostlink.context import HostlinkContext
from hostlink.errors import HostlinkError
from hostlink.sessions import ConnectConfig

CLI_CONNECTION_ID = "cli"


async def run(
    action: str,
    host: str,
    username: str,
    password: Optional[str] = None,
    port: Optional[int] = None,
    secure: bool = False,
    remote_path: str = "/",
    local_path: Optional[str] = None,
    context: Optional[HostlinkContext] = None,
    console: Optional[ConsoleOutput] = None,
) -> int:
    """Connect, run one action (ls, cat, get, put, mkdir, rm), disconnect."""
    console = console or ConsoleOutput()
    context = context or HostlinkContext.create()
    files = context.files

    try:
        config = ConnectConfig.for_protocol(
            "ftps" if secure else "ftp",
            host=host,
            username=username,
            password=password,
            port=port,
        )
        await context.registry.connect(CLI_CONNECTION_ID, config)

        if action == "ls":
            entries = await files.list_files(CLI_CONNECTION_ID, remote_path)
            console.print_listing(remote_path, entries)
        elif action == "cat":
            console.print(await files.read_file(CLI_CONNECTION_ID, remote_path), markup=False)
        elif action == "get":
            target = Path(local_path or posixpath.basename(remote_path) or "download")
            size = await files.download_file(CLI_CONNECTION_ID, remote_path, target)
            console.print_success(f"Downloaded {escape(remote_path)} -> {escape(str(target))} ({size} bytes)")
        elif action == "put":
            if not local_path:
                console.print("[yellow]Usage: hostlink ftp put <host> <remote> --local FILE[/yellow]")
                return 1
            size = await files.upload_file(CLI_CONNECTION_ID, Path(local_path), remote_path)
            console.print_success(f"Uploaded {escape(local_path)} -> {escape(remote_path)} ({size} bytes)")
        elif action == "mkdir":
            await files.create_directory(CLI_CONNECTION_ID, remote_path)
            console.print_success(f"Created {escape(remote_path)}")
        elif action == "rm":
            await files.delete_file(CLI_CONNECTION_ID, remote_path)
            console.print_success(f"Deleted {escape(remote_path)}")
        else:
            console.print_error(f"Unknown ftp action: {action}")
            return 1
        return 0
    except HostlinkError as e:
        console.print_error(str(e))
        return 1
    finally:
        await context.close()
