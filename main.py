#!/usr/bin/env python3
"""
SmugMug Client - Command line access to the SmugMug v2 API
==========================================================

Usage:
    python main.py user [NICKNAME]            # Show a user (default: token owner)
    python main.py children [--node ID]       # List child nodes of a node
    python main.py images ALBUM_KEY           # List images in an album
    python main.py download IMAGE_KEY         # Download an image archive
    python main.py clear-upload-keys          # Clear stale album upload keys
    python main.py --help                     # Show help

Credentials come from SMUGMUG_API_KEY, SMUGMUG_API_SECRET and either
SMUGMUG_ACCESS_TOKEN/SMUGMUG_TOKEN_SECRET or a SMUGMUG_AUTH_CACHE file.
"""

import argparse
import asyncio
import hashlib
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.table import Table

from api import ApiClient, RateLimitWindow
from core.errors import RetryPolicy, SmugMugError
from infra.config import ConfigManager, load_credentials
from infra.logging import configure_logging
from resources import (
    Album, Image, Node, NodeTypeFilters, SortDirection, SortMethod, User,
)


# Setup rich console
console = Console()
logger = logging.getLogger("smugmug.main")

CommandFn = Callable[[ApiClient, argparse.Namespace], Awaitable[None]]


async def call_with_retry(command: CommandFn, client: ApiClient, args: argparse.Namespace) -> None:
    """Run a command, retrying the errors RetryPolicy allows."""
    attempt = 0
    while True:
        try:
            await command(client, args)
            return
        except SmugMugError as e:
            if not RetryPolicy.should_retry(e, attempt):
                raise
            delay = RetryPolicy.get_delay(e)
            attempt += 1
            console.print(f"[yellow]{e.message}; retrying in {delay:.0f}s[/yellow]")
            await asyncio.sleep(delay)


def print_rate_limit(window: Optional[RateLimitWindow]) -> None:
    """Print the last rate-limit window the client saw."""
    if window is None or not window.is_valid():
        console.print("[dim]Rate limit: not reported[/dim]")
        return

    parts = []
    if window.num_remaining_requests() is not None:
        parts.append(f"{window.num_remaining_requests()} requests left")
    if window.window_reset_datetime() is not None:
        parts.append(f"resets {window.window_reset_datetime():%Y-%m-%d %H:%M:%S %Z}")
    if window.retry_after_seconds is not None:
        parts.append(f"retry after {window.retry_after_seconds}s")
    console.print(f"[dim]Rate limit: {' | '.join(parts)}[/dim]")


async def resolve_node(client: ApiClient, node_id: Optional[str]) -> Node:
    """The node with ``node_id``, or the token owner's root node."""
    if node_id:
        return await Node.from_id(client, node_id)
    user = await User.authenticated_user_info(client)
    return await user.node()


async def cmd_user(client: ApiClient, args: argparse.Namespace) -> None:
    if args.nickname:
        user = await User.from_id(client, args.nickname)
    else:
        user = await User.authenticated_user_info(client)

    table = Table(title=f"User {user.nick_name}", show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Name", user.name)
    table.add_row("Plan", user.plan or "-")
    table.add_row("Time zone", user.time_zone or "-")
    table.add_row("Images", str(user.image_count))
    table.add_row("Web", user.web_uri or "-")
    table.add_row("Root node", user.node_uri or "-")
    console.print(table)


async def cmd_children(client: ApiClient, args: argparse.Namespace) -> None:
    node = await resolve_node(client, args.node)
    console.print(f"[bold]{node.name or node.node_id}[/bold] [dim]{node.web_uri or ''}[/dim]")

    table = Table()
    table.add_column("Node ID", style="cyan")
    table.add_column("Type")
    table.add_column("Name")
    table.add_column("Album")

    shown = 0
    children = node.children(
        NodeTypeFilters[args.type],
        SortDirection[args.sort_direction],
        SortMethod[args.sort_method],
    )
    async for child in children:
        table.add_row(child.node_id, child.node_type.value, child.name, child.album_id() or "")
        shown += 1
        if args.limit and shown >= args.limit:
            break
    console.print(table)


async def cmd_images(client: ApiClient, args: argparse.Namespace) -> None:
    album = await Album.from_id(client, args.album_key)
    console.print(f"[bold]{album.name}[/bold] [dim]{album.image_count} image(s)[/dim]")

    table = Table()
    table.add_column("Image key", style="cyan")
    table.add_column("File name")
    table.add_column("Format")
    table.add_column("Size", justify="right")
    table.add_column("State")

    shown = 0
    async for image in album.images():
        state = "processing" if image.is_processing else ("hidden" if image.is_hidden else "")
        table.add_row(image.image_key, image.file_name, image.format, str(image.archived_size or ""), state)
        shown += 1
        if args.limit and shown >= args.limit:
            break
    console.print(table)


async def cmd_download(client: ApiClient, args: argparse.Namespace) -> None:
    image = await Image.from_id(client, args.image_key)
    if image.is_processing:
        console.print(f"[yellow]Image {image.image_key} is still processing[/yellow]")
        return

    data = await image.get_archive()

    if image.archived_size is not None and len(data) != image.archived_size:
        raise SmugMugError(f"Size mismatch: got {len(data)} bytes, expected {image.archived_size}")
    if image.archived_md5 and hashlib.md5(data).hexdigest() != image.archived_md5:
        raise SmugMugError(f"MD5 mismatch for {image.file_name}")

    output = Path(args.output) if args.output else Path(image.file_name or image.image_key)
    output.write_bytes(data)
    console.print(f"[green]Downloaded {image.file_name} ({len(data)} bytes) to {output}[/green]")


async def cmd_clear_upload_keys(client: ApiClient, args: argparse.Namespace) -> None:
    now = datetime.now(timezone.utc)
    created_cutoff = now - timedelta(days=args.created_days)
    updated_cutoff = now - timedelta(days=args.updated_days)

    root = await resolve_node(client, args.node)
    matched = 0

    children = root.children(NodeTypeFilters.ALBUM, SortDirection.DESCENDING, SortMethod.ORGANIZER)
    async for child in children:
        album = await child.album()
        if album.upload_key is None:
            continue

        created_expired = album.date_created is not None and album.date_created < created_cutoff
        updated_expired = album.last_updated is not None and album.last_updated < updated_cutoff
        if not (created_expired or updated_expired):
            continue

        console.print(
            f"Album to remove upload key: [bold]{album.name}[/bold] "
            f"images: {album.image_count} key: {album.upload_key}"
        )
        matched += 1
        if args.dry_run:
            continue
        album = await album.clear_upload_key()
        logger.info(f"Cleared upload key from album {album.album_key}")

    verb = "Would clear" if args.dry_run else "Cleared"
    console.print(f"[green]{verb} upload keys on {matched} album(s)[/green]")


COMMANDS = {
    "user": cmd_user,
    "children": cmd_children,
    "images": cmd_images,
    "download": cmd_download,
    "clear-upload-keys": cmd_clear_upload_keys,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SmugMug Client - Command line access to the SmugMug v2 API"
    )
    parser.add_argument(
        "--config", "-c",
        default="smugmug.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--log-level", "-l",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for JSON request logs"
    )
    parser.add_argument(
        "--read-only",
        action="store_true",
        help="Ignore any access token and send unsigned API-key requests"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    user = sub.add_parser("user", help="Show a user")
    user.add_argument("nickname", nargs="?", help="User nickname (default: token owner)")

    children = sub.add_parser("children", help="List child nodes")
    children.add_argument("--node", help="Node ID (default: token owner's root node)")
    children.add_argument("--type", default="ANY", choices=[f.name for f in NodeTypeFilters])
    children.add_argument("--sort-direction", default="DESCENDING", choices=[d.name for d in SortDirection])
    children.add_argument("--sort-method", default="SORT_INDEX", choices=[m.name for m in SortMethod])
    children.add_argument("--limit", type=int, default=0, help="Stop after this many nodes")

    images = sub.add_parser("images", help="List images in an album")
    images.add_argument("album_key")
    images.add_argument("--limit", type=int, default=0, help="Stop after this many images")

    download = sub.add_parser("download", help="Download an image archive")
    download.add_argument("image_key")
    download.add_argument("--output", "-o", help="Output file (default: the image's file name)")

    clear = sub.add_parser("clear-upload-keys", help="Clear upload keys from stale albums")
    clear.add_argument("--node", help="Node ID to scan (default: token owner's root node)")
    clear.add_argument("--created-days", type=int, default=60, help="Clear keys on albums created before this many days ago")
    clear.add_argument("--updated-days", type=int, default=45, help="Clear keys on albums not updated for this many days")
    clear.add_argument("--dry-run", action="store_true", help="Only list the albums")

    return parser


async def run(args: argparse.Namespace) -> None:
    config = ConfigManager(args.config).client_config()
    credentials = load_credentials(read_only=args.read_only)

    async with ApiClient(credentials, config) as client:
        try:
            await call_with_retry(COMMANDS[args.command], client, args)
        finally:
            print_rate_limit(client.last_rate_limit())


def main() -> int:
    """Main entry point."""
    args = build_parser().parse_args()

    # Setup logging
    configure_logging(getattr(logging, args.log_level), log_dir=args.log_dir)

    try:
        asyncio.run(run(args))
        return 0

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except SmugMugError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
