"""Main CLI entry point for feedcache.

Provides command-line interface for inspecting and maintaining the local
feed cache.
"""

import dataclasses
import logging
import sys
import threading
from datetime import datetime
from typing import Any, Callable, Optional

import click
from rich.console import Console
from rich.table import Table

from feedcache.api import HttpxClient, RemoteFeedLoader
from feedcache.cache import policy
from feedcache.cache.config import CacheConfig, get_global_config
from feedcache.cache.loader import LocalFeedLoader
from feedcache.cache.store import FeedStore
from feedcache.result import Failure, Success
from feedcache.stores import create_store

# Global console for Rich output
console = Console()

DEFAULT_WAIT_TIMEOUT = 60.0


def wait_for(
    operation: Callable[[Callable[[Any], None]], None],
    timeout: float = DEFAULT_WAIT_TIMEOUT,
) -> Any:
    """Run an asynchronous operation and block until its completion fires.

    Args:
        operation: Callable receiving the completion to pass along
        timeout: Seconds to wait

    Returns:
        Whatever the completion received

    Raises:
        click.ClickException: If the completion does not fire in time
    """
    done = threading.Event()
    received = []

    def completion(result: Any) -> None:
        received.append(result)
        done.set()

    operation(completion)
    if not done.wait(timeout):
        raise click.ClickException(f"Timed out after {timeout} seconds")
    return received[0]


def retrieve(store: FeedStore) -> Any:
    """Retrieve the cached feed, raising the store error on failure."""
    result = wait_for(store.retrieve)
    if isinstance(result, Failure):
        raise result.error
    return result.value


def get_config(ctx: click.Context) -> CacheConfig:
    """Build the configuration from global settings and CLI overrides."""
    config = get_global_config()
    overrides = {}
    if ctx.obj.get("cache_dir"):
        overrides["cache_dir"] = ctx.obj["cache_dir"]
    if ctx.obj.get("store_type"):
        overrides["store_type"] = ctx.obj["store_type"]
    return dataclasses.replace(config, **overrides) if overrides else config


def format_timestamp(timestamp: Optional[datetime]) -> str:
    if timestamp is None:
        return "N/A"
    return timestamp.strftime("%Y-%m-%d %H:%M:%S")


@click.group()
@click.option(
    "--cache-dir",
    "-C",
    type=click.Path(),
    help="Cache directory (default: ~/.feedcache or FEEDCACHE_DIR env var)",
)
@click.option(
    "--store",
    "store_type",
    type=click.Choice(["json", "sqlite"]),
    help="Store engine (default: json or FEEDCACHE_STORE env var)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, cache_dir, store_type, verbose):
    """feedcache CLI - Inspect and maintain the local feed cache.

    Use --cache-dir/-C to specify the cache directory, or set FEEDCACHE_DIR
    environment variable.
    """
    ctx.ensure_object(dict)
    ctx.obj["cache_dir"] = cache_dir
    ctx.obj["store_type"] = store_type

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


@cli.command("status")
@click.pass_context
def status(ctx):
    """Show the cached feed's timestamp and expiry.

    Example:
        feedcache status
        feedcache --store sqlite status
    """
    try:
        config = get_config(ctx)
        with create_store(config) as store:
            cache = retrieve(store)

        if cache is None:
            console.print("[yellow]No cached feed[/yellow]")
            return

        now = datetime.now()
        valid = policy.validate(cache.timestamp, against=now)
        remaining = policy.cache_age_remaining(cache.timestamp, now)

        table = Table(title="Feed cache")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="white")
        table.add_row("Store", f"{config.store_type} ({config.store_path})")
        table.add_row("Saved", format_timestamp(cache.timestamp))
        table.add_row("Items", str(len(cache.feed)))
        table.add_row("Expires", format_timestamp(policy.expiration_date(cache.timestamp)))
        table.add_row("Remaining", str(remaining) if remaining is not None else "N/A")
        table.add_row("Status", "[green]valid[/green]" if valid else "[red]expired[/red]")
        console.print(table)

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("show")
@click.pass_context
def show(ctx):
    """List the cached items, as the app would load them.

    Expired caches show no items.

    Example:
        feedcache show
    """
    try:
        with create_store(get_config(ctx)) as store:
            loader = LocalFeedLoader(store)
            result = wait_for(loader.load)

        if isinstance(result, Failure):
            raise result.error

        items = result.value
        if not items:
            console.print("[yellow]No items in cache[/yellow]")
            return

        table = Table(title=f"Cached items ({len(items)})")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Description", style="white")
        table.add_column("Location", style="blue")
        table.add_column("Image", style="magenta")

        for item in items:
            desc = item.description or ""
            table.add_row(
                str(item.id),
                (desc[:50] + "...") if len(desc) > 50 else desc,
                item.location or "",
                item.image_url,
            )

        console.print(table)

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("validate")
@click.pass_context
def validate(ctx):
    """Delete the cached feed if it is expired or unreadable.

    Example:
        feedcache validate
    """
    try:
        with create_store(get_config(ctx)) as store:
            before = wait_for(store.retrieve)
            loader = LocalFeedLoader(store)
            loader.validate_cache()
            # The first retrieval queues behind validation's own retrieval,
            # so any deletion it triggers is queued before the second one.
            wait_for(store.retrieve)
            after = retrieve(store)

        if isinstance(before, Success) and before.value is None:
            console.print("[yellow]No cached feed[/yellow]")
        elif after is None and isinstance(before, Failure):
            console.print("[green]✓[/green] Removed unreadable feed cache")
        elif after is None:
            console.print("[green]✓[/green] Removed expired feed cache")
        else:
            console.print(f"[green]✓[/green] Feed cache is valid ({len(after.feed)} items)")

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("clear")
@click.pass_context
def clear(ctx):
    """Delete the cached feed.

    Example:
        feedcache clear
    """
    try:
        with create_store(get_config(ctx)) as store:
            result = wait_for(store.delete_cached_feed)

        if isinstance(result, Failure):
            raise result.error

        console.print("[green]✓[/green] Cleared feed cache")

    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


@cli.command("fetch")
@click.argument("url", required=False)
@click.pass_context
def fetch(ctx, url):
    """Fetch the remote feed and replace the cached one.

    URL defaults to the configured feed_url (FEEDCACHE_FEED_URL).

    Example:
        feedcache fetch https://example.com/feed
    """
    try:
        config = get_config(ctx)
        url = url or config.feed_url
        if not url:
            raise click.UsageError("No feed URL given and none configured")

        with HttpxClient(timeout=config.request_timeout) as client:
            remote = RemoteFeedLoader(url, client)
            result = wait_for(remote.load)

        if isinstance(result, Failure):
            raise result.error

        items = result.value
        with create_store(config) as store:
            loader = LocalFeedLoader(store)
            error = wait_for(lambda completion: loader.save(items, completion))

        if error is not None:
            raise error

        console.print(f"[green]✓[/green] Cached {len(items)} items")

    except click.UsageError:
        raise
    except Exception as e:
        console.print(f"[red]✗[/red] Error: {e}", style="red")
        sys.exit(1)


if __name__ == "__main__":
    cli()
