"""Click CLI for imgcache — fetch images through the cache and manage it."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imgcache.cache.manager import ImageCache
from imgcache.cache.stats import CacheStats
from imgcache.config.hierarchy import load_config_hierarchy
from imgcache.config.schema import CacheSettings

console = Console()
error_console = Console(stderr=True)

_cache_dir_option = click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Cache directory (overrides config).",
)


def _resolve_log_level(verbosity: int) -> int:
    """-v/-vv win; otherwise use the configured log_level."""
    if verbosity == 1:
        return logging.INFO
    if verbosity >= 2:
        return logging.DEBUG
    settings = CacheSettings.from_mapping(load_config_hierarchy())
    return logging.getLevelName(settings.log_level)


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level and config."""
    logging.basicConfig(
        level=_resolve_log_level(verbosity),
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _open_cache(cache_dir: str | None, sweep_on_start: bool | None = None) -> ImageCache:
    return ImageCache.from_config(
        cache_dir=cache_dir,
        sweep_on_start=sweep_on_start,
    )


@click.group()
@click.version_option(package_name="imgcache")
def cli() -> None:
    """imgcache — two-tier cache for remote images."""


@cli.command()
@click.argument("url")
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="Write the image here.")
@_cache_dir_option
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fetch(url: str, output: str | None, cache_dir: str | None, verbose: int) -> None:
    """Load URL through the cache (memory → disk → network)."""
    _setup_logging(verbose)

    async def _run() -> tuple[object, CacheStats]:
        cache = _open_cache(cache_dir)
        try:
            img = await cache.load_image(url)
            return img, cache.stats()
        finally:
            await cache.aclose()

    img, stats = asyncio.run(_run())
    if img is None:
        error_console.print(f"[red]Error:[/red] could not load image from {url}")
        sys.exit(1)

    if output:
        img.save(output)
        console.print(f"[green]Written to {output}[/green]")
    else:
        console.print(f"{img.format or 'image'} {img.width}x{img.height} ({img.mode})")

    if verbose >= 1:
        source = "memory" if stats.memory_hits else "disk" if stats.disk_hits else "network"
        error_console.print(f"Served from {source}")


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@_cache_dir_option
def cache_stats(cache_dir: str | None) -> None:
    """Show cache statistics."""
    mgr = _open_cache(cache_dir, sweep_on_start=False)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    stats = mgr.stats()
    table.add_row("Directory", str(mgr.disk.cache_dir) if mgr.disk else "disabled")
    table.add_row("Disk entries", str(stats.disk_entries))
    table.add_row("Disk size (MB)", f"{stats.disk_size_mb:.2f}")
    table.add_row("Memory capacity", str(stats.memory_max_entries))
    table.add_row("Max age (days)", f"{mgr.max_age_seconds / 86400:g}")

    console.print(table)
    mgr.close()


@cache.command("list")
@_cache_dir_option
def cache_list(cache_dir: str | None) -> None:
    """List files in the disk cache, oldest first."""
    mgr = _open_cache(cache_dir, sweep_on_start=False)
    entries = mgr.disk.entries() if mgr.disk else []
    mgr.close()

    if not entries:
        console.print("[yellow]Disk cache is empty.[/yellow]")
        return

    table = Table(title="Disk Cache Entries", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Size (KB)", justify="right")
    table.add_column("Age (h)", justify="right")
    for entry in entries:
        table.add_row(entry.key[:16], f"{entry.size_bytes / 1024:.1f}", f"{entry.age_seconds / 3600:.1f}")
    console.print(table)


@cache.command("sweep")
@click.option("--max-age", type=float, default=None, help="Max age in seconds (default from config).")
@_cache_dir_option
def cache_sweep(max_age: float | None, cache_dir: str | None) -> None:
    """Delete cached files older than the max age."""
    mgr = _open_cache(cache_dir, sweep_on_start=False)
    removed = mgr.sweep_expired(max_age)
    mgr.close()
    console.print(f"[green]Removed {removed} expired file(s).[/green]")


@cache.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
@_cache_dir_option
def cache_clear(cache_dir: str | None) -> None:
    """Clear all cached images."""
    mgr = _open_cache(cache_dir, sweep_on_start=False)
    mgr.clear_cache()
    mgr.close()
    console.print("[green]Cache cleared.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
