"""Main CLI entry point and application setup."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import msgspec
from click.exceptions import Exit
from msgspec.structs import asdict
from rich.console import Console
from rich.table import Table

from kvcache import __version__
from kvcache.cache import Cache
from kvcache.config import load_config, parse_options

MISSING = object()


@dataclass
class Context:
    """CLI context that holds shared resources."""

    cache: Cache
    console: Console
    config: dict[str, Any]
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def parse_value(raw: str) -> Any:
    """Interpret a command-line value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


class KVCacheGroup(click.Group):
    """Custom group that reports errors without a traceback."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {e}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=KVCacheGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--driver", help="Override the configured cache driver")
@click.version_option(
    version=__version__, prog_name="kvcache", message="kvcache version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    driver: str | None,
) -> None:
    """Key-value cache with file and database backends.

    Reads and writes entries in the cache selected by the configuration.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)
    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
        if driver:
            config_data["driver"] = driver
        cache = Cache.from_config(config_data)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error initializing cache:[/red] {e}")
        ctx.exit(1)

    ctx.obj = Context(cache=cache, console=console, config=config_data, debug=debug)
    ctx.call_on_close(cache.close)


@cli.command()
@click.argument("key")
@click.pass_context
def get(ctx: click.Context, key: str) -> None:
    """Print the cached value for KEY."""
    value = ctx.obj.cache.get(key, MISSING)
    if value is MISSING:
        ctx.obj.console.print(f"[yellow]No live entry for[/yellow] {key}")
        ctx.exit(1)

    ctx.obj.console.print_json(msgspec.json.encode(value).decode())


@cli.command(name="set")
@click.argument("key")
@click.argument("value")
@click.option("--ttl", type=int, help="Time to live in seconds")
@click.pass_context
def set_value(ctx: click.Context, key: str, value: str, ttl: int | None) -> None:
    """Store VALUE under KEY. VALUE is parsed as JSON when possible."""
    ctx.obj.cache.set(key, parse_value(value), ttl)
    if ttl is not None and ttl <= 0:
        ctx.obj.console.print(
            f"[yellow]TTL {ttl} expires immediately;[/yellow] {key} removed"
        )
        return
    ctx.obj.console.print(f"[green]✓[/green] Stored {key}")


@cli.command()
@click.argument("key")
@click.pass_context
def delete(ctx: click.Context, key: str) -> None:
    """Remove KEY from the cache."""
    ctx.obj.cache.delete(key)
    ctx.obj.console.print(f"[green]✓[/green] Deleted {key}")


@cli.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Remove every entry from the cache."""
    if not yes:
        click.confirm(
            f"Clear all entries from the {ctx.obj.cache.driver} cache?", abort=True
        )
    ctx.obj.cache.clear()
    ctx.obj.console.print("[green]✓[/green] Cache cleared")


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show the active driver and its options."""
    driver = ctx.obj.cache.driver
    options = asdict(parse_options(driver, ctx.obj.config["drivers"][driver]))
    if options.get("password"):
        options["password"] = "********"

    table = Table(title=f"{driver} cache", show_header=True)
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    for name, value in options.items():
        table.add_row(name, "" if value is None else str(value))

    ctx.obj.console.print(table)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
