#!/usr/bin/env python3
"""
Changelog → GitBook Sync CLI

Usage:
    python sync.py                  # Run a one-off sync
    python sync.py --dry-run        # Render pages without uploading
    python sync.py serve            # Start the GitHub webhook receiver
    python sync.py preview 1.2.0    # Print the rendered page of a version
    python sync.py preview summary  # Print the rendered summary page
    python sync.py version          # Show version information
"""

import asyncio
import sys

import click
from rich.console import Console

from changelog_sync import __version__
from changelog_sync.config import Config
from changelog_sync.errors import SyncError

console = Console()


def load_config(ctx: click.Context) -> Config:
    """Load configuration and apply CLI overrides, exiting on error."""
    try:
        config = Config.from_env()
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        console.print("\n[dim]Make sure you have created a .env file with your credentials.[/dim]")
        sys.exit(1)
    
    if ctx.obj.get("dry_run"):
        config.dry_run = True
    if ctx.obj.get("debug"):
        config.debug = True
    
    return config


@click.group(invoke_without_command=True)
@click.option("--dry-run", is_flag=True, help="Render pages without uploading")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx, dry_run: bool, debug: bool):
    """
    Changelog → GitBook Sync
    
    Publishes the extracted changelog to GitBook, once or on every push.
    """
    ctx.ensure_object(dict)
    ctx.obj["dry_run"] = dry_run
    ctx.obj["debug"] = debug
    
    # If no subcommand, run sync
    if ctx.invoked_subcommand is None:
        ctx.invoke(sync)


@cli.command()
@click.pass_context
def sync(ctx):
    """Run one synchronization to GitBook."""
    from changelog_sync.notifier import Notifier
    from changelog_sync.sync_engine import SyncEngine
    from changelog_sync.webhook_server import run_sync
    
    config = load_config(ctx)
    
    try:
        result = asyncio.run(run_sync(SyncEngine(config), Notifier(config)))
    except KeyboardInterrupt:
        console.print("\n[yellow]Sync cancelled.[/yellow]")
        sys.exit(130)
    
    # Exit with error code if sync failed
    if not result.success:
        sys.exit(1)


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True, help="Interface to bind")
@click.option("--port", type=int, default=None, help="Port to listen on (default: $PORT or 3000)")
@click.pass_context
def serve(ctx, host: str, port):
    """Start the GitHub webhook receiver."""
    import uvicorn
    
    from changelog_sync.webhook_server import create_app
    
    config = load_config(ctx)
    
    try:
        app = create_app(config)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    
    port = port or config.port
    console.print(f"[bold]🚀 Webhook server running on port {port}[/bold]")
    uvicorn.run(app, host=host, port=port)


@cli.command()
@click.argument("version_id")
@click.option("--converted", is_flag=True, help="Show the document as sent to GitBook")
@click.pass_context
def preview(ctx, version_id: str, converted: bool):
    """Print the rendered GitBook page of VERSION_ID (or 'summary')."""
    from changelog_sync.sync_engine import SyncEngine
    
    config = load_config(ctx)
    engine = SyncEngine(config)
    
    try:
        markdown = engine.render_page(version_id)
    except SyncError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    
    if markdown is None:
        available = [v.version for v in engine.load_dataset().versions] + ["summary"]
        console.print(f"[red]Unknown version:[/red] {version_id}")
        console.print(f"[dim]Available: {', '.join(available)}[/dim]")
        sys.exit(1)
    
    if converted:
        markdown = engine.api.converter.convert(markdown)
    
    click.echo(markdown)


@cli.command()
def version():
    """Show version information."""
    console.print(f"Changelog → GitBook Sync v{__version__}")


def main():
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
