"""
GitHub webhook receiver.

Verifies the push signature, filters out pushes that do not touch the
changelog on the primary branch, and starts a sync in the background.
The HTTP response only acknowledges that a sync was started; its
outcome is reported through the notifier.
"""

import asyncio
import json
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from rich.console import Console

from changelog_sync import __version__
from changelog_sync.change_detector import PushEvent, has_changelog_changes, is_primary_branch
from changelog_sync.config import Config
from changelog_sync.errors import AuthenticationError
from changelog_sync.notifier import Notifier
from changelog_sync.signature import SIGNATURE_HEADER, verify_signature
from changelog_sync.sync_engine import SyncEngine, SyncOutcome, SyncResult

console = Console()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def run_sync(engine: SyncEngine, notifier: Notifier) -> SyncResult:
    """
    Run one sync and report its outcome.
    
    Never raises: failures end up in the notification and the log.
    """
    try:
        result = await engine.sync()
    except Exception as e:
        console.print(f"[red]❌ Sync failed: {e}[/red]")
        if engine.config.debug:
            console.print_exception()
        await notifier.notify(SyncOutcome.FAILURE, str(e))
        return SyncResult(outcome=SyncOutcome.FAILURE, error=str(e))
    
    console.print("[green]✅ Changelog sync completed[/green]")
    await notifier.notify(SyncOutcome.SUCCESS)
    return result


def dispatch_sync(app: FastAPI, engine: SyncEngine, notifier: Notifier) -> asyncio.Task:
    """
    Start a sync without waiting for it.
    
    Runs are not serialized or deduplicated: overlapping pushes give
    overlapping runs. The task is kept on app.state until it finishes.
    """
    task = asyncio.create_task(run_sync(engine, notifier))
    app.state.sync_tasks.add(task)
    task.add_done_callback(app.state.sync_tasks.discard)
    return task


def create_app(
    config: Config,
    engine_factory: Callable[[Config], SyncEngine] = SyncEngine,
    notifier: Optional[Notifier] = None,
) -> FastAPI:
    """
    Build the webhook application.
    
    Args:
        config: Configuration instance; must carry a webhook secret.
        engine_factory: Builds a fresh engine for every accepted push.
        notifier: Outcome notifier. Built from config when omitted.
    
    Raises:
        ValueError: If no webhook secret is configured.
    """
    secret = config.require_webhook_secret()
    notifier = notifier or Notifier(config)
    
    app = FastAPI(title="Changelog Sync Webhook", version=__version__)
    app.state.config = config
    app.state.sync_tasks = set()
    
    def authenticate(body: bytes, signature: Optional[str]) -> None:
        if not verify_signature(body, signature, secret):
            raise AuthenticationError("Invalid webhook signature")
    
    @app.post("/webhook/github")
    async def github_webhook(request: Request):
        body = await request.body()
        
        try:
            authenticate(body, request.headers.get(SIGNATURE_HEADER))
        except AuthenticationError as e:
            console.print(f"[yellow]Rejected webhook: {e}[/yellow]")
            return PlainTextResponse("Unauthorized", status_code=401)
        
        try:
            event = PushEvent.from_payload(json.loads(body))
            
            # Only pushes to the primary branch
            if not is_primary_branch(event, config.primary_branch_ref):
                return PlainTextResponse("Ignored non-main branch")
            
            if not has_changelog_changes(event):
                return PlainTextResponse("No changelog changes detected")
            
            console.print("[cyan]📝 Changelog changes detected, starting sync...[/cyan]")
            dispatch_sync(app, engine_factory(config), notifier)
        except Exception as e:
            console.print(f"[red]❌ Webhook processing failed: {e}[/red]")
            return JSONResponse({"error": "Internal server error"}, status_code=500)
        
        return {
            "message": "Changelog sync initiated",
            "timestamp": _timestamp(),
        }
    
    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "timestamp": _timestamp(),
        }
    
    return app
