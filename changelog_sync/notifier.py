"""
Sync outcome notifications (Slack-compatible incoming webhook).

Delivery is best effort: failures are printed and never raised.
"""

from typing import Optional

import httpx
from rich.console import Console

from changelog_sync.config import Config
from changelog_sync.errors import NotificationError
from changelog_sync.sync_engine import SyncOutcome

console = Console()

SUCCESS_TEXT = "✅ GitBook changelog sync completed successfully"
FAILURE_TEXT = "❌ GitBook sync failed: {error}"


class Notifier:
    """Posts sync outcomes to the configured chat webhook."""
    
    def __init__(self, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport
    
    @staticmethod
    def format_message(outcome: SyncOutcome, error: Optional[str] = None) -> str:
        if outcome is SyncOutcome.SUCCESS:
            return SUCCESS_TEXT
        return FAILURE_TEXT.format(error=error or "unknown error")
    
    async def notify(self, outcome: SyncOutcome, error: Optional[str] = None) -> bool:
        """
        Send a single message describing *outcome*.
        
        Returns:
            True if the endpoint accepted the message, False if no
            endpoint is configured or delivery failed.
        """
        if not self.config.slack_webhook_url:
            return False
        
        payload = {
            "text": self.format_message(outcome, error),
            "channel": self.config.notification_channel,
        }
        
        try:
            await self._deliver(payload)
        except Exception as e:
            console.print(f"[yellow]Warning: Failed to send notification: {e}[/yellow]")
            return False
        
        return True
    
    async def _deliver(self, payload: dict) -> None:
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.post(self.config.slack_webhook_url, json=payload)
        
        if not response.is_success:
            raise NotificationError(
                f"Notification endpoint returned {response.status_code} {response.reason_phrase}"
            )
