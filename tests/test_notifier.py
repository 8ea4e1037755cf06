"""Tests for best-effort sync outcome notifications."""

import json

import httpx
import pytest

from changelog_sync.notifier import Notifier
from changelog_sync.sync_engine import SyncOutcome

from tests.conftest import recording_transport


@pytest.mark.asyncio
async def test_success_notification(config):
    transport, requests = recording_transport()
    notifier = Notifier(config, transport=transport)

    assert await notifier.notify(SyncOutcome.SUCCESS) is True

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert str(requests[0].url) == "https://hooks.slack.test/services/T000"
    assert json.loads(requests[0].content) == {
        "text": "✅ GitBook changelog sync completed successfully",
        "channel": "#dev-notifications",
    }


@pytest.mark.asyncio
async def test_failure_notification_includes_error(config):
    transport, requests = recording_transport()
    config.notification_channel = "#releases"
    notifier = Notifier(config, transport=transport)

    await notifier.notify(SyncOutcome.FAILURE, "GitBook API error: Not Found")

    assert json.loads(requests[0].content) == {
        "text": "❌ GitBook sync failed: GitBook API error: Not Found",
        "channel": "#releases",
    }


@pytest.mark.asyncio
async def test_no_endpoint_configured_sends_nothing(config):
    config.slack_webhook_url = None
    transport, requests = recording_transport()

    assert await Notifier(config, transport=transport).notify(SyncOutcome.SUCCESS) is False
    assert requests == []


@pytest.mark.asyncio
async def test_rejected_notification_is_swallowed(config):
    transport, requests = recording_transport(status_code=500)

    assert await Notifier(config, transport=transport).notify(SyncOutcome.FAILURE, "x") is False
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_unreachable_endpoint_is_swallowed(config):
    def handler(request):
        raise httpx.ConnectError("no route to host", request=request)

    notifier = Notifier(config, transport=httpx.MockTransport(handler))

    assert await notifier.notify(SyncOutcome.SUCCESS) is False


@pytest.mark.asyncio
async def test_malformed_endpoint_url_is_swallowed(config):
    config.slack_webhook_url = "http://[::1/hook"
    transport, requests = recording_transport()

    assert await Notifier(config, transport=transport).notify(SyncOutcome.SUCCESS) is False
    assert requests == []
