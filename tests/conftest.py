import json

import httpx
import pytest

from changelog_sync.config import Config

WEBHOOK_SECRET = "test-webhook-secret"

SAMPLE_VERSIONS = [
    {
        "version": "2.0.0",
        "date": "2024-01-01",
        "pageId": "page-2-0-0",
        "breaking": ["Dropped Python 3.8 support"],
        "features": ["Async client", "Streaming uploads"],
        "fixes": ["Fixed retry loop"],
        "improvements": ["Faster startup"],
        "highlights": ["Async everywhere"],
    },
    {
        "version": "1.1.0",
        "date": "2023-06-01",
        "features": ["Dark mode"],
    },
]


@pytest.fixture
def config(tmp_path):
    return Config(
        gitbook_api_token="gb-test-token",
        gitbook_space_id="space-123",
        webhook_secret=WEBHOOK_SECRET,
        slack_webhook_url="https://hooks.slack.test/services/T000",
        repo_root=tmp_path,
    )


@pytest.fixture
def write_changelog(config):
    """Write a changelog artifact where the config expects it."""

    def _write(versions):
        config.changelog_file.write_text(json.dumps({"versions": versions}), encoding="utf-8")
        return config.changelog_file

    return _write


def recording_transport(status_code=200, body=None):
    """MockTransport answering every request with *status_code*; returns (transport, requests)."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, json=body if body is not None else {})

    return httpx.MockTransport(handler), requests
