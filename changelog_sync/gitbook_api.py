"""
GitBook API wrapper for the sync system.

Provides a small async interface to GitBook's content API:
- Page updates with bearer authentication
- Markdown to GitBook Markdown conversion
- Error handling
"""

from typing import Any, Optional

import httpx
from rich.console import Console

from changelog_sync.config import Config
from changelog_sync.errors import SyncError
from changelog_sync.markdown_converter import MarkdownConverter

console = Console()


class GitBookAPI:
    """
    Wrapper around the GitBook content API.
    
    Handles:
    - Authentication
    - Content conversion before upload
    - Error handling (no retries: a failed update aborts the sync)
    """
    
    def __init__(
        self,
        config: Config,
        converter: Optional[MarkdownConverter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the GitBook API client.
        
        Args:
            config: Configuration instance with GitBook credentials.
            converter: Converter applied to page content before upload.
            transport: Optional httpx transport, used by tests.
        """
        self.config = config
        self.converter = converter or MarkdownConverter()
        self._transport = transport
        self._request_count = 0
    
    def page_url(self, page_id: str) -> str:
        """Content API URL of a page in the configured space."""
        return (
            f"{self.config.gitbook_api_url}/spaces/{self.config.gitbook_space_id}"
            f"/content/pages/{page_id}"
        )
    
    async def update_page(self, page_id: str, content: str) -> dict[str, Any]:
        """
        Replace the content of a GitBook page.
        
        Args:
            page_id: Target page ID.
            content: Page body as Markdown.
        
        Returns:
            Decoded JSON response from GitBook.
        
        Raises:
            SyncError: If the request fails or GitBook rejects it.
        """
        body = {
            "document": {
                "nodes": self.converter.convert(content),
            }
        }
        headers = {
            "Authorization": f"Bearer {self.config.gitbook_api_token}",
            "Content-Type": "application/json",
        }
        
        self._request_count += 1
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.patch(self.page_url(page_id), json=body, headers=headers)
        except httpx.HTTPError as e:
            console.print(f"[red]GitBook request for page {page_id} failed: {e}[/red]")
            raise SyncError(f"GitBook API request failed: {e}") from e
        
        if not response.is_success:
            raise SyncError(
                f"GitBook API error: {response.reason_phrase}",
                status_code=response.status_code,
            )
        
        if not response.content:
            return {}
        return response.json()
    
    @property
    def request_count(self) -> int:
        """Number of API requests made."""
        return self._request_count
