"""
Main sync engine for changelog → GitBook synchronization.

Orchestrates:
- Loading the extracted changelog data
- Page rendering per version
- Summary page rendering
- GitBook page updates
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.table import Table

from changelog_sync.changelog import (
    SUMMARY_PAGE_ID,
    ChangelogDataset,
    format_summary_page,
    format_version_page,
)
from changelog_sync.config import Config
from changelog_sync.errors import SyncError
from changelog_sync.gitbook_api import GitBookAPI

console = Console()


class SyncOutcome(Enum):
    """Final state of a sync run."""
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class SyncResult:
    """Result of a sync operation."""
    
    outcome: SyncOutcome
    error: Optional[str] = None
    pages_updated: list[str] = field(default_factory=list)
    
    @property
    def success(self) -> bool:
        """Check if sync was successful."""
        return self.outcome is SyncOutcome.SUCCESS


class SyncEngine:
    """
    Orchestrator for changelog → GitBook synchronization.
    
    Performs a sync in order:
    1. Load the extracted changelog JSON
    2. Render and upload one page per version
    3. Render and upload the summary page
    
    Updates are sequential. The first failure aborts the run; pages
    already updated stay updated and nothing is retried.
    """
    
    def __init__(self, config: Config, api: Optional[GitBookAPI] = None):
        """
        Initialize sync engine.
        
        Args:
            config: Configuration instance.
            api: GitBook client. Built from config when omitted.
        """
        self.config = config
        self.api = api or GitBookAPI(config)
    
    def load_dataset(self) -> ChangelogDataset:
        """
        Load the extracted changelog data.
        
        Raises:
            SyncError: If the file is missing, not JSON, or malformed.
        """
        path = self.config.changelog_file
        try:
            return ChangelogDataset.load(path)
        except FileNotFoundError:
            raise SyncError(f"Changelog data not found: {path}") from None
        except json.JSONDecodeError as e:
            raise SyncError(f"Changelog data is not valid JSON ({path}): {e}") from e
        except ValueError as e:
            raise SyncError(f"Invalid changelog data ({path}): {e}") from e
        except OSError as e:
            raise SyncError(f"Could not read changelog data ({path}): {e}") from e
    
    async def sync(self) -> SyncResult:
        """
        Perform a full synchronization.
        
        Returns:
            SyncResult describing the updated pages.
        
        Raises:
            SyncError: On the first failure; remaining pages are skipped.
        """
        console.print("\n[bold blue]📚 Syncing changelog to GitBook...[/bold blue]\n")
        
        dataset = self.load_dataset()
        result = SyncResult(outcome=SyncOutcome.SUCCESS)
        
        try:
            for version in dataset.versions:
                console.print(f"  [cyan]📝 Updating {version.version}...[/cyan]")
                await self._update_page(version.target_page_id, format_version_page(version))
                result.pages_updated.append(version.version)
                console.print(f"  [green]✅ Updated {version.version}[/green]")
            
            await self._update_page(SUMMARY_PAGE_ID, format_summary_page(dataset))
            result.pages_updated.append(SUMMARY_PAGE_ID)
        except SyncError:
            raise
        except Exception as e:
            raise SyncError(f"Changelog sync failed: {e}") from e
        
        console.print("[green]🎉 Changelog sync completed successfully![/green]")
        self._print_summary(result)
        
        return result
    
    async def _update_page(self, page_id: str, content: str) -> None:
        """Upload a page, or only report it in dry-run mode."""
        if self.config.dry_run:
            console.print(f"  [dim]Dry run: would update page '{page_id}' ({len(content)} chars)[/dim]")
            return
        await self.api.update_page(page_id, content)
    
    def render_page(self, version_id: str) -> Optional[str]:
        """
        Render one page without uploading anything.
        
        Args:
            version_id: A version identifier, or "summary" for the main page.
        
        Returns:
            The rendered Markdown, or None if the version is unknown.
        """
        dataset = self.load_dataset()
        if version_id == "summary":
            return format_summary_page(dataset)
        
        version = dataset.get(version_id)
        if version is None:
            return None
        return format_version_page(version)
    
    def _print_summary(self, result: SyncResult) -> None:
        """Print sync summary."""
        table = Table(show_header=False, box=None)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")
        
        table.add_row("Pages updated", str(len(result.pages_updated)))
        table.add_row("API requests", str(self.api.request_count))
        table.add_row("Dry run", "✓" if self.config.dry_run else "✗")
        
        console.print(table)
