"""
Configuration management for the changelog → GitBook sync.

Loads settings from environment variables and provides
structured configuration for all sync components.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_GITBOOK_API_URL = "https://api.gitbook.com/v1"
DEFAULT_PRIMARY_BRANCH_REF = "refs/heads/main"
DEFAULT_CHANGELOG_FILE = "changelog-extract.json"
DEFAULT_NOTIFICATION_CHANNEL = "#dev-notifications"
DEFAULT_PORT = 3000


@dataclass
class Config:
    """
    Central configuration for the sync system.
    
    Built once at startup and handed to every component.
    All secrets are loaded from env vars - never hardcoded.
    """
    
    # GitBook settings
    gitbook_api_token: str
    gitbook_space_id: str
    gitbook_api_url: str = DEFAULT_GITBOOK_API_URL
    
    # GitHub webhook settings
    webhook_secret: Optional[str] = None
    primary_branch_ref: str = DEFAULT_PRIMARY_BRANCH_REF
    
    # Notifications
    slack_webhook_url: Optional[str] = None
    notification_channel: str = DEFAULT_NOTIFICATION_CHANNEL
    
    # Server
    port: int = DEFAULT_PORT
    
    # Paths
    repo_root: Path = field(default_factory=lambda: Path.cwd())
    changelog_path: str = DEFAULT_CHANGELOG_FILE
    
    # Sync behavior
    debug: bool = False
    dry_run: bool = False
    
    @property
    def changelog_file(self) -> Path:
        """Path to the extracted changelog JSON."""
        path = Path(self.changelog_path)
        if path.is_absolute():
            return path
        return self.repo_root / path
    
    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "Config":
        """
        Load configuration from environment variables.
        
        Args:
            env_file: Optional path to .env file. If not provided,
                     looks for .env in current directory.
        
        Returns:
            Configured Config instance.
        
        Raises:
            ValueError: If required environment variables are missing
                or malformed.
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()
        
        # Required variables
        gitbook_api_token = os.getenv("GITBOOK_API_TOKEN")
        if not gitbook_api_token:
            raise ValueError(
                "GITBOOK_API_TOKEN environment variable is required.\n"
                "Create a token at https://app.gitbook.com/account/developer"
            )
        
        gitbook_space_id = os.getenv("GITBOOK_SPACE_ID")
        if not gitbook_space_id:
            raise ValueError(
                "GITBOOK_SPACE_ID environment variable is required.\n"
                "This is the ID of the GitBook space holding the changelog."
            )
        
        port_str = os.getenv("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_str)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {port_str!r}") from None
        
        repo_root_str = os.getenv("REPO_ROOT")
        repo_root = Path(repo_root_str) if repo_root_str else Path.cwd()
        
        return cls(
            gitbook_api_token=gitbook_api_token,
            gitbook_space_id=gitbook_space_id,
            gitbook_api_url=os.getenv("GITBOOK_API_URL", DEFAULT_GITBOOK_API_URL).rstrip("/"),
            webhook_secret=os.getenv("GITHUB_WEBHOOK_SECRET") or None,
            primary_branch_ref=os.getenv("PRIMARY_BRANCH_REF", DEFAULT_PRIMARY_BRANCH_REF),
            slack_webhook_url=os.getenv("SLACK_WEBHOOK_URL") or None,
            notification_channel=os.getenv("SLACK_CHANNEL", DEFAULT_NOTIFICATION_CHANNEL),
            port=port,
            repo_root=repo_root,
            changelog_path=os.getenv("CHANGELOG_FILE", DEFAULT_CHANGELOG_FILE),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            dry_run=os.getenv("DRY_RUN", "false").lower() == "true",
        )
    
    def require_webhook_secret(self) -> str:
        """
        Return the webhook secret, failing loudly if it is not set.
        
        The receiver refuses to start without one.
        """
        if not self.webhook_secret:
            raise ValueError(
                "GITHUB_WEBHOOK_SECRET environment variable is required.\n"
                "Use the same value as the secret of the GitHub webhook."
            )
        return self.webhook_secret
    
    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.repo_root, str):
            self.repo_root = Path(self.repo_root)
