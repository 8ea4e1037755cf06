"""
Push event parsing and changelog change detection.

Handles:
- Parsing GitHub push payloads
- Primary branch gating
- Detecting whether any commit touched a changelog file
"""

from dataclasses import dataclass, field
from enum import Enum

# Case-sensitive: matches both CHANGELOG.md and docs/changelog/*.md
CHANGELOG_MARKERS = ("CHANGELOG", "changelog")


class ChangeType(Enum):
    """Types of file changes reported in a push."""
    ADDED = "added"
    MODIFIED = "modified"


@dataclass(frozen=True)
class FileChange:
    """Represents a file change within a commit."""
    
    path: str
    change_type: ChangeType
    
    @property
    def is_changelog(self) -> bool:
        """Check if this file looks like a changelog."""
        return is_changelog_path(self.path)


@dataclass(frozen=True)
class CommitRecord:
    """Paths touched by a single commit."""
    
    modified: frozenset[str] = field(default_factory=frozenset)
    added: frozenset[str] = field(default_factory=frozenset)
    
    @classmethod
    def from_payload(cls, commit: dict) -> "CommitRecord":
        """Create CommitRecord from a GitHub commit object."""
        if not isinstance(commit, dict):
            raise ValueError(f"Commit entry must be an object, got {type(commit).__name__}")
        
        return cls(
            modified=frozenset(commit.get("modified") or ()),
            added=frozenset(commit.get("added") or ()),
        )
    
    @property
    def files(self) -> list[FileChange]:
        """All touched files, added first, each group sorted by path."""
        changes = [FileChange(path, ChangeType.ADDED) for path in sorted(self.added)]
        changes.extend(FileChange(path, ChangeType.MODIFIED) for path in sorted(self.modified))
        return changes


@dataclass(frozen=True)
class PushEvent:
    """A GitHub push webhook payload."""
    
    ref: str
    commits: tuple[CommitRecord, ...] = ()
    
    @classmethod
    def from_payload(cls, payload: dict) -> "PushEvent":
        """
        Create PushEvent from a decoded webhook body.
        
        Raises:
            ValueError: If the payload does not have the push event shape.
        """
        if not isinstance(payload, dict):
            raise ValueError("Push payload must be a JSON object")
        
        commits = payload.get("commits") or []
        if not isinstance(commits, list):
            raise ValueError("Push payload 'commits' must be a list")
        
        return cls(
            ref=payload.get("ref") or "",
            commits=tuple(CommitRecord.from_payload(c) for c in commits),
        )


def is_changelog_path(path: str) -> bool:
    """Check if *path* contains one of the changelog markers."""
    return any(marker in path for marker in CHANGELOG_MARKERS)


def is_primary_branch(event: PushEvent, primary_ref: str) -> bool:
    """Check if the push targets the primary branch (exact ref match)."""
    return event.ref == primary_ref


def has_changelog_changes(event: PushEvent) -> bool:
    """
    Check if any commit in the push added or modified a changelog file.
    
    Examples:
        modified CHANGELOG.md -> True
        added docs/changelog/v2.md -> True
        modified README.md -> False
        no commits -> False
    """
    return any(
        change.is_changelog
        for commit in event.commits
        for change in commit.files
    )
