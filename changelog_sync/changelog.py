"""
Changelog data model and GitBook page formatting.

The changelog artifact is produced by an upstream extraction step as
JSON of the form ``{"versions": [{...}, ...]}``, newest version first.
"""

import html
import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional

DEFAULT_PAGE_ID = "changelog"
SUMMARY_PAGE_ID = "changelog"
LATEST_RELEASES_COUNT = 5


def _string_list(data: dict, key: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list, got {type(value).__name__}")
    return [str(item) for item in value]


@dataclass
class ChangelogVersion:
    """Release notes of a single version."""
    
    version: str
    date: str
    page_id: Optional[str] = None
    breaking: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    fixes: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    highlights: list[str] = field(default_factory=list)
    
    @classmethod
    def from_dict(cls, data: dict) -> "ChangelogVersion":
        """
        Create ChangelogVersion from an entry of the extracted JSON.
        
        Raises:
            ValueError: If version or date is missing, or date is not ISO-8601.
        """
        if not isinstance(data, dict):
            raise ValueError("Changelog version entry must be an object")
        
        version = data.get("version")
        if not version:
            raise ValueError("Changelog version entry is missing 'version'")
        
        release_date = data.get("date")
        if not release_date:
            raise ValueError(f"Version {version} is missing 'date'")
        try:
            datetime.fromisoformat(str(release_date))
        except ValueError:
            raise ValueError(
                f"Version {version} has a non ISO-8601 date: {release_date!r}"
            ) from None
        
        return cls(
            version=str(version),
            date=str(release_date),
            page_id=data.get("pageId") or None,
            breaking=_string_list(data, "breaking"),
            features=_string_list(data, "features"),
            fixes=_string_list(data, "fixes"),
            improvements=_string_list(data, "improvements"),
            highlights=_string_list(data, "highlights"),
        )
    
    @property
    def target_page_id(self) -> str:
        """GitBook page this version is written to."""
        return self.page_id or DEFAULT_PAGE_ID
    
    @property
    def slug(self) -> str:
        """
        Relative link target of the version page.
        
        Examples:
            "1.2.0" -> "changelog-1-2-0"
            "2.0.0-beta.1" -> "changelog-2-0-0-beta-1"
        """
        return f"changelog-{self.version.replace('.', '-')}"
    
    @property
    def year(self) -> str:
        """Year bucket of the release date."""
        return self.date.split("-")[0]


@dataclass
class ChangelogDataset:
    """All released versions, ordered newest first by the extractor."""
    
    versions: list[ChangelogVersion] = field(default_factory=list)
    
    @classmethod
    def from_dict(cls, data: dict) -> "ChangelogDataset":
        """Create ChangelogDataset from the decoded artifact."""
        if not isinstance(data, dict):
            raise ValueError("Changelog data must be a JSON object")
        
        entries = data.get("versions") or []
        if not isinstance(entries, list):
            raise ValueError("'versions' must be a list")
        
        versions = [ChangelogVersion.from_dict(entry) for entry in entries]
        
        seen = set()
        for version in versions:
            if version.version in seen:
                raise ValueError(f"Duplicate changelog version: {version.version}")
            seen.add(version.version)
        
        return cls(versions=versions)
    
    @classmethod
    def load(cls, path: Path) -> "ChangelogDataset":
        """Read and validate the extracted changelog JSON at *path*."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)
    
    def get(self, version: str) -> Optional[ChangelogVersion]:
        """Find a version by its identifier."""
        for entry in self.versions:
            if entry.version == version:
                return entry
        return None
    
    def years(self) -> list[str]:
        """Distinct release years in order of first appearance."""
        return list(dict.fromkeys(v.year for v in self.versions))


_CODE_SPAN = re.compile(r"(`+[^`]*`+)")


def _escape_html(text: str) -> str:
    """Escape HTML outside code spans so text like List<String> survives conversion."""
    parts = _CODE_SPAN.split(text)
    return "".join(
        part if part.startswith("`") else html.escape(part, quote=False)
        for part in parts
    )


def _bullets(items: list[str]) -> list[str]:
    return [f"- {_escape_html(item)}" for item in items]


def format_version_page(version: ChangelogVersion) -> str:
    """Render the GitBook page of a single version."""
    lines = [
        f"# Changelog - {version.version}",
        "",
        f"**Release Date:** {version.date}",
        "",
    ]
    
    if version.breaking:
        lines.append('{% hint style="danger" %}')
        lines.append("💥 **Breaking Changes**")
        lines.append("")
        lines.extend(_bullets(version.breaking))
        lines.append("{% endhint %}")
        lines.append("")
    
    sections = [
        ("## ✨ New Features", version.features),
        ("## 🐛 Bug Fixes", version.fixes),
        ("## 🔧 Improvements", version.improvements),
    ]
    for heading, items in sections:
        if not items:
            continue
        lines.append(heading)
        lines.append("")
        lines.extend(_bullets(items))
        lines.append("")
    
    return "\n".join(lines)


def format_summary_page(dataset: ChangelogDataset, today: Optional[date] = None) -> str:
    """
    Render the main changelog page.
    
    Latest releases are the first entries of the dataset; no date sort
    is applied. The all-versions index has one tab per year, in order of
    first appearance.
    """
    today = today or datetime.now(timezone.utc).date()
    
    lines = [
        "# Changelog",
        "",
        f"Last updated: {today.isoformat()}",
        "",
        "## Latest Releases",
        "",
    ]
    
    for version in dataset.versions[:LATEST_RELEASES_COUNT]:
        lines.append(f"### [{version.version}](./{version.slug})")
        lines.append(f"*Released: {version.date}*")
        lines.append("")
        
        if version.highlights:
            lines.append("**Highlights:**")
            lines.extend(_bullets(version.highlights))
            lines.append("")
    
    lines.append("")
    lines.append("## All Versions")
    lines.append("")
    lines.append("{% tabs %}")
    
    for year in dataset.years():
        lines.append(f'{{% tab title="{year}" %}}')
        for version in dataset.versions:
            if version.year == year:
                lines.append(f"- [{version.version}](./{version.slug}) - {version.date}")
        lines.append("{% endtab %}")
        lines.append("")
    
    lines.append("{% endtabs %}")
    lines.append("")
    
    return "\n".join(lines)
