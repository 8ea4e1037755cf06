"""Tests for push event parsing and changelog change detection."""

import pytest

from changelog_sync.change_detector import (
    ChangeType,
    CommitRecord,
    PushEvent,
    has_changelog_changes,
    is_changelog_path,
    is_primary_branch,
)


def _event(*commits, ref="refs/heads/main"):
    return PushEvent.from_payload({"ref": ref, "commits": list(commits)})


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def test_from_payload_parses_commits():
    event = _event({"modified": ["a.py"], "added": ["b.py"]})
    assert event.ref == "refs/heads/main"
    assert event.commits == (CommitRecord(modified=frozenset({"a.py"}), added=frozenset({"b.py"})),)


def test_from_payload_defaults():
    event = PushEvent.from_payload({})
    assert event.ref == ""
    assert event.commits == ()


def test_missing_path_lists_are_empty():
    commit = CommitRecord.from_payload({"id": "abc"})
    assert commit.files == []


def test_from_payload_rejects_non_object():
    with pytest.raises(ValueError):
        PushEvent.from_payload(["not", "a", "dict"])


def test_from_payload_rejects_non_list_commits():
    with pytest.raises(ValueError):
        PushEvent.from_payload({"ref": "refs/heads/main", "commits": "oops"})


def test_commit_files_are_tagged():
    commit = CommitRecord.from_payload({"modified": ["m.md"], "added": ["a.md"]})
    assert [(f.path, f.change_type) for f in commit.files] == [
        ("a.md", ChangeType.ADDED),
        ("m.md", ChangeType.MODIFIED),
    ]


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("path", [
    "CHANGELOG.md",
    "docs/changelog/2.0.md",
    "packages/core/CHANGELOG.rst",
    "my-changelog.txt",
])
def test_changelog_paths(path):
    assert is_changelog_path(path) is True


@pytest.mark.parametrize("path", ["README.md", "Changelog.md", "src/change_log.py"])
def test_non_changelog_paths(path):
    """Matching is case-sensitive on the two marker spellings."""
    assert is_changelog_path(path) is False


def test_modified_changelog_detected():
    assert has_changelog_changes(_event({"modified": ["CHANGELOG.md"], "added": []})) is True


def test_added_changelog_detected():
    assert has_changelog_changes(_event({"modified": [], "added": ["docs/changelog.md"]})) is True


def test_changelog_in_later_commit_detected():
    event = _event(
        {"modified": ["README.md"], "added": []},
        {"modified": [], "added": ["src/app.py"]},
        {"modified": ["CHANGELOG.md"], "added": []},
    )
    assert has_changelog_changes(event) is True


def test_unrelated_changes_not_detected():
    assert has_changelog_changes(_event({"modified": ["README.md"], "added": ["src/x.py"]})) is False


def test_empty_commit_list_not_detected():
    assert has_changelog_changes(_event()) is False


def test_removed_files_are_ignored():
    assert has_changelog_changes(_event({"removed": ["CHANGELOG.md"]})) is False


# ---------------------------------------------------------------------------
# Branch gate
# ---------------------------------------------------------------------------


def test_primary_branch_exact_match():
    assert is_primary_branch(_event(), "refs/heads/main") is True


@pytest.mark.parametrize("ref", ["refs/heads/feature-x", "refs/heads/main2", "main", "refs/tags/main"])
def test_other_refs_are_not_primary(ref):
    assert is_primary_branch(_event(ref=ref), "refs/heads/main") is False
