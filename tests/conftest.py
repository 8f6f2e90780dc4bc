"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from semver_release.models import CommitRecord, TagRecord
from semver_release.rules import ReleaseRuleSet, validate_release_rules

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """A timestamp ``minutes`` after a fixed epoch."""
    return EPOCH + timedelta(minutes=minutes)


def make_commit(
    message: str, minutes: int, commit_hash: str | None = None
) -> CommitRecord:
    return CommitRecord(
        hash=commit_hash or f"{minutes:07d}{'a' * 33}",
        message=message,
        timestamp=at(minutes),
    )


def make_tag(name: str, minutes: int, target: str = "deadbeef") -> TagRecord:
    return TagRecord(name=name, target=target, tagger_timestamp=at(minutes))


class FakeRepository:
    """In-memory stand-in for GitRepository.

    ``history`` is given oldest first, as it reads naturally in tests, and
    returned newest first like ``git log``.
    """

    def __init__(
        self,
        history: list[CommitRecord] | None = None,
        tags: list[TagRecord] | None = None,
    ) -> None:
        self.history = list(history or [])
        self.tag_records = list(tags or [])
        self.log_calls = 0

    def tags(self) -> list[TagRecord]:
        return list(self.tag_records)

    def head(self) -> CommitRecord | None:
        return self.history[-1] if self.history else None

    def log(self) -> list[CommitRecord]:
        self.log_calls += 1
        return list(reversed(self.history))


@pytest.fixture
def default_rules() -> ReleaseRuleSet:
    """feat → minor, fix → patch."""
    return validate_release_rules(
        {
            "releaseRules": [
                {"type": "feat", "release": "minor"},
                {"type": "fix", "release": "patch"},
            ]
        }
    )


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """A valid JSON release-rule document on disk."""
    path = tmp_path / "rules.json"
    path.write_text(
        '{"releaseRules": ['
        '{"type": "feat", "release": "minor"}, '
        '{"type": "fix", "release": "patch"}, '
        '{"type": "perf", "release": "patch"}]}'
    )
    return path
