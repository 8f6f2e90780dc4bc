"""Data models for semver-release.

These Pydantic models are the records exchanged between the version-control
collaborator and the version computation.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .versions import Semver


class TagRecord(BaseModel):
    """An annotated tag as it exists in the repository.

    Attributes:
        name: Full tag name, including any prefix (e.g. "v1.2.3").
        target: Hash of the commit the tag points at.
        tagger_timestamp: When the tag was created.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    target: str
    tagger_timestamp: datetime


class CommitRecord(BaseModel):
    """A single commit as read from the log.

    Attributes:
        hash: Full commit hash.
        message: Raw commit message, subject and body.
        timestamp: Commit time, used to cut the log at the anchor tag.
    """

    model_config = ConfigDict(frozen=True)

    hash: str
    message: str
    timestamp: datetime

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class ClassifiedCommit(BaseModel):
    """The release-relevant parts of a Conventional Commit message."""

    model_config = ConfigDict(frozen=True)

    type: str
    scope: str | None = None
    breaking: bool = False
    summary: str = ""


class ReleaseResult(BaseModel):
    """Outcome of one version computation.

    Attributes:
        version: The computed version (a snapshot, not shared with the computer).
        new_release: True if any commit caused a bump.
        latest_tag: The anchor tag the computation started from.
        evaluated: Number of commits examined before the loop finished.
    """

    model_config = ConfigDict(frozen=True)

    version: Semver
    new_release: bool
    latest_tag: TagRecord
    evaluated: int = 0
