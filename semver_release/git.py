"""Read access to a git repository's tags and history.

VersionComputer only depends on the ``Repository`` protocol; ``GitRepository``
implements it by shelling out to the ``git`` binary.
"""

from __future__ import annotations

import subprocess
from datetime import datetime
from pathlib import Path
from typing import Protocol

from .errors import HistoryUnavailableError, RepositoryError
from .models import CommitRecord, TagRecord
from .shell import git

# ASCII unit/record separators keep multi-line messages intact.
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"

_TAG_FORMAT = FIELD_SEP.join(
    ["%(refname:short)", "%(objecttype)", "%(*objectname)", "%(taggerdate:iso-strict)"]
)
_LOG_FORMAT = FIELD_SEP.join(["%H", "%cI", "%B"]) + RECORD_SEP


class Repository(Protocol):
    """What the version computation needs from version control."""

    def tags(self) -> list[TagRecord]: ...

    def head(self) -> CommitRecord | None: ...

    def log(self) -> list[CommitRecord]:
        """Return the history reachable from the analysed revision, newest first."""
        ...


def _parse_log(output: str) -> list[CommitRecord]:
    commits: list[CommitRecord] = []
    for block in output.split(RECORD_SEP):
        block = block.lstrip("\n")
        if not block:
            continue
        commit_hash, timestamp, message = block.split(FIELD_SEP, 2)
        commits.append(
            CommitRecord(
                hash=commit_hash,
                message=message,
                timestamp=datetime.fromisoformat(timestamp),
            )
        )
    return commits


def _run(
    *args: str,
    cwd: str,
    what: str,
    error: type[RepositoryError] = RepositoryError,
    check: bool = True,
) -> str:
    """Run git, turning a failed or missing git into ``error``."""
    try:
        return git(*args, cwd=cwd, check=check, strip=False)
    except (subprocess.CalledProcessError, OSError) as exc:
        detail = getattr(exc, "stderr", None) or str(exc)
        raise error(f"Failed to {what}: {detail.strip()}") from exc


class GitRepository:
    """A repository on disk, accessed through the git CLI.

    Args:
        path: Repository working directory.
        rev: Revision whose history is analysed and tagged, usually a
             branch name. Defaults to the checked-out HEAD.

    Every git failure, including a missing git binary, surfaces as a
    ``RepositoryError``.
    """

    def __init__(self, path: str | Path = ".", rev: str = "HEAD") -> None:
        self.path = str(path)
        self.rev = rev

    def tags(self) -> list[TagRecord]:
        """List annotated tags. Lightweight tags have no tagger and are skipped."""
        output = _run(
            "for-each-ref",
            f"--format={_TAG_FORMAT}",
            "refs/tags",
            cwd=self.path,
            what="list tags",
        )
        records: list[TagRecord] = []
        for line in output.splitlines():
            if not line:
                continue
            name, object_type, target, tagger_date = line.split(FIELD_SEP)
            if object_type != "tag" or not tagger_date:
                continue
            records.append(
                TagRecord(
                    name=name,
                    target=target,
                    tagger_timestamp=datetime.fromisoformat(tagger_date),
                )
            )
        return records

    def head(self) -> CommitRecord | None:
        """Return the tip commit of ``rev``.

        Returns None when HEAD is unborn, i.e. the repository has no commits.

        Raises:
            RepositoryError: If an explicitly requested revision does not exist.
        """
        # git log exits non-zero on an unborn HEAD, which is not an error here
        output = _run(
            "log",
            "-1",
            f"--format={_LOG_FORMAT}",
            self.rev,
            "--",
            cwd=self.path,
            what=f"read {self.rev}",
            check=False,
        )
        commits = _parse_log(output)
        if not commits and self.rev != "HEAD":
            raise RepositoryError(f"Unknown revision {self.rev!r}")
        return commits[0] if commits else None

    def log(self) -> list[CommitRecord]:
        """Read the full history reachable from ``rev``, newest first.

        Raises:
            HistoryUnavailableError: If git cannot produce the log.
        """
        output = _run(
            "log",
            f"--format={_LOG_FORMAT}",
            self.rev,
            "--",
            cwd=self.path,
            error=HistoryUnavailableError,
            what="read commit history",
        )
        return _parse_log(output)

    def create_tag(self, name: str, message: str) -> None:
        """Create an annotated tag at ``rev``. Pushing is left to the caller."""
        _run(
            "tag",
            "-a",
            name,
            "-m",
            message,
            self.rev,
            cwd=self.path,
            what=f"create tag {name}",
        )
