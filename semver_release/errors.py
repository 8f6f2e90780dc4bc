"""Exception hierarchy for semver-release.

Library code raises these; only the CLI turns them into an exit status.
"""

from __future__ import annotations


class SemverReleaseError(Exception):
    """Base class for every error raised by semver-release."""


class ConfigInvalidError(SemverReleaseError):
    """Release-rule configuration is missing, empty or malformed."""


class RuleSetInvalidError(ConfigInvalidError):
    """A release-rule document failed validation.

    Attributes:
        problems: One human-readable entry per failing field, each
                  prefixed with its location in the document.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__(
            "Invalid release rules:\n" + "\n".join(f"  - {p}" for p in self.problems)
        )


class MalformedVersionError(SemverReleaseError):
    """A tag or version triple could not be turned into a Semver."""


class NoHeadError(SemverReleaseError):
    """The repository has no commits, so there is nothing to anchor to."""


class RepositoryError(SemverReleaseError):
    """A git command failed or the git binary is missing."""


class HistoryUnavailableError(RepositoryError):
    """The commit log could not be read."""
