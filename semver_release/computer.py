"""Version computation: latest tag → history → classify → bump.

This module folds the commits made since the latest semver tag into a new
version:
1. Resolve the latest semver tag (or a synthetic 0.0.0 at HEAD)
2. Read the log and keep commits newer than that tag
3. Walk them oldest first, classifying each message
4. Apply every release rule matching the commit type

A breaking change bumps major and stops the walk; later commits in the
same pass are not evaluated.
"""

from __future__ import annotations

import logging

from .commits import CommitClassifier
from .git import Repository
from .models import CommitRecord, ReleaseResult, TagRecord
from .rules import ReleaseRuleSet
from .tags import TagResolver
from .versions import Semver

logger = logging.getLogger(__name__)


def commits_since(
    history: list[CommitRecord], anchor: TagRecord, version: Semver
) -> list[CommitRecord]:
    """Return the commits to analyse, oldest first.

    For a first release (0.0.0) the whole history counts. Otherwise only
    commits strictly newer than the anchor tag are kept.
    """
    if version.is_zero():
        selected = list(history)
    else:
        selected = [c for c in history if c.timestamp > anchor.tagger_timestamp]
    selected.reverse()
    return selected


class VersionComputer:
    """Computes the next semantic version of a repository.

    Args:
        rules: Validated release rules.
        classifier: Anything with a ``classify(message)`` method returning a
                    ClassifiedCommit or None. Defaults to CommitClassifier.
        tag_prefix: Prefix of release tags (e.g. "v").
    """

    def __init__(
        self,
        rules: ReleaseRuleSet,
        classifier: CommitClassifier | None = None,
        tag_prefix: str = "",
    ) -> None:
        self.rules = rules
        self.classifier = classifier or CommitClassifier()
        self.tag_prefix = tag_prefix

    def compute(self, repository: Repository) -> ReleaseResult:
        """Compute the next version from a repository's tags and history.

        Raises:
            NoHeadError: If there are no semver tags and no commits.
            MalformedVersionError: If the latest tag cannot be parsed.
            HistoryUnavailableError: If the commit log cannot be read.
        """
        resolver = TagResolver(self.tag_prefix)
        latest_tag = resolver.latest(repository.tags(), repository.head())
        current = Semver.parse(latest_tag.name, self.tag_prefix)

        history = commits_since(repository.log(), latest_tag, current)
        logger.debug("%d commit(s) since %s", len(history), latest_tag.name)

        new_release, evaluated = self.apply(current, history)
        return ReleaseResult(
            version=current.model_copy(),
            new_release=new_release,
            latest_tag=latest_tag,
            evaluated=evaluated,
        )

    def apply(self, version: Semver, history: list[CommitRecord]) -> tuple[bool, int]:
        """Bump ``version`` in place for each release-relevant commit.

        Args:
            version: The version to mutate. Owned by the caller.
            history: Commits in chronological order (oldest first).

        Returns:
            Tuple of (whether any bump happened, commits evaluated).
        """
        new_release = False
        evaluated = 0

        for commit in history:
            evaluated += 1
            classified = self.classifier.classify(commit.message)
            if classified is None:
                continue

            if classified.breaking:
                logger.info("(%s) breaking change", commit.short_hash)
                version.bump_major()
                new_release = True
                break

            for rule in self.rules.matching(classified.type):
                logger.info(
                    '(%s) %s: "%s"', commit.short_hash, rule.release, classified.summary
                )
                version.bump(rule.release)
                new_release = True
                logger.debug("version is now %s", version)

        return new_release, evaluated
