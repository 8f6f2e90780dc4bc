"""Latest semantic-version tag resolution."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import NoHeadError
from .models import CommitRecord, TagRecord
from .versions import Precedence, Semver

logger = logging.getLogger(__name__)


def zero_tag(head: CommitRecord | None, prefix: str = "") -> TagRecord:
    """Synthesize a 0.0.0 tag anchored at HEAD, meaning "never released".

    Raises:
        NoHeadError: If the repository has no commits.
    """
    if head is None:
        raise NoHeadError("Repository has no commits; cannot anchor a 0.0.0 tag")
    return TagRecord(
        name=Semver().tag_name(prefix),
        target=head.hash,
        tagger_timestamp=head.timestamp,
    )


def _supersedes(candidate: TagRecord, current: TagRecord, prefix: str) -> bool:
    """True if ``candidate`` should replace ``current`` as the latest tag.

    Higher precedence wins. On equal precedence the later tagger timestamp
    wins, and the earlier-seen tag is kept if that is a tie too.
    """
    order = Semver.parse(candidate.name, prefix).precedence(
        Semver.parse(current.name, prefix)
    )
    if order is Precedence.EQUAL:
        return candidate.tagger_timestamp > current.tagger_timestamp
    return order is Precedence.GREATER


class TagResolver:
    """Finds the tag with the highest semantic precedence.

    Args:
        prefix: Tag prefix (e.g. "v") stripped before matching the
                SemVer grammar. Tags without it are ignored.
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def semver_tags(self, tags: Iterable[TagRecord]) -> list[TagRecord]:
        """Filter to tags whose name is a semantic version."""
        return [t for t in tags if Semver.is_valid_tag(t.name, self.prefix)]

    def latest(
        self, tags: Iterable[TagRecord], head: CommitRecord | None
    ) -> TagRecord:
        """Return the latest semver tag, or a synthetic 0.0.0 tag at HEAD.

        Raises:
            NoHeadError: If there are no semver tags and no commits.
            MalformedVersionError: If a filtered tag cannot be parsed.
        """
        candidates = self.semver_tags(tags)

        if not candidates:
            logger.info("No previous semver tag, starting from 0.0.0")
            return zero_tag(head, self.prefix)

        latest = candidates[0]
        for tag in candidates[1:]:
            if _supersedes(tag, latest, self.prefix):
                latest = tag

        logger.info("Latest semver tag: %s", latest.name)
        return latest
