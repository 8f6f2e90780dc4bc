"""Conventional Commit classification.

Only the header grammar is checked::

    <type>[(<scope>)][!]: <description>
    [body]

Anything that does not match is simply not release-relevant.
"""

from __future__ import annotations

import re

from .models import ClassifiedCommit
from .rules import COMMIT_TYPES

CONVENTIONAL_COMMIT_RE = re.compile(
    r"^(?P<type>" + "|".join(COMMIT_TYPES) + r")"
    r"(?:\((?P<scope>[\w\-.\\/]+)\))?"
    r"(?P<bang>!)?"
    r": (?P<description>[\w ]+[\s\S]*)",
    re.ASCII,
)

BREAKING_CHANGE_TOKEN = "BREAKING CHANGE"

SHORT_MESSAGE_LIMIT = 60


def short_message(message: str) -> str:
    """Shorten a commit message for log output.

    Messages longer than 60 characters are cut to 57 plus "...".
    Shorter ones only lose their trailing newline.
    """
    if len(message) > SHORT_MESSAGE_LIMIT:
        return f"{message[: SHORT_MESSAGE_LIMIT - 3]}..."
    return message[:-1] if message.endswith("\n") else message


class CommitClassifier:
    """Classifies commit messages against the Conventional Commits grammar.

    VersionComputer only calls ``classify``, so a structured parser can
    replace this one without touching the computation.
    """

    pattern = CONVENTIONAL_COMMIT_RE

    def classify(self, message: str) -> ClassifiedCommit | None:
        """Return the classified commit, or None if the message doesn't match."""
        match = self.pattern.match(message)
        if match is None:
            return None

        breaking = match.group("bang") is not None or BREAKING_CHANGE_TOKEN in message
        return ClassifiedCommit(
            type=match.group("type"),
            scope=match.group("scope"),
            breaking=breaking,
            summary=short_message(message),
        )
