"""Release rules: which commit types trigger which version bump.

A rule document looks like::

    {"releaseRules": [{"type": "feat", "release": "minor"},
                      {"type": "fix", "release": "patch"}]}

Rules are not deduplicated. Several rules may name the same commit type and
all of them apply, in document order.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import RuleSetInvalidError

CommitType = Literal[
    "build",
    "chore",
    "ci",
    "docs",
    "feat",
    "fix",
    "perf",
    "refactor",
    "revert",
    "style",
    "test",
]
ReleaseSeverity = Literal["major", "minor", "patch"]

COMMIT_TYPES: tuple[str, ...] = get_args(CommitType)
RELEASE_SEVERITIES: tuple[str, ...] = get_args(ReleaseSeverity)


class ReleaseRule(BaseModel):
    """Maps one commit type to a bump severity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    commit_type: CommitType = Field(alias="type")
    release: ReleaseSeverity


class ReleaseRuleSet(BaseModel):
    """An ordered, non-empty list of release rules."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rules: list[ReleaseRule] = Field(alias="releaseRules", min_length=1)

    def matching(self, commit_type: str) -> Iterator[ReleaseRule]:
        """Yield every rule for ``commit_type``, in rule-list order."""
        for rule in self.rules:
            if rule.commit_type == commit_type:
                yield rule

    def __len__(self) -> int:
        return len(self.rules)


def _describe(error: Mapping[str, Any]) -> str:
    loc = ".".join(str(part) for part in error["loc"]) or "<document>"
    return f"{loc}: {error['msg']}"


def validate_release_rules(candidate: Mapping[str, Any] | None) -> ReleaseRuleSet:
    """Validate a decoded rule document and return the rule set.

    Args:
        candidate: The decoded document, or None if nothing was loaded.

    Raises:
        RuleSetInvalidError: Listing every failing field. Raised when the
            document or its ``releaseRules`` list is absent or empty, or
            when a rule has an unknown type or severity.
    """
    if candidate is None:
        raise RuleSetInvalidError(["releaseRules: no release rules provided"])
    try:
        return ReleaseRuleSet.model_validate(candidate)
    except ValidationError as exc:
        raise RuleSetInvalidError([_describe(e) for e in exc.errors()]) from exc
