"""Semantic version value type.

Parsing leans on the ``semver`` package for the SemVer 2.0.0 grammar; the
value itself only tracks major.minor.patch plus optional build metadata.
Pre-release identifiers are accepted when parsing a tag but not kept, and
never take part in precedence.

Without a configured prefix a tag is a version when it ends in one, so
``v1.2.3`` and ``release-1.2.3`` both read as 1.2.3.
"""

from __future__ import annotations

import re
from enum import IntEnum

import semver
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import MalformedVersionError


class Precedence(IntEnum):
    """Outcome of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


SEMVER_TAIL_RE = re.compile(
    r"(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)"
    r"(?:-(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*)?"
    r"(?:\+[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*)?$",
    re.ASCII,
)


def _version_text(tag_name: str, prefix: str) -> str | None:
    """Return the part of a tag name that should hold the version.

    With a prefix, the prefix must lead and the rest is the version. Without
    one, the trailing version-shaped text is used.
    """
    if not prefix:
        match = SEMVER_TAIL_RE.search(tag_name)
        return match.group(0) if match else tag_name
    if not tag_name.startswith(prefix):
        return None
    return tag_name[len(prefix) :]


class Semver(BaseModel):
    """A major.minor.patch version with optional alphanumeric build metadata.

    Bumps mutate the instance in place and cascade: bumping minor resets
    patch, bumping major resets minor and patch. Any bump clears the build
    metadata, which described the previous build.
    """

    model_config = ConfigDict(validate_assignment=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)
    build_metadata: str | None = Field(default=None, pattern=r"^[0-9A-Za-z]+$")

    @classmethod
    def create(
        cls, major: int, minor: int, patch: int, build_metadata: str | None = None
    ) -> Semver:
        """Build a validated Semver, raising MalformedVersionError on bad input."""
        try:
            return cls(
                major=major, minor=minor, patch=patch, build_metadata=build_metadata
            )
        except ValidationError as exc:
            raise MalformedVersionError(
                f"Invalid version {major}.{minor}.{patch}: {exc}"
            ) from exc

    @classmethod
    def parse(cls, tag_name: str, prefix: str = "") -> Semver:
        """Parse a tag name such as ``v1.2.3`` into a Semver.

        The prefix, when given, must be present and is removed before the
        remainder is matched against the SemVer grammar. Without a prefix the
        version at the end of the name is used. Build metadata is kept only
        when it is a single alphanumeric identifier.

        Raises:
            MalformedVersionError: If the name cannot be decomposed into
                three non-negative integer components.
        """
        raw = _version_text(tag_name, prefix)
        if raw is None:
            raise MalformedVersionError(
                f"Tag {tag_name!r} does not start with prefix {prefix!r}"
            )
        try:
            parsed = semver.Version.parse(raw)
        except (ValueError, TypeError) as exc:
            raise MalformedVersionError(
                f"Tag {tag_name!r} is not a semantic version"
            ) from exc

        build = parsed.build if parsed.build and parsed.build.isalnum() else None
        return cls.create(parsed.major, parsed.minor, parsed.patch, build)

    @staticmethod
    def is_valid_tag(tag_name: str, prefix: str = "") -> bool:
        """Return True if the tag name is a semantic version (after the prefix)."""
        raw = _version_text(tag_name, prefix)
        return raw is not None and semver.Version.is_valid(raw)

    def bump_patch(self) -> None:
        self.patch += 1
        self.build_metadata = None

    def bump_minor(self) -> None:
        self.minor += 1
        self.patch = 0
        self.build_metadata = None

    def bump_major(self) -> None:
        self.major += 1
        self.minor = 0
        self.patch = 0
        self.build_metadata = None

    def bump(self, severity: str) -> None:
        """Apply a bump by severity name ("major", "minor" or "patch")."""
        bumpers = {
            "major": self.bump_major,
            "minor": self.bump_minor,
            "patch": self.bump_patch,
        }
        try:
            bumpers[severity]()
        except KeyError:
            raise ValueError(f"Unknown release severity: {severity!r}") from None

    def is_zero(self) -> bool:
        return self.major == self.minor == self.patch == 0

    def precedence(self, other: Semver) -> Precedence:
        """Compare major, then minor, then patch. Build metadata is ignored."""
        for mine, theirs in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if mine > theirs:
                return Precedence.GREATER
            if mine < theirs:
                return Precedence.LESS
        return Precedence.EQUAL

    def format(self) -> str:
        """Render as ``major.minor.patch`` with ``+build`` when present."""
        core = f"{self.major}.{self.minor}.{self.patch}"
        return f"{core}+{self.build_metadata}" if self.build_metadata else core

    def tag_name(self, prefix: str = "") -> str:
        return f"{prefix}{self.format()}"

    def __str__(self) -> str:
        return self.format()
