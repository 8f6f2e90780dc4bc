"""Configuration loading.

Release rules come from a JSON document (``{"releaseRules": [...]}``) or
from ``[tool.semver-release]`` in pyproject.toml, read with tomlkit.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
from pydantic import BaseModel

from .errors import ConfigInvalidError
from .rules import ReleaseRuleSet, validate_release_rules

TOOL_TABLE = "semver-release"


class Settings(BaseModel):
    """Resolved settings for one run.

    Attributes:
        rules: Validated release rules.
        tag_prefix: Prefix of release tags (e.g. "v").
    """

    rules: ReleaseRuleSet
    tag_prefix: str = ""


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text(encoding="utf-8"))


def get_tool_config(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract ``[tool.semver-release]`` as plain Python values.

    Returns an empty dict if the table is absent.
    """
    table = doc.get("tool", {}).get(TOOL_TABLE, {})
    return table.unwrap() if hasattr(table, "unwrap") else dict(table)


def load_rules_document(path: Path) -> dict[str, Any]:
    """Read a JSON release-rule document.

    Raises:
        ConfigInvalidError: If the file is missing, is not UTF-8 or is not
            valid JSON.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigInvalidError(f"Release rules file not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigInvalidError(f"{path} is not UTF-8 text: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigInvalidError(f"Invalid JSON in {path}: {exc}") from exc


def load_settings(
    repo_dir: Path,
    rules_file: Path | None = None,
    tag_prefix: str | None = None,
) -> Settings:
    """Merge command-line options with ``[tool.semver-release]``.

    Explicit arguments win over pyproject.toml values.

    Args:
        repo_dir: Repository root, searched for pyproject.toml.
        rules_file: JSON rule document; overrides ``release-rules``.
        tag_prefix: Overrides ``tag-prefix``.

    Raises:
        ConfigInvalidError: If no rules are configured anywhere, or they
            fail validation. Also raised for an unreadable pyproject.toml
            or a non-string ``tag-prefix``.
    """
    tool: dict[str, Any] = {}
    pyproject = repo_dir / "pyproject.toml"
    if pyproject.exists():
        try:
            tool = get_tool_config(load_pyproject(pyproject))
        except (TOMLKitError, UnicodeDecodeError) as exc:
            raise ConfigInvalidError(f"Cannot read {pyproject}: {exc}") from exc

    if rules_file is not None:
        document: dict[str, Any] | None = load_rules_document(rules_file)
    elif "release-rules" in tool:
        document = {"releaseRules": tool["release-rules"]}
    else:
        document = None

    rules = validate_release_rules(document)

    if tag_prefix is None:
        tag_prefix = tool.get("tag-prefix", "")
        if not isinstance(tag_prefix, str):
            raise ConfigInvalidError(
                f"tag-prefix in {pyproject} must be a string, got {tag_prefix!r}"
            )
    return Settings(rules=rules, tag_prefix=tag_prefix)
