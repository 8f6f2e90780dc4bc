"""Shell and git utilities.

Provides a thin wrapper around subprocess for git calls, plus output
formatting helpers for the CLI.
"""

from __future__ import annotations

import subprocess

import click


def git(
    *args: str, cwd: str | None = None, check: bool = True, strip: bool = True
) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "log", "--format=%H").
        cwd: Repository directory; defaults to the current directory.
        check: If True (default), raise CalledProcessError on non-zero
               exit. Set to False for commands that may legitimately fail
               (e.g., reading HEAD in an empty repository).
        strip: If False, return stdout untouched. Needed when the output
               ends in separator characters that str.strip() would eat.

    Returns:
        Stdout from the git command, stripped unless strip is False.
    """
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=check
    )
    return result.stdout.strip() if strip else result.stdout


def step(msg: str) -> None:
    """Print a visually distinct step header to stderr.

    Keeps stdout free for the computed version.
    """
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}", err=True)
