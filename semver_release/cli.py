"""CLI entry point for semver-release."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from semver_release.computer import VersionComputer
from semver_release.config import load_rules_document, load_settings
from semver_release.errors import RuleSetInvalidError, SemverReleaseError
from semver_release.git import GitRepository
from semver_release.rules import validate_release_rules
from semver_release.shell import step


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="  %(message)s",
        force=True,
    )


def _write_output(output_path: Path, name: str, value: str) -> None:
    with open(output_path, "a") as fh:
        fh.write(f"{name}={value}\n")


@click.group()
@click.version_option(package_name="semver-release")
def cli() -> None:
    """Compute the next semantic version from Conventional Commits."""


@cli.command("next")
@click.option(
    "--repo",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository to analyse.",
)
@click.option(
    "--rules",
    "rules_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON release rules. Defaults to [tool.semver-release] in pyproject.toml.",
)
@click.option("--tag-prefix", default=None, help='Release tag prefix, e.g. "v".')
@click.option(
    "--branch",
    default=None,
    help="Branch or revision to analyse and tag. Defaults to HEAD.",
)
@click.option(
    "--github-output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append SEMVER and NEW_RELEASE to this GitHub step output file.",
)
@click.option(
    "--create-tag",
    is_flag=True,
    help="Create an annotated tag on the analysed revision on release.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show which commits bump.")
def next_version(
    repo: Path,
    rules_file: Path | None,
    tag_prefix: str | None,
    branch: str | None,
    github_output: Path | None,
    create_tag: bool,
    verbose: bool,
) -> None:
    """Print the next version and whether it is a new release."""
    _configure_logging(verbose)

    try:
        settings = load_settings(repo, rules_file, tag_prefix)
        if verbose:
            step(f"Analysing {repo.resolve()}")
        repository = GitRepository(repo, rev=branch or "HEAD")
        computer = VersionComputer(settings.rules, tag_prefix=settings.tag_prefix)
        result = computer.compute(repository)
    except SemverReleaseError as exc:
        raise click.ClickException(str(exc)) from exc

    version = result.version.tag_name(settings.tag_prefix)
    new_release = "true" if result.new_release else "false"

    if create_tag and result.new_release:
        try:
            repository.create_tag(version, f"Release {version}")
        except SemverReleaseError as exc:
            raise click.ClickException(str(exc)) from exc

    if github_output is not None:
        _write_output(github_output, "SEMVER", version)
        _write_output(github_output, "NEW_RELEASE", new_release)

    click.echo(f"{version} {new_release}")


@cli.command("check-rules")
@click.argument("rules_file", type=click.Path(dir_okay=False, path_type=Path))
def check_rules(rules_file: Path) -> None:
    """Validate a JSON release-rule document."""
    try:
        rules = validate_release_rules(load_rules_document(rules_file))
    except RuleSetInvalidError as exc:
        for problem in exc.problems:
            click.echo(f"✗ {problem}", err=True)
        raise click.ClickException(
            f"{len(exc.problems)} problem(s) in {rules_file}"
        ) from exc
    except SemverReleaseError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"✓ {len(rules)} release rule(s) OK")
