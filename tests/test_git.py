"""Tests for semver_release.git."""

from __future__ import annotations

import os
import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from semver_release.computer import VersionComputer
from semver_release.errors import HistoryUnavailableError, RepositoryError
from semver_release.git import FIELD_SEP, RECORD_SEP, GitRepository, _parse_log
from semver_release.rules import ReleaseRuleSet


def _log_output(*commits: tuple[str, str, str]) -> str:
    """Render commits the way ``git log --format=%H<US>%cI<US>%B<RS>`` does."""
    records = [
        f"{h}{FIELD_SEP}{d}{FIELD_SEP}{body}{RECORD_SEP}" for h, d, body in commits
    ]
    return "\n".join(records) + "\n"


class TestParseLog:
    def test_multiline_messages(self) -> None:
        output = _log_output(
            ("b" * 40, "2024-02-01T10:00:00+00:00", "feat: two\n\nbody line\n"),
            ("a" * 40, "2024-01-01T10:00:00+02:00", "fix: one\n"),
        )
        commits = _parse_log(output)

        assert [c.hash for c in commits] == ["b" * 40, "a" * 40]
        assert commits[0].message == "feat: two\n\nbody line\n"
        assert commits[1].message == "fix: one\n"
        assert commits[1].timestamp == datetime(
            2024, 1, 1, 10, tzinfo=timezone(timedelta(hours=2))
        )

    def test_empty_output(self) -> None:
        assert _parse_log("") == []


class TestTags:
    @patch("semver_release.git.git")
    def test_annotated_tags_only(self, mock_git: MagicMock) -> None:
        annotated = ["v1.0.0", "tag", "c" * 40, "2024-03-01T12:00:00+00:00"]
        lightweight = ["light", "commit", "", ""]
        mock_git.return_value = (
            FIELD_SEP.join(annotated) + "\n" + FIELD_SEP.join(lightweight) + "\n"
        )

        tags = GitRepository("/repo").tags()

        assert len(tags) == 1
        assert tags[0].name == "v1.0.0"
        assert tags[0].target == "c" * 40
        assert tags[0].tagger_timestamp == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
        assert mock_git.call_args.kwargs["cwd"] == "/repo"

    @patch("semver_release.git.git")
    def test_no_tags(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        assert GitRepository().tags() == []


    @patch("semver_release.git.git")
    def test_failure_raises_repository_error(self, mock_git: MagicMock) -> None:
        mock_git.side_effect = subprocess.CalledProcessError(
            128, ["git", "for-each-ref"], stderr="fatal: not a git repository\n"
        )
        with pytest.raises(RepositoryError, match="not a git repository"):
            GitRepository().tags()


class TestHead:
    @patch("semver_release.git.git")
    def test_returns_latest_commit(self, mock_git: MagicMock) -> None:
        mock_git.return_value = _log_output(
            ("d" * 40, "2024-01-01T00:00:00+00:00", "chore: init\n")
        )
        head = GitRepository().head()
        assert head is not None
        assert head.hash == "d" * 40
        assert mock_git.call_args.kwargs["check"] is False

    @patch("semver_release.git.git")
    def test_empty_repository(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        assert GitRepository().head() is None


    @patch("semver_release.git.git")
    def test_reads_requested_revision(self, mock_git: MagicMock) -> None:
        mock_git.return_value = _log_output(
            ("d" * 40, "2024-01-01T00:00:00+00:00", "fix: on branch\n")
        )
        GitRepository(rev="release/1.x").head()
        assert "release/1.x" in mock_git.call_args.args

    @patch("semver_release.git.git")
    def test_unknown_revision(self, mock_git: MagicMock) -> None:
        mock_git.return_value = ""
        with pytest.raises(RepositoryError, match="Unknown revision 'nope'"):
            GitRepository(rev="nope").head()

    @patch("semver_release.git.git")
    def test_missing_git_binary(self, mock_git: MagicMock) -> None:
        mock_git.side_effect = FileNotFoundError(2, "No such file or directory", "git")
        with pytest.raises(RepositoryError, match="No such file"):
            GitRepository().head()


class TestLog:
    @patch("semver_release.git.git")
    def test_newest_first(self, mock_git: MagicMock) -> None:
        mock_git.return_value = _log_output(
            ("2" * 40, "2024-01-02T00:00:00+00:00", "fix: b\n"),
            ("1" * 40, "2024-01-01T00:00:00+00:00", "fix: a\n"),
        )
        assert [c.message for c in GitRepository().log()] == ["fix: b\n", "fix: a\n"]
        assert mock_git.call_args.kwargs["strip"] is False

    @patch("semver_release.git.git")
    def test_failure_raises_history_unavailable(self, mock_git: MagicMock) -> None:
        mock_git.side_effect = subprocess.CalledProcessError(
            128, ["git", "log"], stderr="fatal: bad object HEAD\n"
        )
        with pytest.raises(HistoryUnavailableError, match="bad object HEAD"):
            GitRepository().log()


@patch("semver_release.git.git")
def test_create_tag_is_annotated(mock_git: MagicMock) -> None:
    GitRepository("/repo").create_tag("v1.1.0", "Release v1.1.0")
    mock_git.assert_called_once_with(
        "tag",
        "-a",
        "v1.1.0",
        "-m",
        "Release v1.1.0",
        "HEAD",
        cwd="/repo",
        check=True,
        strip=False,
    )


@patch("semver_release.shell.subprocess.run")
def test_shell_git_keeps_separators_when_not_stripping(mock_run: MagicMock) -> None:
    from semver_release.shell import git

    mock_run.return_value = subprocess.CompletedProcess(
        [], 0, stdout=f"x{RECORD_SEP}\n"
    )
    assert git("log", strip=False) == f"x{RECORD_SEP}\n"
    assert git("log") == "x"


@patch("semver_release.git.git")
def test_create_tag_failure(mock_git: MagicMock) -> None:
    mock_git.side_effect = subprocess.CalledProcessError(
        128, ["git", "tag"], stderr="fatal: tag 'v1.1.0' already exists\n"
    )
    with pytest.raises(RepositoryError, match="Failed to create tag v1.1.0"):
        GitRepository().create_tag("v1.1.0", "Release v1.1.0")


def _at(hour: int) -> datetime:
    return datetime(2024, 1, 1, hour, tzinfo=timezone.utc)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
class TestAgainstRealGit:
    """Drive GitRepository against a throwaway repository."""

    @pytest.fixture(autouse=True)
    def isolated_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
        monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
        for role in ("AUTHOR", "COMMITTER"):
            monkeypatch.setenv(f"GIT_{role}_NAME", "Test")
            monkeypatch.setenv(f"GIT_{role}_EMAIL", "test@example.com")

    @pytest.fixture
    def workdir(self, tmp_path: Path) -> Path:
        path = tmp_path / "work"
        path.mkdir()
        self._git(path, 0, "init", "-q")
        self._git(path, 0, "commit", "-q", "--allow-empty", "-m", "chore: init")
        self._git(path, 1, "tag", "-a", "v1.0.0", "-m", "Release v1.0.0")
        self._git(path, 1, "tag", "lightweight")
        self._git(path, 2, "commit", "-q", "--allow-empty", "-m", "fix: a")
        self._git(path, 3, "commit", "-q", "--allow-empty", "-m", "feat: b")
        return path

    @staticmethod
    def _git(path: Path, hour: int, *args: str) -> str:
        stamp = _at(hour).strftime("%Y-%m-%d %H:%M:%S +0000")
        env = {**os.environ, "GIT_AUTHOR_DATE": stamp, "GIT_COMMITTER_DATE": stamp}
        result = subprocess.run(
            ["git", *args],
            cwd=path,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def test_tags(self, workdir: Path) -> None:
        first = self._git(workdir, 0, "rev-list", "--max-parents=0", "HEAD").strip()

        tags = GitRepository(workdir).tags()

        assert [t.name for t in tags] == ["v1.0.0"]
        assert tags[0].target == first
        assert tags[0].tagger_timestamp == _at(1)

    def test_log(self, workdir: Path) -> None:
        history = GitRepository(workdir).log()

        messages = [c.message for c in history]
        assert messages == ["feat: b\n", "fix: a\n", "chore: init\n"]
        assert [c.timestamp for c in history] == [_at(3), _at(2), _at(0)]

    def test_head(self, workdir: Path) -> None:
        head = GitRepository(workdir).head()
        assert head is not None
        assert head.message == "feat: b\n"

    def test_compute(self, workdir: Path, default_rules: ReleaseRuleSet) -> None:
        computer = VersionComputer(default_rules, tag_prefix="v")
        result = computer.compute(GitRepository(workdir))

        assert result.version.format() == "1.1.0"
        assert result.new_release is True
        assert result.latest_tag.name == "v1.0.0"

    def test_compute_on_branch(
        self, workdir: Path, default_rules: ReleaseRuleSet
    ) -> None:
        self._git(workdir, 4, "branch", "maintenance", "HEAD~1")
        computer = VersionComputer(default_rules, tag_prefix="v")
        result = computer.compute(GitRepository(workdir, rev="maintenance"))

        assert result.version.format() == "1.0.1"

    def test_create_tag(self, workdir: Path) -> None:
        repository = GitRepository(workdir)
        repository.create_tag("v1.1.0", "Release v1.1.0")

        assert sorted(t.name for t in repository.tags()) == ["v1.0.0", "v1.1.0"]

    def test_empty_repository(self, tmp_path: Path) -> None:
        self._git(tmp_path, 0, "init", "-q")
        assert GitRepository(tmp_path).head() is None
