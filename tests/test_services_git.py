"""Tests for pr_release.services.git (history queries, scoped config, runner)."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from pr_release.models import CommitRef
from pr_release.services.git import (
    GitRunnerError,
    config_key,
    fetch_origin,
    is_ancestor,
    list_pull_refs,
    lookup_config,
    merge_parents,
    non_merge_commits,
    read_config,
    repository_root,
    write_global_config,
)
from pr_release.services.git._run import _run_git

REPO = Path("/tmp/repo")
HISTORY_RUN = "pr_release.services.git.history._run_git"
CONFIG_RUN = "pr_release.services.git.config._run_git"


class TestRunGit:
    """_run_git subprocess wrapper."""

    def test_returns_stdout(self) -> None:
        """stdout of a successful command is returned."""
        done = subprocess.CompletedProcess(["git"], 0, stdout="out\n", stderr="")
        with patch("pr_release.services.git._run.subprocess.run", return_value=done) as run:
            assert _run_git(["status"], cwd=REPO) == "out\n"
        assert run.call_args[0][0] == ["git", "status"]
        assert run.call_args[1]["cwd"] == REPO

    def test_non_zero_exit_raises(self) -> None:
        """CalledProcessError becomes GitRunnerError with stderr."""
        err = subprocess.CalledProcessError(128, ["git", "log"], output="", stderr="fatal: bad revision")
        with patch("pr_release.services.git._run.subprocess.run", side_effect=err):
            with pytest.raises(GitRunnerError, match="bad revision"):
                _run_git(["log"], cwd=REPO)

    def test_missing_git_raises(self) -> None:
        """Missing git binary is reported as GitRunnerError."""
        with patch("pr_release.services.git._run.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(GitRunnerError, match="git not found"):
                _run_git(["log"], cwd=REPO)


class TestHistory:
    """History queries parse git output."""

    def test_merge_parents(self) -> None:
        """Each %P line becomes a parent list."""
        with patch(HISTORY_RUN, return_value="a1 b1\na2 b2\n") as run:
            assert merge_parents("master", "staging", repo_dir=REPO) == [["a1", "b1"], ["a2", "b2"]]
        run.assert_called_once_with(
            ["log", "--merges", "--pretty=format:%P", "origin/master..origin/staging"],
            cwd=REPO,
            log=None,
        )

    def test_merge_parents_empty_range(self) -> None:
        """No merge commits: empty list."""
        with patch(HISTORY_RUN, return_value=""):
            assert merge_parents("master", "staging", repo_dir=REPO) == []

    def test_non_merge_commits(self) -> None:
        """Hashes of non-merge commits, one per line."""
        with patch(HISTORY_RUN, return_value="s1\ns2") as run:
            assert non_merge_commits("main", "develop", repo_dir=REPO) == ["s1", "s2"]
        assert run.call_args[0][0] == ["log", "--no-merges", "--pretty=format:%H", "origin/main..origin/develop"]

    def test_list_pull_refs(self) -> None:
        """ls-remote lines become CommitRef objects; junk lines are skipped."""
        out = "b1\trefs/pull/7/head\nbroken-line\nd2\trefs/pull/9/head\n"
        with patch(HISTORY_RUN, return_value=out) as run:
            refs = list_pull_refs(repo_dir=REPO)
        assert refs == [CommitRef(sha="b1", ref="refs/pull/7/head"), CommitRef(sha="d2", ref="refs/pull/9/head")]
        assert run.call_args[0][0] == ["ls-remote", "origin", "refs/pull/*/head"]

    def test_is_ancestor_true(self) -> None:
        """Merge base equal to the commit means it is already in the ref."""
        with patch(HISTORY_RUN, return_value="abc\n") as run:
            assert is_ancestor("abc", "origin/master", repo_dir=REPO) is True
        assert run.call_args[0][0] == ["merge-base", "abc", "origin/master"]

    def test_is_ancestor_false(self) -> None:
        """A different merge base means the commit is not released."""
        with patch(HISTORY_RUN, return_value="def\n"):
            assert is_ancestor("abc", "origin/master", repo_dir=REPO) is False

    def test_is_ancestor_failure_propagates(self) -> None:
        """git failures are fatal, not 'not an ancestor'."""
        with patch(HISTORY_RUN, side_effect=GitRunnerError("merge-base failed")):
            with pytest.raises(GitRunnerError):
                is_ancestor("abc", "origin/master", repo_dir=REPO)

    def test_repository_root(self) -> None:
        """rev-parse output is returned as a Path."""
        with patch(HISTORY_RUN, return_value="/work/app\n"):
            assert repository_root(REPO) == Path("/work/app")

    def test_fetch_origin(self) -> None:
        """fetch_origin runs git remote update origin."""
        with patch(HISTORY_RUN, return_value="") as run:
            fetch_origin(REPO)
        run.assert_called_once_with(["remote", "update", "origin"], cwd=REPO, log=None)


class TestConfig:
    """Scoped git config reads and writes."""

    def test_config_key(self) -> None:
        """Host-qualified keys insert the host as subsection."""
        assert config_key("token") == "pr-release.token"
        assert config_key("token", "ghe.example.com") == "pr-release.ghe.example.com.token"

    def test_read_config_value(self) -> None:
        """Set keys return their stripped value."""
        with patch(CONFIG_RUN, return_value="develop\n") as run:
            assert read_config("pr-release.branch.staging", repo_dir=REPO) == "develop"
        assert run.call_args[0][0] == ["config", "--get", "pr-release.branch.staging"]

    def test_read_config_missing_is_none(self) -> None:
        """Unset keys (git exits 1) return None."""
        with patch(CONFIG_RUN, side_effect=GitRunnerError("exit 1")):
            assert read_config("pr-release.template", repo_dir=REPO) is None

    def test_read_config_from_file(self) -> None:
        """file= reads from a specific config file."""
        with patch(CONFIG_RUN, return_value="x") as run:
            read_config("pr-release.labels", repo_dir=REPO, file=Path("/tmp/repo/.git-pr-release"))
        assert run.call_args[0][0] == ["config", "-f", "/tmp/repo/.git-pr-release", "--get", "pr-release.labels"]

    def test_lookup_prefers_local_file(self, tmp_path: Path) -> None:
        """.git-pr-release wins over the global setting."""
        (tmp_path / ".git-pr-release").write_text("[pr-release]\n", encoding="utf-8")

        def fake_run(args: list[str], cwd: Path, log: object = None) -> str:
            return "local" if "-f" in args else "global"

        with patch(CONFIG_RUN, side_effect=fake_run):
            assert lookup_config("branch.production", repo_dir=tmp_path) == "local"

    def test_lookup_host_scoped_key(self, tmp_path: Path) -> None:
        """Without a local file, an enterprise host reads only pr-release.<host>.<key>."""
        calls: list[list[str]] = []

        def fake_run(args: list[str], cwd: Path, log: object = None) -> str:
            calls.append(args)
            return "ghe-token"

        with patch(CONFIG_RUN, side_effect=fake_run):
            assert lookup_config("token", repo_dir=tmp_path, host="ghe.example.com") == "ghe-token"
        assert [c[-1] for c in calls] == ["pr-release.ghe.example.com.token"]

    def test_lookup_host_ignores_plain_key(self, tmp_path: Path) -> None:
        """A plain pr-release.<key> does not leak into an enterprise host's settings."""
        calls: list[list[str]] = []

        def fake_run(args: list[str], cwd: Path, log: object = None) -> str:
            calls.append(args)
            if args[-1] == "pr-release.ghe.example.com.token":
                raise GitRunnerError("unset")
            return "github-com-token"

        with patch(CONFIG_RUN, side_effect=fake_run):
            assert lookup_config("token", repo_dir=tmp_path, host="ghe.example.com") is None
        assert "pr-release.token" not in [c[-1] for c in calls]

    def test_lookup_default_host_reads_plain_key(self, tmp_path: Path) -> None:
        """The default host (host=None) reads pr-release.<key>."""
        with patch(CONFIG_RUN, return_value="develop") as run:
            assert lookup_config("branch.staging", repo_dir=tmp_path) == "develop"
        assert run.call_args[0][0][-1] == "pr-release.branch.staging"

    def test_lookup_unset_everywhere(self, tmp_path: Path) -> None:
        """Missing everywhere returns None."""
        with patch(CONFIG_RUN, side_effect=GitRunnerError("unset")):
            assert lookup_config("labels", repo_dir=tmp_path) is None

    def test_write_global_config(self) -> None:
        """Values are written with --global."""
        with patch(CONFIG_RUN, return_value="") as run:
            write_global_config("pr-release.token", "t0k", repo_dir=REPO)
        run.assert_called_once_with(["config", "--global", "pr-release.token", "t0k"], cwd=REPO, log=None)
