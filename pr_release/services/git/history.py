"""Read-only history queries: merge parents, pull request refs, ancestry."""

import logging
from pathlib import Path

from pr_release.models import CommitRef
from pr_release.services.git._run import _run_git

PULL_REFS_PATTERN = "refs/pull/*/head"


def _cwd(repo_dir: Path | None) -> Path:
    return Path(repo_dir) if repo_dir is not None else Path.cwd()


def repository_root(repo_dir: Path | None = None, log: logging.Logger | None = None) -> Path:
    """Return the top-level directory of the working tree."""
    out = _run_git(["rev-parse", "--show-toplevel"], cwd=_cwd(repo_dir), log=log)
    return Path(out.strip())


def fetch_origin(repo_dir: Path | None = None, log: logging.Logger | None = None) -> None:
    """Update remote-tracking refs from origin."""
    _run_git(["remote", "update", "origin"], cwd=_cwd(repo_dir), log=log)
    if log:
        log.info("Fetched updates from origin")


def merge_parents(
    production: str,
    staging: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> list[list[str]]:
    """Parent hash lists of merge commits in origin/<production>..origin/<staging>.

    One entry per merge commit, in ``git log`` order; each entry is the
    list of parent hashes (first parent first).
    """
    out = _run_git(
        ["log", "--merges", "--pretty=format:%P", f"origin/{production}..origin/{staging}"],
        cwd=_cwd(repo_dir),
        log=log,
    )
    return [line.split() for line in out.splitlines() if line.strip()]


def non_merge_commits(
    production: str,
    staging: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> list[str]:
    """Hashes of non-merge commits in origin/<production>..origin/<staging>."""
    out = _run_git(
        ["log", "--no-merges", "--pretty=format:%H", f"origin/{production}..origin/{staging}"],
        cwd=_cwd(repo_dir),
        log=log,
    )
    return [line.strip() for line in out.splitlines() if line.strip()]


def list_pull_refs(repo_dir: Path | None = None, log: logging.Logger | None = None) -> list[CommitRef]:
    """Remote pull request head refs as reported by ``git ls-remote``."""
    out = _run_git(["ls-remote", "origin", PULL_REFS_PATTERN], cwd=_cwd(repo_dir), log=log)
    refs = []
    for line in out.splitlines():
        parts = line.split()
        if len(parts) != 2:
            if line.strip() and log:
                log.warning("Unexpected ls-remote line: %r", line)
            continue
        refs.append(CommitRef(sha=parts[0], ref=parts[1]))
    return refs


def is_ancestor(
    sha: str,
    ref: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> bool:
    """True if ``sha`` is reachable from ``ref`` (their merge base is ``sha`` itself)."""
    out = _run_git(["merge-base", sha, ref], cwd=_cwd(repo_dir), log=log)
    return out.strip() == sha


