"""Release pull request orchestration.

One run walks these states in order::

    RESOLVE_CONFIG -> FETCH_MERGE_SET -> LOCATE_OR_CREATE_RELEASE_PR
        -> RENDER_AND_RECONCILE -> PERSIST -> LABEL -> DONE

Every run-scoped value (remote, branches, flags) lives on RunContext; the
module keeps no state between calls.
"""

import logging
import sys
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Callable, TextIO

from pydantic import BaseModel, Field

from pr_release.adapters import GitHubAdapter, GitPlatformAdapter, GitPlatformError
from pr_release.config import ReleaseSettings, load_settings
from pr_release.models import ChangedFile, DummyPullRequest, PullRequest, ReleasePullRequest, RemoteRepository
from pr_release.services import git
from pr_release.services.auth import resolve_token
from pr_release.services.checklist import load_template, render_release
from pr_release.services.merge_set import NothingToReleaseError, calculate_merge_set, collect_squashed
from pr_release.services.reconcile import reconcile_body
from pr_release.services.remote import resolve_remote

PLACEHOLDER_TITLE = "Preparing release pull request..."


class ExitCode(IntEnum):
    OK = 0
    NOTHING_TO_RELEASE = 1
    CREATE_FAILED = 2
    UPDATE_FAILED = 3
    LABEL_FAILED = 4
    FATAL = 5


class ReleaseState(str, Enum):
    RESOLVE_CONFIG = "resolve_config"
    FETCH_MERGE_SET = "fetch_merge_set"
    LOCATE_OR_CREATE_RELEASE_PR = "locate_or_create_release_pr"
    RENDER_AND_RECONCILE = "render_and_reconcile"
    PERSIST = "persist"
    LABEL = "label"
    DONE = "done"


class PersistenceError(Exception):
    """A create, update or label call did not succeed."""

    def __init__(self, message: str, exit_code: ExitCode) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class RunContext(BaseModel):
    """Everything one run needs to know, resolved once up front."""

    repo_dir: Path
    remote: RemoteRepository
    production: str = "master"
    staging: str = "staging"
    labels: list[str] = Field(default_factory=list)
    template_path: Path | None = None
    dry_run: bool = False
    json_output: bool = False
    fetch: bool = True
    squashed: bool = False
    overwrite_description: bool = False

    @property
    def repository(self) -> str:
        return self.remote.repository

    @classmethod
    def from_settings(
        cls,
        repo_dir: Path,
        remote: RemoteRepository,
        settings: ReleaseSettings,
        **flags: Any,
    ) -> "RunContext":
        return cls(
            repo_dir=repo_dir,
            remote=remote,
            production=settings.branch_production,
            staging=settings.branch_staging,
            labels=settings.label_list,
            template_path=Path(settings.template) if settings.template else None,
            **flags,
        )


class ReleaseResult(BaseModel):
    """Outcome of a run: the release pull request and what went into it."""

    release_pull_request: ReleasePullRequest
    merged_pull_requests: list[PullRequest]
    changed_files: list[ChangedFile] = Field(default_factory=list)
    title: str
    body: str

    def to_payload(self) -> dict[str, Any]:
        """Raw API payloads, as printed by ``--json``."""
        return {
            "release_pull_request": self.release_pull_request.to_payload(),
            "merged_pull_requests": [pr.to_payload() for pr in self.merged_pull_requests],
            "changed_files": [f.to_payload() for f in self.changed_files],
        }


def _enter(state: ReleaseState, log: logging.Logger | None) -> None:
    if log:
        log.debug("State: %s", state.value)


def resolve_context(
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
    adapter_factory: Callable[[RemoteRepository, str], GitPlatformAdapter] | None = None,
    **flags: Any,
) -> tuple[RunContext, GitPlatformAdapter]:
    """RESOLVE_CONFIG: locate the repository, origin, settings and API token."""
    _enter(ReleaseState.RESOLVE_CONFIG, log)
    root = git.repository_root(repo_dir, log=log)
    remote = resolve_remote(root, log=log)
    settings = load_settings(root, host=remote.host, log=log)
    token = resolve_token(settings, remote, repo_dir=root, log=log)
    if adapter_factory is None:
        adapter = GitHubAdapter(
            token=token, api_url=remote.api_url, verify_ssl=remote.verify_ssl, web_url=remote.web_url
        )
    else:
        adapter = adapter_factory(remote, token)
    ctx = RunContext.from_settings(root, remote, settings, **flags)
    if log:
        log.info(
            "Repository %s | %s <- %s | dry_run=%s",
            ctx.repository,
            ctx.production,
            ctx.staging,
            ctx.dry_run,
        )
    return ctx, adapter


def merged_pull_request_numbers(
    ctx: RunContext,
    adapter: GitPlatformAdapter,
    log: logging.Logger | None = None,
) -> list[int]:
    """Numbers of pull requests merged into staging but not into production."""
    parents = git.merge_parents(ctx.production, ctx.staging, ctx.repo_dir, log=log)
    refs = git.list_pull_refs(ctx.repo_dir, log=log)
    production_ref = f"origin/{ctx.production}"

    def is_released(sha: str) -> bool:
        return git.is_ancestor(sha, production_ref, ctx.repo_dir, log=log)

    numbers = calculate_merge_set(parents, refs, is_released, log=log)
    if ctx.squashed:
        shas = git.non_merge_commits(ctx.production, ctx.staging, ctx.repo_dir, log=log)
        numbers += collect_squashed(
            shas,
            lambda sha: adapter.search_pull_requests(ctx.repository, sha),
            known=numbers,
            log=log,
        )
    if not numbers:
        raise NothingToReleaseError("No pull requests to be released")
    return numbers


def fetch_merge_set(
    ctx: RunContext,
    adapter: GitPlatformAdapter,
    log: logging.Logger | None = None,
) -> list[PullRequest]:
    """FETCH_MERGE_SET: update origin and resolve the merged pull requests."""
    _enter(ReleaseState.FETCH_MERGE_SET, log)
    if ctx.fetch:
        git.fetch_origin(ctx.repo_dir, log=log)
    numbers = merged_pull_request_numbers(ctx, adapter, log=log)
    if log:
        log.info("Pull requests to release: %s", ", ".join(f"#{n}" for n in numbers))
    return [adapter.get_pull_request(ctx.repository, number) for number in numbers]


def find_release_pull_request(ctx: RunContext, adapter: GitPlatformAdapter) -> PullRequest | None:
    """Open pull request from staging into production, if any."""
    for pr in adapter.list_open_pull_requests(ctx.repository):
        if pr.head_ref == ctx.staging and pr.base_ref == ctx.production:
            return pr
    return None


def locate_or_create_release_pull_request(
    ctx: RunContext,
    adapter: GitPlatformAdapter,
    log: logging.Logger | None = None,
) -> tuple[ReleasePullRequest, list[ChangedFile], str | None]:
    """LOCATE_OR_CREATE_RELEASE_PR.

    Returns the release pull request (a DummyPullRequest on a dry run with
    none open), its changed files and its current body (None when it did
    not exist before this run).
    """
    _enter(ReleaseState.LOCATE_OR_CREATE_RELEASE_PR, log)
    existing = find_release_pull_request(ctx, adapter)
    if existing is not None:
        if log:
            log.info("Found release pull request #%s", existing.number)
        files = adapter.list_pull_request_files(ctx.repository, existing.number)
        return existing, files, existing.body

    if ctx.dry_run:
        if log:
            log.info("No release pull request open; dry run uses a placeholder")
        return DummyPullRequest(), [], None

    try:
        created = adapter.create_pull_request(ctx.repository, ctx.production, ctx.staging, PLACEHOLDER_TITLE, "")
    except GitPlatformError as e:
        raise PersistenceError(f"Failed to create a new pull request: {e}", ExitCode.CREATE_FAILED) from e
    if not created:
        raise PersistenceError("Failed to create a new pull request", ExitCode.CREATE_FAILED)
    if log:
        log.info("Created release pull request #%s", created.number)
    files = adapter.list_pull_request_files(ctx.repository, created.number)
    return created, files, None


def render_and_reconcile(
    ctx: RunContext,
    release_pr: ReleasePullRequest,
    merged: list[PullRequest],
    changed_files: list[ChangedFile],
    old_body: str | None,
    log: logging.Logger | None = None,
) -> tuple[str, str]:
    """RENDER_AND_RECONCILE: render the checklist and merge it into the old body."""
    _enter(ReleaseState.RENDER_AND_RECONCILE, log)
    template_text = load_template(ctx.template_path, root=ctx.repo_dir) if ctx.template_path else None
    title, body = render_release(release_pr, merged, template_text=template_text, changed_files=changed_files)
    if old_body is not None and not ctx.overwrite_description:
        body = reconcile_body(old_body, body, log=log)
    return title, body


def persist(
    ctx: RunContext,
    adapter: GitPlatformAdapter,
    release_pr: ReleasePullRequest,
    title: str,
    body: str,
    out: TextIO,
    log: logging.Logger | None = None,
) -> ReleasePullRequest:
    """PERSIST: write title and body, or print them on a dry run."""
    _enter(ReleaseState.PERSIST, log)
    if ctx.dry_run:
        print("Dry-run. Not updating PR", file=out)
        print(title, file=out)
        print(body, file=out)
        return release_pr
    try:
        updated = adapter.update_pull_request(ctx.repository, release_pr.number, title, body)
    except GitPlatformError as e:
        raise PersistenceError(f"Failed to update a pull request: {e}", ExitCode.UPDATE_FAILED) from e
    if not updated:
        raise PersistenceError("Failed to update a pull request", ExitCode.UPDATE_FAILED)
    if log:
        log.info("Updated release pull request %s", updated.html_link())
    return updated


def apply_labels(
    ctx: RunContext,
    adapter: GitPlatformAdapter,
    release_pr: ReleasePullRequest,
    log: logging.Logger | None = None,
) -> None:
    """LABEL: add configured labels (skipped on a dry run or with none set)."""
    _enter(ReleaseState.LABEL, log)
    if ctx.dry_run or not ctx.labels:
        return
    try:
        added = adapter.add_labels(ctx.repository, release_pr.number, ctx.labels)
    except GitPlatformError as e:
        raise PersistenceError(f"Failed to add labels: {e}", ExitCode.LABEL_FAILED) from e
    if not added:
        raise PersistenceError("Failed to add labels", ExitCode.LABEL_FAILED)
    if log:
        log.info("Labels %s added to #%s", ", ".join(ctx.labels), release_pr.number)


def run_release(
    ctx: RunContext,
    adapter: GitPlatformAdapter,
    out: TextIO | None = None,
    log: logging.Logger | None = None,
) -> ReleaseResult:
    """Run FETCH_MERGE_SET through DONE for an already resolved context.

    Raises:
        NothingToReleaseError: No pull request waits for release.
        PersistenceError: Creating, updating or labelling failed.
        GitRunnerError, GitPlatformError: Transport failures.
    """
    out = out if out is not None else sys.stdout
    merged = fetch_merge_set(ctx, adapter, log=log)
    release_pr, changed_files, old_body = locate_or_create_release_pull_request(ctx, adapter, log=log)
    title, body = render_and_reconcile(ctx, release_pr, merged, changed_files, old_body, log=log)
    release_pr = persist(ctx, adapter, release_pr, title, body, out, log=log)
    apply_labels(ctx, adapter, release_pr, log=log)
    _enter(ReleaseState.DONE, log)
    return ReleaseResult(
        release_pull_request=release_pr,
        merged_pull_requests=merged,
        changed_files=changed_files,
        title=title,
        body=body,
    )
