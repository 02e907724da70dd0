"""Data models for pull requests, changed files, commits and remotes (Pydantic)."""

from pr_release.models.auth import DeviceCode
from pr_release.models.commit import CommitRef
from pr_release.models.pr import ChangedFile, DummyPullRequest, PullRequest, ReleasePullRequest
from pr_release.models.remote import DEFAULT_HOST, RemoteRepository

__all__ = [
    "ChangedFile",
    "CommitRef",
    "DEFAULT_HOST",
    "DeviceCode",
    "DummyPullRequest",
    "PullRequest",
    "ReleasePullRequest",
    "RemoteRepository",
]
