"""Code-hosting platform adapters (base and implementations)."""

from pr_release.adapters.base import AuthorizationPendingError, GitPlatformAdapter, GitPlatformError
from pr_release.adapters.github import GitHubAdapter

__all__ = ["AuthorizationPendingError", "GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
