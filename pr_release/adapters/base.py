"""Abstract base for code-hosting platform adapters."""

from abc import ABC, abstractmethod
from typing import List

from pr_release.models import ChangedFile, DeviceCode, PullRequest


class GitPlatformError(Exception):
    """Raised when a code-hosting API call fails."""

    pass


class AuthorizationPendingError(GitPlatformError):
    """The user has not finished the device login yet; poll again later."""

    def __init__(self, message: str, slow_down: bool = False) -> None:
        super().__init__(message)
        self.slow_down = slow_down


class GitPlatformAdapter(ABC):
    """Pull request operations needed to maintain a release pull request."""

    @abstractmethod
    def get_pull_request(self, repo: str, number: int) -> PullRequest:
        """Fetch pull request by number."""
        ...

    @abstractmethod
    def list_open_pull_requests(self, repo: str) -> List[PullRequest]:
        """List all open pull requests."""
        ...

    @abstractmethod
    def list_pull_request_files(self, repo: str, number: int) -> List[ChangedFile]:
        """List files changed by a pull request."""
        ...

    @abstractmethod
    def create_pull_request(
        self,
        repo: str,
        base: str,
        head: str,
        title: str,
        body: str,
    ) -> PullRequest | None:
        """Open a pull request from head into base."""
        ...

    @abstractmethod
    def update_pull_request(
        self,
        repo: str,
        number: int,
        title: str,
        body: str,
    ) -> PullRequest | None:
        """Replace title and body of a pull request."""
        ...

    @abstractmethod
    def add_labels(self, repo: str, number: int, labels: List[str]) -> List[str]:
        """Add labels to a pull request; return the resulting label names."""
        ...

    @abstractmethod
    def search_pull_requests(self, repo: str, sha: str) -> List[int]:
        """Numbers of closed pull requests containing a commit."""
        ...

    @abstractmethod
    def request_device_code(self, client_id: str, scopes: List[str]) -> DeviceCode:
        """Start a device-flow login."""
        ...

    @abstractmethod
    def poll_device_token(self, client_id: str, device_code: str) -> str:
        """Exchange a device code for an access token.

        Raises AuthorizationPendingError while the user has not confirmed.
        """
        ...
