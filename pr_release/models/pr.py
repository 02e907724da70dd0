"""Pull request models: real pull request, its "not created yet" stand-in, changed files."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class PullRequest(BaseModel):
    """Pull request as returned by the code-hosting API."""

    kind: Literal["pull_request"] = "pull_request"
    number: int
    title: str
    body: str = ""
    user_login: str | None = None
    assignee_login: str | None = None
    head_ref: str = ""
    base_ref: str = ""
    state: str = "open"
    html_url: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    def mention(self) -> str:
        """Return " @login" for the assignee, else the author, else ""."""
        login = self.assignee_login or self.user_login
        return f" @{login}" if login else ""

    def to_checklist_item(self) -> str:
        return f"- [ ] #{self.number} {self.title}{self.mention()}"

    def html_link(self) -> str:
        return self.html_url or f"#{self.number}"

    def to_payload(self) -> dict[str, Any]:
        return dict(self.raw)


class DummyPullRequest(BaseModel):
    """Release pull request that does not exist yet (dry run without one).

    Exposes the same rendering surface as PullRequest with fixed
    placeholder values, so templates never have to check for None.
    """

    kind: Literal["dummy"] = "dummy"
    number: None = None
    title: str = ""
    body: str = ""
    user_login: None = None
    assignee_login: None = None
    head_ref: str = ""
    base_ref: str = ""
    state: str = "open"
    html_url: None = None

    def mention(self) -> str:
        return ""

    def to_checklist_item(self) -> str:
        return "- [ ] #??? (release pull request not created yet)"

    def html_link(self) -> str:
        return "(release pull request not created yet)"

    def to_payload(self) -> dict[str, Any]:
        return {}


ReleasePullRequest = PullRequest | DummyPullRequest


class ChangedFile(BaseModel):
    """File touched by a pull request."""

    filename: str
    status: str = "modified"
    additions: int = 0
    deletions: int = 0
    raw: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return dict(self.raw)
