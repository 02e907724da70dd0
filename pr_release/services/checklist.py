"""Render the release pull request title and body from a jinja2 template."""

from datetime import datetime
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, StrictUndefined, TemplateError

from pr_release.models import ChangedFile, PullRequest, ReleasePullRequest

DEFAULT_TEMPLATE = """\
Release {{ now.strftime("%Y-%m-%d %H:%M:%S %z") }}
{% for pr in pull_requests %}
{{ pr.to_checklist_item() }}
{% endfor %}
"""


class TemplateRenderError(Exception):
    """Raised when the body template cannot be loaded or rendered."""

    pass


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        undefined=StrictUndefined,
    )


def load_template(path: Path, root: Path | None = None) -> str:
    """Read a template file; relative paths are taken from ``root``."""
    path = Path(path)
    if not path.is_absolute() and root is not None:
        path = Path(root) / path
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise TemplateRenderError(f"Cannot read template {path}: {e}") from e


def split_title_body(text: str) -> tuple[str, str]:
    """First line is the title, everything after the first newline the body."""
    title, _, body = text.partition("\n")
    return title.rstrip("\r"), body


def render_release(
    release_pr: ReleasePullRequest,
    pull_requests: Sequence[PullRequest],
    template_text: str | None = None,
    changed_files: Sequence[ChangedFile] = (),
    now: datetime | None = None,
) -> tuple[str, str]:
    """Render (title, body) for the release pull request.

    The template sees ``release_pull_request``, ``pull_requests``,
    ``changed_files`` and ``now`` (timezone-aware local time by default).
    """
    if now is None:
        now = datetime.now().astimezone()
    try:
        template = _environment().from_string(template_text or DEFAULT_TEMPLATE)
        text = template.render(
            release_pull_request=release_pr,
            pull_requests=list(pull_requests),
            changed_files=list(changed_files),
            now=now,
        )
    except TemplateError as e:
        raise TemplateRenderError(f"Template rendering failed: {e}") from e
    return split_title_body(text)
