"""Resolve the origin remote URL into host, owner/name and scheme."""

import logging
import re
from pathlib import Path
from urllib.parse import urlparse

from pr_release.models import DEFAULT_HOST, RemoteRepository
from pr_release.services.git import read_config

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*://")
# user@host:path (scp-like syntax understood by git)
_SCP_RE = re.compile(r"^(?:(?P<user>[^@/]+)@)?(?P<host>[^:/]+):(?P<path>.*)$")


class RemoteURLError(ValueError):
    """Raised when a remote URL cannot be parsed into host and path."""

    pass


def _normalize(url: str) -> str:
    """Rewrite scp-style remotes (git@host:org/repo.git) as ssh:// URLs."""
    if _SCHEME_RE.match(url):
        return url
    m = _SCP_RE.match(url)
    if not m:
        raise RemoteURLError(f"Unrecognized remote URL: {url!r}")
    user = f"{m.group('user')}@" if m.group("user") else ""
    return f"ssh://{user}{m.group('host')}/{m.group('path').lstrip('/')}"


def parse_remote_url(url: str) -> RemoteRepository:
    """Parse a git remote URL.

    The default public host is reported as ``host=None``; the scheme is
    ``http`` only when the URL itself used plain http.
    """
    url = url.strip()
    parsed = urlparse(_normalize(url))
    if not parsed.hostname:
        raise RemoteURLError(f"Remote URL has no host: {url!r}")
    path = parsed.path.lstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    if not path:
        raise RemoteURLError(f"Remote URL has no repository path: {url!r}")
    host = parsed.hostname
    return RemoteRepository(
        host=None if host == DEFAULT_HOST else host,
        repository=path,
        scheme="http" if parsed.scheme == "http" else "https",
    )


def resolve_remote(repo_dir: Path | None = None, log: logging.Logger | None = None) -> RemoteRepository:
    """Read remote.origin.url and parse it."""
    url = read_config("remote.origin.url", repo_dir=repo_dir, log=log)
    if not url:
        raise RemoteURLError("remote.origin.url is not set")
    remote = parse_remote_url(url)
    if log:
        log.debug(
            "Resolved origin | host=%s | repository=%s | scheme=%s",
            remote.host or DEFAULT_HOST,
            remote.repository,
            remote.scheme,
        )
    return remote
