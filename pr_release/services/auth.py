"""Find an API token, or obtain one through a device-flow login and remember it.

The token comes from ``GIT_PR_RELEASE_TOKEN`` or git config. Without one
the user is shown a one-time code to enter in the browser while the
token endpoint is polled; the token is stored in the global git config
for the next run. The device flow needs the client ID of an OAuth app
(``pr-release.client-id`` or ``GIT_PR_RELEASE_CLIENT_ID``).
"""

import logging
import sys
import time
from pathlib import Path
from typing import Callable

from pr_release.adapters import AuthorizationPendingError, GitHubAdapter, GitPlatformAdapter
from pr_release.adapters.github import TOKEN_SCOPES
from pr_release.config import ReleaseSettings
from pr_release.models import RemoteRepository
from pr_release.services.git import config_key, write_global_config

MAX_POLL_ATTEMPTS = 60
SLOW_DOWN_SECONDS = 5


class AuthenticationChallengeError(Exception):
    """Raised when the device login was not completed in time or cannot start."""

    pass


def _notify(message: str) -> None:
    # stdout is reserved for the dry-run body and --json output
    print(message, file=sys.stderr)


def _default_adapter(remote: RemoteRepository) -> GitPlatformAdapter:
    return GitHubAdapter(token=None, api_url=remote.api_url, verify_ssl=remote.verify_ssl, web_url=remote.web_url)


def request_token(
    adapter: GitPlatformAdapter,
    client_id: str,
    notify: Callable[[str], None] = _notify,
    sleep: Callable[[float], None] = time.sleep,
    max_attempts: int = MAX_POLL_ATTEMPTS,
    log: logging.Logger | None = None,
) -> str:
    """Run a device-flow login and return the access token.

    Raises:
        AuthenticationChallengeError: Still pending after ``max_attempts`` polls.
        GitPlatformError: The login was denied, expired or the API failed.
    """
    code = adapter.request_device_code(client_id, TOKEN_SCOPES)
    notify(f"Open {code.verification_uri} and enter the code {code.user_code}")
    interval = code.interval
    for attempt in range(1, max_attempts + 1):
        sleep(interval)
        try:
            return adapter.poll_device_token(client_id, code.device_code)
        except AuthorizationPendingError as e:
            if e.slow_down:
                interval += SLOW_DOWN_SECONDS
            if log:
                log.debug("Device login pending (attempt %s/%s): %s", attempt, max_attempts, e)
    raise AuthenticationChallengeError(f"Device login not completed after {max_attempts} attempts")


def resolve_token(
    settings: ReleaseSettings,
    remote: RemoteRepository,
    repo_dir: Path | None = None,
    notify: Callable[[str], None] = _notify,
    sleep: Callable[[float], None] = time.sleep,
    adapter_factory: Callable[[RemoteRepository], GitPlatformAdapter] = _default_adapter,
    log: logging.Logger | None = None,
) -> str:
    """Return the configured token, or log in and save the new one globally."""
    if settings.token:
        return settings.token
    if not settings.client_id:
        raise AuthenticationChallengeError(
            f"No token configured for {remote.web_url}; set {config_key('token', remote.host)} "
            f"or {config_key('client-id', remote.host)} to log in through the browser"
        )

    if log:
        log.info("No token configured for %s; starting device login", remote.web_url)
    token = request_token(adapter_factory(remote), settings.client_id, notify=notify, sleep=sleep, log=log)
    write_global_config(config_key("token", remote.host), token, repo_dir=repo_dir, log=log)
    return token
