"""Read and write ``pr-release.*`` keys in git config.

Lookup order for a key: the repository-local ``.git-pr-release`` file
(always unscoped), then the regular git config chain under
``pr-release.<host>.<key>`` for enterprise hosts or ``pr-release.<key>``
for the default host.
"""

import logging
from pathlib import Path

from pr_release.services.git._run import GitRunnerError, _run_git

SECTION = "pr-release"
LOCAL_CONFIG_FILE = ".git-pr-release"


def config_key(key: str, host: str | None = None) -> str:
    """Full git config key, e.g. ``pr-release.ghe.example.com.token``."""
    if host:
        return f"{SECTION}.{host}.{key}"
    return f"{SECTION}.{key}"


def read_config(
    key: str,
    repo_dir: Path | None = None,
    file: Path | None = None,
    log: logging.Logger | None = None,
) -> str | None:
    """Return the value of a git config key, or None when unset.

    ``git config --get`` exits non-zero for a missing key (or a missing
    ``file``); that is reported as None rather than an error.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    args = ["config"]
    if file is not None:
        args += ["-f", str(file)]
    args += ["--get", key]
    try:
        value = _run_git(args, cwd=cwd).strip()
    except GitRunnerError:
        if log:
            log.debug("Git config %s is not set", key)
        return None
    return value or None


def lookup_config(
    key: str,
    repo_dir: Path | None = None,
    host: str | None = None,
    log: logging.Logger | None = None,
) -> str | None:
    """Resolve ``key``: the local file first, then the host-scoped git config key.

    On an enterprise host only ``pr-release.<host>.<key>`` is read from git
    config; the plain ``pr-release.<key>`` belongs to the default host.
    """
    root = Path(repo_dir) if repo_dir is not None else Path.cwd()
    local_file = root / LOCAL_CONFIG_FILE
    if local_file.is_file():
        value = read_config(config_key(key), repo_dir=root, file=local_file, log=log)
        if value is not None:
            return value
    return read_config(config_key(key, host), repo_dir=root, log=log)


def write_global_config(
    key: str,
    value: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Persist a key to the user's global git config."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["config", "--global", key, value], cwd=cwd, log=log)
    if log:
        log.info("Saved %s to global git config", key)
