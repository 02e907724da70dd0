"""Git operations: history queries, pull request refs, scoped config."""

from pr_release.services.git._run import GitRunnerError
from pr_release.services.git.config import (
    LOCAL_CONFIG_FILE,
    config_key,
    lookup_config,
    read_config,
    write_global_config,
)
from pr_release.services.git.history import (
    PULL_REFS_PATTERN,
    fetch_origin,
    is_ancestor,
    list_pull_refs,
    merge_parents,
    non_merge_commits,
    repository_root,
)

__all__ = [
    "GitRunnerError",
    "LOCAL_CONFIG_FILE",
    "PULL_REFS_PATTERN",
    "config_key",
    "fetch_origin",
    "is_ancestor",
    "list_pull_refs",
    "lookup_config",
    "merge_parents",
    "non_merge_commits",
    "read_config",
    "repository_root",
    "write_global_config",
]
