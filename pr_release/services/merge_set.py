"""Work out which feature pull requests belong in the release.

A pull request is part of the release when its head commit was merged
into staging (it is the second parent of a merge commit in
production..staging) and it is not already reachable from production.
"""

import logging
import re
from typing import Callable, Iterable, Sequence

from pr_release.models import CommitRef

PULL_REF_RE = re.compile(r"^refs/pull/(\d+)/head$")


class NothingToReleaseError(Exception):
    """No pull request is waiting between production and staging."""

    pass


def feature_tips(merge_parents: Iterable[Sequence[str]]) -> set[str]:
    """Second parents of merge commits: the merged feature-branch heads."""
    return {parents[1] for parents in merge_parents if len(parents) > 1}


def pull_request_number(ref: str) -> int | None:
    """Parse N out of refs/pull/N/head; None when the ref does not match."""
    m = PULL_REF_RE.match(ref)
    return int(m.group(1)) if m else None


def calculate_merge_set(
    merge_parents: Iterable[Sequence[str]],
    pull_refs: Iterable[CommitRef],
    is_released: Callable[[str], bool],
    log: logging.Logger | None = None,
) -> list[int]:
    """Return pull request numbers to release, in the order refs were listed.

    Args:
        merge_parents: Parent hash lists of merge commits in the range.
        pull_refs: Remote pull request head refs (hash + ref name).
        is_released: Predicate telling whether a hash is already an
            ancestor of production.
        log: Optional logger.

    An empty list means nothing waits for release; the caller decides
    what that means for the run.
    """
    tips = feature_tips(merge_parents)
    numbers: list[int] = []
    for commit in pull_refs:
        if commit.sha not in tips:
            continue
        number = pull_request_number(commit.ref)
        if number is None:
            if log:
                log.warning("Invalid pull request ref: %s", commit.ref)
            continue
        if is_released(commit.sha):
            if log:
                log.debug("#%s (%s) is already merged into production", number, commit.sha)
            continue
        numbers.append(number)
    return numbers


def collect_squashed(
    shas: Iterable[str],
    search: Callable[[str], list[int]],
    known: Sequence[int] = (),
    log: logging.Logger | None = None,
) -> list[int]:
    """Pull request numbers found for squash-merged commits.

    ``search`` maps a commit hash to the closed pull requests containing
    it. Numbers already in ``known`` are not repeated.
    """
    seen = set(known)
    found: list[int] = []
    for sha in shas:
        for number in search(sha):
            if number in seen:
                continue
            if log:
                log.debug("#%s found for squashed commit %s", number, sha)
            seen.add(number)
            found.append(number)
    return found
