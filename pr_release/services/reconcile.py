"""Merge a freshly rendered release body into the existing one.

Lines are aligned with a longest-common-subsequence table and walked in
balanced order: between two matched lines, unmatched old/new lines are
paired up as changes while both sides have some left, then the rest are
reported as deletions and insertions.

Policy per event:

- ``=`` (equal) and ``+`` (only in the new body): keep the new line.
- ``-`` (only in the old body): keep the old line, so manual additions
  survive regeneration.
- ``!`` (changed): if both lines are checklist items keep the old one
  (its check state wins); otherwise keep both, old first.
"""

import logging
import re
from typing import Iterator, Literal, Sequence

from pydantic import BaseModel

EQUAL = "="
INSERT = "+"
DELETE = "-"
CHANGE = "!"

CHECKLIST_RE = re.compile(r"^- \[[ xX]\] ")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


class DiffEvent(BaseModel):
    """One step of the alignment between old and new lines."""

    action: Literal["=", "+", "-", "!"]
    old: str | None = None
    new: str | None = None


def split_lines(text: str) -> list[str]:
    if not text:
        return []
    return _LINE_SPLIT_RE.split(text)


def is_checklist_line(line: str) -> bool:
    return bool(CHECKLIST_RE.match(line))


def _lcs_matches(old: Sequence[str], new: Sequence[str]) -> list[tuple[int, int]]:
    """Index pairs of one longest common subsequence of ``old`` and ``new``."""
    n, m = len(old), len(new)
    # table[i][j]: LCS length of old[i:] and new[j:]
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = table[i], table[i + 1]
        for j in range(m - 1, -1, -1):
            if old[i] == new[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])
    matches = []
    i = j = 0
    while i < n and j < m:
        if old[i] == new[j]:
            matches.append((i, j))
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            i += 1
        else:
            j += 1
    return matches


def align_lines(old: Sequence[str], new: Sequence[str]) -> Iterator[DiffEvent]:
    """Yield balanced diff events turning ``old`` into ``new``."""
    i = j = 0
    for match_i, match_j in _lcs_matches(old, new) + [(len(old), len(new))]:
        while i < match_i or j < match_j:
            if i < match_i and j < match_j:
                yield DiffEvent(action=CHANGE, old=old[i], new=new[j])
                i += 1
                j += 1
            elif i < match_i:
                yield DiffEvent(action=DELETE, old=old[i])
                i += 1
            else:
                yield DiffEvent(action=INSERT, new=new[j])
                j += 1
        if match_i < len(old):
            yield DiffEvent(action=EQUAL, old=old[i], new=new[j])
            i += 1
            j += 1


def merge_events(events: Iterator[DiffEvent], log: logging.Logger | None = None) -> list[str]:
    """Apply the reconciliation policy to alignment events."""
    lines: list[str] = []
    for event in events:
        if event.action in (EQUAL, INSERT):
            lines.append(event.new)
        elif event.action == DELETE:
            lines.append(event.old)
        elif event.action == CHANGE:
            if is_checklist_line(event.old) and is_checklist_line(event.new):
                lines.append(event.old)
            else:
                lines.append(event.old)
                lines.append(event.new)
        elif log:
            log.warning("Unexpected diff event: %r", event)
    return lines


def reconcile_body(
    old_body: str | None,
    new_body: str,
    log: logging.Logger | None = None,
) -> str:
    """Return ``new_body`` merged into ``old_body``.

    ``old_body`` is None when there is no release pull request yet; the
    new body is returned as is.
    """
    if old_body is None:
        return new_body
    events = align_lines(split_lines(old_body), split_lines(new_body))
    return "\n".join(merge_events(events, log=log))
