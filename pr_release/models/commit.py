"""Commit hash discovered under a ref name."""

from pydantic import BaseModel


class CommitRef(BaseModel):
    """Commit hash plus the ref it was listed under (e.g. refs/pull/7/head)."""

    sha: str
    ref: str
