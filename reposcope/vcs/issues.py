"""Filtered issue / pull-request listing."""

from __future__ import annotations

import logging
from typing import Literal

from reposcope.errors import SourceHostError
from reposcope.identity import RepositoryIdentity
from reposcope.vcs.base import SourceHost
from reposcope.vcs.models import FilteredIssue

logger = logging.getLogger(__name__)

IssueType = Literal["issue", "pr"]
IssueSort = Literal["created-desc", "created-asc", "comments-desc"]

MAX_ISSUES = 30

# sort mode -> (search sort field, order)
_SORTS: dict[str, tuple[str, str]] = {
    "created-desc": ("created", "desc"),
    "created-asc": ("created", "asc"),
    "comments-desc": ("comments", "desc"),
}


def build_issue_query(
    identity: RepositoryIdentity,
    labels: list[str] | None = None,
    type_: IssueType | None = None,
) -> str:
    """Compose the search query. Multiple labels are OR-ed."""
    query = f"repo:{identity.slug} is:{type_ or 'issue'}"
    if labels:
        query += " label:" + ",".join(f'"{label}"' for label in labels)
    return query


async def list_filtered_issues(
    host: SourceHost,
    identity: RepositoryIdentity,
    labels: list[str] | None = None,
    type_: IssueType | None = None,
    sort: IssueSort | None = None,
) -> list[FilteredIssue]:
    """Return up to 30 matching issues or PRs. Search failures yield []."""
    query = build_issue_query(identity, labels, type_)
    sort_field, order = _SORTS.get(sort or "created-desc", _SORTS["created-desc"])
    try:
        issues = await host.search_issues(
            query, sort=sort_field, order=order, limit=MAX_ISSUES
        )
    except SourceHostError as e:
        logger.warning("Failed to fetch filtered issues for %s: %s", identity, e)
        return []
    return issues[:MAX_ISSUES]
