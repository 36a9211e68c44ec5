"""Source-host providers for RepoScope."""

from reposcope.config.models import VCSConfig
from reposcope.vcs.base import SourceHost
from reposcope.vcs.github import GitHubProvider
from reposcope.vcs.issues import list_filtered_issues
from reposcope.vcs.models import (
    CommitInfo,
    CommitSummary,
    Contributor,
    FilteredIssue,
    KeyFile,
    RepoMetadata,
    RepoStatus,
    TechStack,
    TechStackCategory,
    TreeItem,
)


def create_source_host(config: VCSConfig, token: str | None) -> SourceHost:
    """Create a source host bound to the caller's credential.

    The token is the opaque per-user credential supplied by the
    authentication boundary; None means anonymous access.
    """
    if config.provider != "github":
        raise ValueError(
            f"Unsupported VCS provider: {config.provider!r}. "
            "Currently only 'github' is supported."
        )
    return GitHubProvider(token=token, base_url=config.base_url, timeout=config.timeout)


__all__ = [
    "CommitInfo",
    "CommitSummary",
    "Contributor",
    "FilteredIssue",
    "GitHubProvider",
    "KeyFile",
    "RepoMetadata",
    "RepoStatus",
    "SourceHost",
    "TechStack",
    "TechStackCategory",
    "TreeItem",
    "create_source_host",
    "list_filtered_issues",
]
