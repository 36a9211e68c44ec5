"""Abstract source-host interface."""

from abc import ABC, abstractmethod

from reposcope.identity import RepositoryIdentity
from reposcope.vcs.models import (
    CommitInfo,
    Contributor,
    FilteredIssue,
    RepoMetadata,
    TreeItem,
)


class SourceHost(ABC):
    """Read-only view of a source-hosting API, bound to one credential.

    Implementations raise UpstreamNotFoundError / UpstreamRateLimitedError
    for 404 / 403 responses and SourceHostError for any other failure.
    """

    @abstractmethod
    async def get_repo_metadata(self, identity: RepositoryIdentity) -> RepoMetadata:
        ...

    @abstractmethod
    async def list_recent_commits(
        self, identity: RepositoryIdentity, limit: int = 30
    ) -> list[CommitInfo]:
        ...

    @abstractmethod
    async def list_contributors(
        self, identity: RepositoryIdentity, limit: int = 15
    ) -> list[Contributor]:
        ...

    @abstractmethod
    async def count_search_results(self, query: str) -> int:
        """Total hits for an issue/PR search query."""
        ...

    @abstractmethod
    async def count_deployments(self, identity: RepositoryIdentity) -> int:
        """Deployment presence: 0 when none exist, otherwise at least 1."""
        ...

    @abstractmethod
    async def get_file_tree(
        self, identity: RepositoryIdentity, ref: str
    ) -> list[TreeItem]:
        """Flattened recursive tree at *ref*."""
        ...

    @abstractmethod
    async def get_file_content(self, identity: RepositoryIdentity, path: str) -> str:
        """Decoded text content of a file on the default branch.

        Args:
            identity: Repository to read from.
            path: File path within the repository.
        """
        ...

    @abstractmethod
    async def search_issues(
        self,
        query: str,
        sort: str = "created",
        order: str = "desc",
        limit: int = 30,
    ) -> list[FilteredIssue]:
        ...
