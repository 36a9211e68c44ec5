"""Evidence assembler: metadata, activity, tech stack, tree and key files."""

from __future__ import annotations

import asyncio
import logging

from reposcope.errors import SourceHostError
from reposcope.evidence.key_files import fetch_key_files, filter_tree
from reposcope.evidence.models import EvidenceBundle
from reposcope.evidence.tech_stack import detect_tech_stack
from reposcope.identity import RepositoryIdentity
from reposcope.vcs.base import SourceHost
from reposcope.vcs.models import (
    CommitSummary,
    Contributor,
    RepoMetadata,
    RepoStatus,
    TreeItem,
)

logger = logging.getLogger(__name__)

MAX_RECENT_COMMITS = 30
MAX_CONTRIBUTORS = 15
# Contributors summed for the commit-total estimate (first page only).
CONTRIBUTOR_TOTAL_PAGE = 100


class EvidenceAssembler:
    """Gathers everything the model needs about one repository.

    Metadata, commits, contributors, repo status and tech stack are fetched
    concurrently. The tree waits for metadata (it needs the default
    branch) and key files wait for the tree.

    Only the metadata fetch is fatal: its UpstreamNotFoundError /
    UpstreamRateLimitedError propagate. Every other sub-fetch degrades to
    an empty or zero value.
    """

    def __init__(self, host: SourceHost) -> None:
        self.host = host

    async def assemble(self, identity: RepositoryIdentity) -> EvidenceBundle:
        metadata, commits, contributors, repo_status, tech_stack = await asyncio.gather(
            self.host.get_repo_metadata(identity),
            self.get_commit_summary(identity),
            self.get_contributors(identity),
            self.get_repo_status(identity),
            detect_tech_stack(self.host, identity),
        )
        tree = await self.get_file_tree(identity, metadata)
        key_files = await fetch_key_files(self.host, identity, tree)
        logger.info(
            "Assembled evidence for %s: %d tree entries, %d key files",
            identity,
            len(tree),
            len(key_files),
        )
        return EvidenceBundle(
            identity=identity,
            metadata=metadata,
            commits=commits,
            contributors=contributors,
            repo_status=repo_status,
            tech_stack=tech_stack,
            file_tree=tree,
            key_files=key_files,
        )

    async def get_commit_summary(self, identity: RepositoryIdentity) -> CommitSummary:
        """Recent commits plus an approximate total.

        The total sums contributor contribution counts; it diverges from the
        true commit count on merged or rewritten history. Falls back to the
        number of recent commits when the contributor listing fails.
        """
        try:
            recent = await self.host.list_recent_commits(identity, MAX_RECENT_COMMITS)
        except SourceHostError as e:
            logger.warning("Commit listing failed for %s: %s", identity, e)
            return CommitSummary()

        total = len(recent)
        try:
            contributors = await self.host.list_contributors(
                identity, CONTRIBUTOR_TOTAL_PAGE
            )
            total = sum(c.contributions for c in contributors)
        except SourceHostError as e:
            logger.debug("Contributor stats unavailable for %s: %s", identity, e)
        return CommitSummary(total=total, recent=recent[:MAX_RECENT_COMMITS])

    async def get_contributors(self, identity: RepositoryIdentity) -> list[Contributor]:
        try:
            contributors = await self.host.list_contributors(identity, MAX_CONTRIBUTORS)
        except SourceHostError as e:
            logger.warning("Contributor listing failed for %s: %s", identity, e)
            return []
        return contributors[:MAX_CONTRIBUTORS]

    async def get_repo_status(self, identity: RepositoryIdentity) -> RepoStatus:
        """Issue/PR counts and deployment presence, each failing to zero."""
        slug = identity.slug
        queries = [
            f"repo:{slug} is:issue state:open",
            f"repo:{slug} is:issue state:closed",
            f"repo:{slug} is:pr state:open",
            f"repo:{slug} is:pr state:closed",
        ]
        results = await asyncio.gather(
            *(self._count(q) for q in queries),
            self._count_deployments(identity),
        )
        open_issues, closed_issues, open_prs, closed_prs, deployments = results
        return RepoStatus(
            open_issues=open_issues,
            closed_issues=closed_issues,
            open_prs=open_prs,
            closed_prs=closed_prs,
            total_deployments=deployments,
        )

    async def _count(self, query: str) -> int:
        try:
            return await self.host.count_search_results(query)
        except SourceHostError as e:
            logger.debug("Search count failed for %r: %s", query, e)
            return 0

    async def _count_deployments(self, identity: RepositoryIdentity) -> int:
        try:
            return await self.host.count_deployments(identity)
        except SourceHostError as e:
            logger.debug("Deployment count failed for %s: %s", identity, e)
            return 0

    async def get_file_tree(
        self, identity: RepositoryIdentity, metadata: RepoMetadata
    ) -> list[TreeItem]:
        try:
            items = await self.host.get_file_tree(
                identity, metadata.default_branch or "main"
            )
        except SourceHostError as e:
            logger.warning("Tree fetch failed for %s: %s", identity, e)
            return []
        return filter_tree(items)
