"""GitHub source host using PyGithub."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from functools import cached_property
from typing import TypeVar

from github import Auth, Github, GithubException
from github.Repository import Repository

from reposcope.errors import (
    SourceHostError,
    UpstreamNotFoundError,
    UpstreamRateLimitedError,
)
from reposcope.identity import RepositoryIdentity
from reposcope.vcs.base import SourceHost
from reposcope.vcs.models import (
    CommitInfo,
    Contributor,
    FilteredIssue,
    IssueLabel,
    IssueUser,
    RepoMetadata,
    TreeItem,
)

T = TypeVar("T")

_DEFAULT_BASE_URL = "https://api.github.com"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def translate_github_error(e: GithubException, what: str) -> SourceHostError:
    """Map a PyGithub exception onto the source-host error taxonomy."""
    if e.status == 404:
        return UpstreamNotFoundError(
            f"{what}: not found. Is it private? Make sure your GitHub token has repo access."
        )
    if e.status in (403, 429):
        return UpstreamRateLimitedError(
            f"{what}: GitHub API rate limit exceeded. "
            "Try again in an hour or add a GITHUB_TOKEN."
        )
    return SourceHostError(f"{what}: GitHub returned {e.status}")


class GitHubProvider(SourceHost):
    """GitHub implementation of SourceHost.

    PyGithub is synchronous, so all blocking calls are wrapped with
    asyncio.to_thread() to avoid blocking the event loop. Every request
    carries a bounded timeout so a dead upstream cannot hang an analysis.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: int = 15,
    ) -> None:
        self._token = token or None
        self._base_url = base_url
        self._timeout = timeout

    @cached_property
    def _client(self) -> Github:
        if self._token:
            return Github(
                auth=Auth.Token(self._token),
                base_url=self._base_url,
                timeout=self._timeout,
            )
        return Github(base_url=self._base_url, timeout=self._timeout)

    def _repo(self, identity: RepositoryIdentity, lazy: bool = True) -> Repository:
        return self._client.get_repo(identity.slug, lazy=lazy)

    async def _call(self, fn: Callable[[], T], what: str) -> T:
        try:
            return await asyncio.to_thread(fn)
        except GithubException as e:
            raise translate_github_error(e, what) from e
        except OSError as e:
            # requests' transport errors (timeouts, resets) subclass OSError
            raise SourceHostError(f"{what}: {e}") from e

    async def get_repo_metadata(self, identity: RepositoryIdentity) -> RepoMetadata:
        def _sync() -> RepoMetadata:
            repo = self._repo(identity, lazy=False)
            return RepoMetadata(
                full_name=repo.full_name,
                description=repo.description,
                language=repo.language,
                stars=repo.stargazers_count,
                forks=repo.forks_count,
                watchers=repo.watchers_count,
                default_branch=repo.default_branch or "main",
                homepage=repo.homepage,
                topics=list(repo.topics or []),
                created_at=_iso(repo.created_at),
                updated_at=_iso(repo.updated_at),
                pushed_at=_iso(repo.pushed_at),
                size=repo.size or 0,
                is_private=bool(repo.private),
                license=repo.license.name if repo.license else None,
            )

        return await self._call(_sync, f"repository {identity.slug}")

    async def list_recent_commits(
        self, identity: RepositoryIdentity, limit: int = 30
    ) -> list[CommitInfo]:
        def _sync() -> list[CommitInfo]:
            commits = []
            for c in self._repo(identity).get_commits()[:limit]:
                git_author = c.commit.author
                author = (git_author.name if git_author else None) or (
                    c.author.login if c.author else None
                )
                commits.append(
                    CommitInfo(
                        sha=c.sha[:7],
                        message=c.commit.message.split("\n")[0][:100],
                        author=author or "Unknown",
                        date=_iso(git_author.date) if git_author else "",
                        url=c.html_url,
                    )
                )
            return commits

        return await self._call(_sync, f"commits of {identity.slug}")

    async def list_contributors(
        self, identity: RepositoryIdentity, limit: int = 15
    ) -> list[Contributor]:
        def _sync() -> list[Contributor]:
            return [
                Contributor(
                    login=u.login or "ghost",
                    avatar_url=u.avatar_url or "",
                    html_url=u.html_url or "",
                    contributions=u.contributions or 0,
                )
                for u in self._repo(identity).get_contributors()[:limit]
            ]

        return await self._call(_sync, f"contributors of {identity.slug}")

    async def count_search_results(self, query: str) -> int:
        return await self._call(
            lambda: self._client.search_issues(query).totalCount,
            f"search {query!r}",
        )

    async def count_deployments(self, identity: RepositoryIdentity) -> int:
        return await self._call(
            lambda: len(self._repo(identity).get_deployments().get_page(0)[:1]),
            f"deployments of {identity.slug}",
        )

    async def get_file_tree(
        self, identity: RepositoryIdentity, ref: str
    ) -> list[TreeItem]:
        def _sync() -> list[TreeItem]:
            tree = self._repo(identity).get_git_tree(ref, recursive=True)
            return [
                TreeItem(path=el.path, type=el.type, size=el.size)
                for el in tree.tree
                if el.path
            ]

        return await self._call(_sync, f"tree of {identity.slug}@{ref}")

    async def get_file_content(self, identity: RepositoryIdentity, path: str) -> str:
        def _sync() -> str:
            content = self._repo(identity).get_contents(path)
            if isinstance(content, list):
                raise SourceHostError(f"Path '{path}' is a directory, not a file.")
            # files over 1 MB come back with encoding "none" and no inline body
            if content.encoding != "base64":
                raise SourceHostError(f"Path '{path}' is too large to fetch.")
            try:
                return content.decoded_content.decode("utf-8")
            except UnicodeDecodeError as e:
                raise SourceHostError(f"Path '{path}' is not a text file.") from e

        return await self._call(_sync, f"file {identity.slug}:{path}")

    async def search_issues(
        self,
        query: str,
        sort: str = "created",
        order: str = "desc",
        limit: int = 30,
    ) -> list[FilteredIssue]:
        def _sync() -> list[FilteredIssue]:
            results = self._client.search_issues(query, sort=sort, order=order)
            return [
                FilteredIssue(
                    id=item.id,
                    number=item.number,
                    title=item.title,
                    state=item.state,
                    html_url=item.html_url,
                    created_at=_iso(item.created_at) or "",
                    user=IssueUser(
                        login=item.user.login if item.user else "ghost",
                        avatar_url=item.user.avatar_url if item.user else "",
                    ),
                    labels=[
                        IssueLabel(name=label.name, color=label.color or "6366f1")
                        for label in item.labels
                    ],
                    comments=item.comments or 0,
                )
                for item in results[:limit]
            ]

        return await self._call(_sync, f"search {query!r}")
