"""Persisted analysis records."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from reposcope.codec.models import RouteDetail
from reposcope.identity import RepositoryIdentity
from reposcope.schema import CamelModel
from reposcope.vcs.models import (
    CommitSummary,
    Contributor,
    KeyFile,
    RepoMetadata,
    RepoStatus,
    TechStack,
    TreeItem,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LLMAnalysis(CamelModel):
    overall_flow: str = ""
    architecture_diagram: str = ""
    routes: list[RouteDetail] = Field(default_factory=list)


class RepositoryAnalysis(CamelModel):
    """One live analysis per repository; rewrites replace it."""

    repo_url: str
    owner: str
    name: str
    metadata: RepoMetadata
    commits: CommitSummary = Field(default_factory=CommitSummary)
    contributors: list[Contributor] = Field(default_factory=list)
    repo_status: RepoStatus = Field(default_factory=RepoStatus)
    tech_stack: TechStack = Field(default_factory=TechStack)
    file_tree: list[TreeItem] = Field(default_factory=list)
    key_file_contents: list[KeyFile] = Field(default_factory=list)
    llm_analysis: LLMAnalysis = Field(default_factory=LLMAnalysis)
    analyzed_at: datetime = Field(default_factory=_utcnow)

    @property
    def identity(self) -> RepositoryIdentity:
        return RepositoryIdentity(owner=self.owner, name=self.name)


class RepositoryAnalysisSummary(CamelModel):
    repo_url: str
    owner: str
    name: str
    analyzed_at: datetime


class RouteAnalysisEntry(CamelModel):
    """Deep-dive result for one (repository, route) pair."""

    owner: str
    name: str
    route: str
    flow_visualization: str = ""
    execution_trace: str = ""
    cached_at: datetime = Field(default_factory=_utcnow)

    @property
    def is_complete(self) -> bool:
        """Partial entries are treated as cache misses."""
        return bool(self.flow_visualization.strip() and self.execution_trace.strip())
