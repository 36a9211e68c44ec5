"""Evidence bundle: the bounded set of repository facts fed to the model."""

from __future__ import annotations

from pydantic import BaseModel, Field

from reposcope.identity import RepositoryIdentity
from reposcope.vcs.models import (
    CommitSummary,
    Contributor,
    KeyFile,
    RepoMetadata,
    RepoStatus,
    TechStack,
    TreeItem,
)


class EvidenceBundle(BaseModel):
    """Ephemeral; lives for one orchestration call."""

    identity: RepositoryIdentity
    metadata: RepoMetadata
    commits: CommitSummary = Field(default_factory=CommitSummary)
    contributors: list[Contributor] = Field(default_factory=list)
    repo_status: RepoStatus = Field(default_factory=RepoStatus)
    tech_stack: TechStack = Field(default_factory=TechStack)
    file_tree: list[TreeItem] = Field(default_factory=list)
    key_files: list[KeyFile] = Field(default_factory=list)

    @property
    def file_paths(self) -> list[str]:
        return [item.path for item in self.file_tree]
