"""Pydantic models for source-host data."""

from typing import Literal

from pydantic import Field

from reposcope.schema import CamelModel


class RepoMetadata(CamelModel):
    """Metadata for a repository. Everything but the name may be missing."""

    full_name: str
    description: str | None = None
    language: str | None = None
    stars: int = 0
    forks: int = 0
    watchers: int = 0
    default_branch: str = "main"
    homepage: str | None = None
    topics: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None
    pushed_at: str | None = None
    size: int = 0
    is_private: bool = False
    license: str | None = None


class CommitInfo(CamelModel):
    sha: str = Field(description="Short (7 char) hash")
    message: str = Field(description="First line of the message, max 100 chars")
    author: str
    date: str = ""
    url: str = ""


class CommitSummary(CamelModel):
    total: int = Field(
        default=0,
        description="Approximate: sum of contributor contributions, not a true count",
    )
    recent: list[CommitInfo] = Field(default_factory=list)


class Contributor(CamelModel):
    login: str
    avatar_url: str = ""
    html_url: str = ""
    contributions: int = 0


class RepoStatus(CamelModel):
    open_issues: int = 0
    closed_issues: int = 0
    open_prs: int = Field(default=0, alias="openPRs")
    closed_prs: int = Field(default=0, alias="closedPRs")
    total_deployments: int = 0


class TechStackCategory(CamelModel):
    source: str
    raw: str = ""
    dependencies: list[str] = Field(default_factory=list)
    dev_dependencies: list[str] = Field(default_factory=list)


class TechStack(CamelModel):
    frontend: TechStackCategory | None = None
    backend: TechStackCategory | None = None


class TreeItem(CamelModel):
    """One entry of the flattened recursive tree."""

    path: str
    type: Literal["blob", "tree", "commit"] = "blob"
    size: int | None = None


class KeyFile(CamelModel):
    path: str
    content: str


class IssueUser(CamelModel):
    login: str = "ghost"
    avatar_url: str = ""


class IssueLabel(CamelModel):
    name: str
    color: str = "6366f1"


class FilteredIssue(CamelModel):
    id: int
    number: int
    title: str
    state: str
    html_url: str
    created_at: str
    user: IssueUser = Field(default_factory=IssueUser)
    labels: list[IssueLabel] = Field(default_factory=list)
    comments: int = 0
