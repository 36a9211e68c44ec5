"""Shared test fixtures for RepoScope."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from reposcope.cache.models import LLMAnalysis, RepositoryAnalysis
from reposcope.cache.sqlite_store import open_stores
from reposcope.codec.models import RouteDetail
from reposcope.errors import SourceHostError
from reposcope.identity import RepositoryIdentity
from reposcope.llm.base import LLMProvider
from reposcope.llm.models import LLMConfig, LLMResponse, TokenUsage
from reposcope.llm.pool import LLMClientPool
from reposcope.vcs.base import SourceHost
from reposcope.vcs.models import (
    CommitInfo,
    Contributor,
    KeyFile,
    RepoMetadata,
    TreeItem,
)


def make_response(content: str) -> LLMResponse:
    return LLMResponse(
        content=content,
        usage=TokenUsage(input_tokens=100, output_tokens=250),
        model="test-model",
    )


def _make_llm(*contents: str, label: str = "primary") -> MagicMock:
    """Mock provider answering with *contents*, one per call; a single entry repeats."""
    provider = MagicMock(spec=LLMProvider)
    provider.config = LLMConfig(provider="openai", model="test-model", label=label)
    provider.label = label
    responses = [make_response(c) for c in contents] or [make_response("")]
    if len(responses) == 1:
        provider.generate = AsyncMock(return_value=responses[0])
    else:
        provider.generate = AsyncMock(side_effect=responses)
    return provider


@pytest.fixture
def make_llm():
    return _make_llm


@pytest.fixture
def identity():
    return RepositoryIdentity(owner="acme", name="widget-shop")


@pytest.fixture
def repo_url():
    return "https://github.com/acme/widget-shop"


@pytest.fixture
def sample_metadata():
    return RepoMetadata(
        full_name="acme/widget-shop",
        description="Storefront for widgets",
        language="TypeScript",
        stars=42,
        forks=7,
        default_branch="main",
        topics=["nextjs", "shop"],
    )


@pytest.fixture
def sample_tree():
    """Next.js-style layout with a vendored directory that must be filtered."""
    return [
        TreeItem(path="app", type="tree"),
        TreeItem(path="app/page.tsx", type="blob", size=900),
        TreeItem(path="app/api", type="tree"),
        TreeItem(path="app/api/cart/route.ts", type="blob", size=1200),
        TreeItem(path="lib/db.ts", type="blob", size=400),
        TreeItem(path="README.md", type="blob", size=2000),
        TreeItem(path="package.json", type="blob", size=450),
        TreeItem(path="node_modules/react/index.js", type="blob", size=10),
    ]


@pytest.fixture
def sample_files():
    """Path -> content served by the mock source host."""
    return {
        "package.json": '{"dependencies": {"next": "14.0.0", "react": "18.2.0"}}',
        "app/page.tsx": "export default function Home() {\n  return <main />;\n}",
        "app/api/cart/route.ts": "\n".join(f"line {i}" for i in range(1, 21)),
        "lib/db.ts": "export const db = connect();",
        "README.md": "# Widget Shop\nA storefront.",
    }


@pytest.fixture
def mock_source_host(sample_metadata, sample_tree, sample_files):
    host = MagicMock(spec=SourceHost)

    async def _content(identity, path):
        if path not in sample_files:
            raise SourceHostError(f"file {path}: GitHub returned 404")
        return sample_files[path]

    host.get_repo_metadata = AsyncMock(return_value=sample_metadata)
    host.list_recent_commits = AsyncMock(
        return_value=[
            CommitInfo(sha="abc1234", message="Add cart", author="dana"),
            CommitInfo(sha="def5678", message="Init", author="lee"),
        ]
    )
    host.list_contributors = AsyncMock(
        return_value=[
            Contributor(login="dana", contributions=30),
            Contributor(login="lee", contributions=12),
        ]
    )
    host.count_search_results = AsyncMock(return_value=3)
    host.count_deployments = AsyncMock(return_value=1)
    host.get_file_tree = AsyncMock(return_value=sample_tree)
    host.get_file_content = AsyncMock(side_effect=_content)
    host.search_issues = AsyncMock(return_value=[])
    return host


@pytest.fixture
def mock_llm_provider():
    return _make_llm("Generated analysis content.")


@pytest.fixture
def pool(mock_llm_provider):
    return LLMClientPool(mock_llm_provider)


@pytest.fixture
def stores(tmp_path):
    repository_store, route_store = open_stores(str(tmp_path / "cache.db"))
    yield repository_store, route_store
    repository_store.close()


@pytest.fixture
def sample_analysis(sample_metadata, sample_tree):
    return RepositoryAnalysis(
        repo_url="https://github.com/acme/widget-shop",
        owner="acme",
        name="widget-shop",
        metadata=sample_metadata,
        file_tree=[t for t in sample_tree if not t.path.startswith("node_modules")],
        key_file_contents=[
            KeyFile(path="app/page.tsx", content="export default function Home() {}"),
            KeyFile(path="README.md", content="# Widget Shop"),
        ],
        llm_analysis=LLMAnalysis(
            overall_flow="Requests hit Next.js pages.",
            architecture_diagram="graph TD\n    A-->B",
            routes=[
                RouteDetail(
                    path="/api/cart",
                    method="GET",
                    functionality="Returns the cart",
                    lifecycle_role="Data Fetching",
                )
            ],
        ),
    )
