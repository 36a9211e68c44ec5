"""Tests for the FastAPI service."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from reposcope.cache.models import RepositoryAnalysisSummary
from reposcope.codec.models import RouteTrace
from reposcope.errors import (
    AnalysisFailedError,
    InputInvalidError,
    RepositoryNotAnalyzedError,
    UpstreamNotFoundError,
)
from reposcope.orchestrator import AnalysisResult, RouteAnalysisOutcome
from reposcope.runtime import AppContext
from reposcope.service import create_app
from reposcope.vcs.models import FilteredIssue

AUTH = {"Authorization": "Bearer ghp_user"}


@pytest.fixture
def repository_analyzer(sample_analysis):
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(return_value=AnalysisResult(cached=False, analysis=sample_analysis))
    analyzer.check = MagicMock(return_value=None)
    return analyzer


@pytest.fixture
def route_analyzer():
    analyzer = MagicMock()
    analyzer.analyze = AsyncMock(
        return_value=RouteAnalysisOutcome.completed(
            RouteTrace(
                flow_visualization="```mermaid\ngraph TD\n A-->B\n```",
                execution_trace="**Step 1: Handle**\n**Location:** a.ts\n**Explanation:** Runs.",
            ),
            cached=True,
        )
    )
    return analyzer


@pytest.fixture
def client(repository_analyzer, route_analyzer, mock_source_host):
    context = AppContext(
        repository_analyzer=repository_analyzer,
        route_analyzer=route_analyzer,
        host_factory=MagicMock(return_value=mock_source_host),
    )
    return TestClient(create_app(context))


# ── Health and authentication ────────────────────────────────────────


class TestAuth:
    def test_health_needs_no_auth(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}])
    def test_missing_credential_is_401(self, client, repository_analyzer, headers):
        response = client.post("/api/analyze", json={"repoUrl": "x"}, headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized. Please sign in.", "code": "unauthenticated"}
        repository_analyzer.analyze.assert_not_awaited()


# ── /api/analyze ─────────────────────────────────────────────────────


class TestAnalyze:
    def test_post_returns_camel_case_analysis(self, client, repository_analyzer, repo_url):
        response = client.post(
            "/api/analyze", json={"repoUrl": repo_url, "forceRefresh": True}, headers=AUTH
        )
        assert response.status_code == 200
        body = response.json()
        assert body["cached"] is False
        assert body["data"]["repoUrl"] == repo_url
        assert body["data"]["llmAnalysis"]["architectureDiagram"].startswith("graph TD")
        assert body["data"]["llmAnalysis"]["routes"][0]["lifecycleRole"] == "Data Fetching"
        assert "keyFileContents" in body["data"]
        repository_analyzer.analyze.assert_awaited_once_with(
            repo_url, token="ghp_user", force_refresh=True
        )

    @pytest.mark.parametrize(
        "error,status",
        [
            (InputInvalidError("Invalid repository URL."), 400),
            (UpstreamNotFoundError("not found"), 404),
            (AnalysisFailedError("Analysis failed: boom"), 500),
        ],
    )
    def test_errors_map_to_status(self, client, repository_analyzer, error, status):
        repository_analyzer.analyze.side_effect = error
        response = client.post("/api/analyze", json={"repoUrl": "x"}, headers=AUTH)
        assert response.status_code == status
        assert response.json()["error"] == error.message
        assert response.json()["code"] == error.code

    def test_check_not_cached(self, client, repo_url):
        response = client.get("/api/analyze", params={"repoUrl": repo_url}, headers=AUTH)
        assert response.json() == {"cached": False, "meta": None}

    def test_check_cached(self, client, repository_analyzer, sample_analysis, repo_url):
        repository_analyzer.check.return_value = RepositoryAnalysisSummary(
            repo_url=repo_url, owner="acme", name="widget-shop", analyzed_at=sample_analysis.analyzed_at
        )
        body = client.get("/api/analyze", params={"repoUrl": repo_url}, headers=AUTH).json()
        assert body["cached"] is True
        assert body["meta"]["repoUrl"] == repo_url
        assert "analyzedAt" in body["meta"]

    def test_check_without_url(self, client, repository_analyzer):
        assert client.get("/api/analyze", headers=AUTH).json() == {"cached": False}
        repository_analyzer.check.assert_not_called()

    def test_check_invalid_url_is_not_cached(self, client, repository_analyzer):
        repository_analyzer.check.side_effect = InputInvalidError("bad")
        body = client.get("/api/analyze", params={"repoUrl": "bad"}, headers=AUTH).json()
        assert body == {"cached": False}


# ── /api/analyze-route ───────────────────────────────────────────────


class TestAnalyzeRoute:
    def test_returns_trace_and_steps(self, client, route_analyzer, repo_url):
        response = client.get(
            "/api/analyze-route",
            params={"repoUrl": repo_url, "route": "/api/cart", "routeIndex": 2, "forceReload": "true"},
            headers=AUTH,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["fromCache"] is True
        assert body["data"]["flowVisualization"].startswith("```mermaid")
        assert body["data"]["steps"][0]["title"] == "Handle"
        assert body["data"]["steps"][0]["location"] == "a.ts"
        route_analyzer.analyze.assert_awaited_once_with(
            repo_url, "/api/cart", route_index=2, token="ghp_user", force_reload=True
        )

    def test_exhausted_is_402(self, client, route_analyzer, repo_url):
        route_analyzer.analyze.return_value = RouteAnalysisOutcome.exhausted()
        response = client.get(
            "/api/analyze-route", params={"repoUrl": repo_url, "route": "/"}, headers=AUTH
        )
        assert response.status_code == 402
        assert response.json() == {"rateLimitExceeded": True, "code": "rate_limit_exhausted"}

    def test_not_analyzed_is_409(self, client, route_analyzer, repo_url):
        route_analyzer.analyze.side_effect = RepositoryNotAnalyzedError(
            "Repository not analyzed yet. Run the general analysis first."
        )
        response = client.get(
            "/api/analyze-route", params={"repoUrl": repo_url, "route": "/"}, headers=AUTH
        )
        assert response.status_code == 409
        assert response.json()["code"] == "repository_not_analyzed"

    def test_requires_auth(self, client, route_analyzer):
        response = client.get("/api/analyze-route", params={"repoUrl": "x", "route": "/"})
        assert response.status_code == 401
        route_analyzer.analyze.assert_not_awaited()


# ── /api/issues ──────────────────────────────────────────────────────


class TestIssues:
    def test_lists_filtered_issues(self, client, mock_source_host, repo_url):
        mock_source_host.search_issues.return_value = [
            FilteredIssue(
                id=1,
                number=7,
                title="Cart total wrong",
                state="open",
                html_url=f"{repo_url}/issues/7",
                created_at="2024-03-01T00:00:00+00:00",
            )
        ]
        response = client.get(
            "/api/issues",
            params={"repoUrl": repo_url, "labels": "bug, ui", "type": "pr", "sort": "comments-desc"},
            headers=AUTH,
        )
        assert response.status_code == 200
        issues = response.json()["issues"]
        assert issues[0]["number"] == 7
        assert issues[0]["htmlUrl"].endswith("/issues/7")
        query = mock_source_host.search_issues.await_args.args[0]
        assert query == 'repo:acme/widget-shop is:pr label:"bug","ui"'
        assert mock_source_host.search_issues.await_args.kwargs["sort"] == "comments"

    def test_invalid_repo_url(self, client):
        response = client.get("/api/issues", params={"repoUrl": "nope"}, headers=AUTH)
        assert response.status_code == 400

    def test_unknown_sort_falls_back(self, client, mock_source_host, repo_url):
        client.get("/api/issues", params={"repoUrl": repo_url, "sort": "stars"}, headers=AUTH)
        kwargs = mock_source_host.search_issues.await_args.kwargs
        assert (kwargs["sort"], kwargs["order"]) == ("created", "desc")
