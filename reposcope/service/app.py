"""FastAPI application exposing repository and route analysis."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Literal

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import Field

from reposcope.codec.models import ParsedExecutionStep
from reposcope.config.models import RepoScopeConfig
from reposcope.errors import RateLimitExhaustedError, RepoScopeError, UnauthenticatedError
from reposcope.identity import parse_repository_url
from reposcope.logconfig import configure_logging
from reposcope.runtime import AppContext, build_context
from reposcope.schema import CamelModel
from reposcope.vcs.issues import IssueSort, list_filtered_issues
from reposcope.vcs.models import FilteredIssue

logger = logging.getLogger(__name__)


# ── Request / response bodies ────────────────────────────────────────


class AnalyzeRequest(CamelModel):
    repo_url: str = ""
    force_refresh: bool = False


class RouteAnalysisData(CamelModel):
    flow_visualization: str
    execution_trace: str
    steps: list[ParsedExecutionStep] = Field(default_factory=list)


class IssuesResponse(CamelModel):
    issues: list[FilteredIssue]


class HealthResponse(CamelModel):
    status: str


def _bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Authentication boundary: an opaque source-host credential."""
    if not authorization:
        raise UnauthenticatedError("Unauthorized. Please sign in.")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError("Unauthorized. Please sign in.")
    return token.strip()


def create_app(
    context: AppContext | None = None, config: RepoScopeConfig | None = None
) -> FastAPI:
    """Create the FastAPI application.

    Tests pass a prebuilt ``context``; otherwise one is built from
    ``config`` (defaults when omitted).
    """
    if context is None:
        config = config or RepoScopeConfig()
        configure_logging(config.log_level, config.log_format)
        context = build_context(config)

    app = FastAPI(title="RepoScope Service", version="0.1.0")
    app.state.context = context

    @app.exception_handler(RepoScopeError)
    async def reposcope_error_handler(_: Request, exc: RepoScopeError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code, content={"error": exc.message, "code": exc.code}
        )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/api/analyze")
    async def analyze(
        payload: AnalyzeRequest, token: str = Depends(_bearer_token)
    ) -> dict[str, Any]:
        result = await context.repository_analyzer.analyze(
            payload.repo_url, token=token, force_refresh=payload.force_refresh
        )
        return {
            "cached": result.cached,
            "data": result.analysis.model_dump(mode="json", by_alias=True),
        }

    @app.get("/api/analyze")
    async def check_analysis(
        repo_url: str = Query(default="", alias="repoUrl"),
        _token: str = Depends(_bearer_token),
    ) -> dict[str, Any]:
        if not repo_url:
            return {"cached": False}
        try:
            summary = await asyncio.to_thread(context.repository_analyzer.check, repo_url)
        except RepoScopeError:
            return {"cached": False}
        return {
            "cached": summary is not None,
            "meta": summary.model_dump(mode="json", by_alias=True) if summary else None,
        }

    @app.get("/api/analyze-route")
    async def analyze_route(
        repo_url: str = Query(default="", alias="repoUrl"),
        route: str = Query(default=""),
        route_index: int = Query(default=0, alias="routeIndex"),
        force_reload: bool = Query(default=False, alias="forceReload"),
        token: str = Depends(_bearer_token),
    ) -> JSONResponse:
        outcome = await context.route_analyzer.analyze(
            repo_url,
            route,
            route_index=route_index,
            token=token,
            force_reload=force_reload,
        )
        if outcome.is_exhausted:
            logger.warning("Rate limit exhausted for %s %s", repo_url, route)
            return JSONResponse(
                status_code=RateLimitExhaustedError.status_code,
                content={"rateLimitExceeded": True, "code": RateLimitExhaustedError.code},
            )
        data = RouteAnalysisData(
            flow_visualization=outcome.result.flow_visualization,
            execution_trace=outcome.result.execution_trace,
            steps=outcome.steps,
        )
        return JSONResponse(
            content={
                "data": data.model_dump(mode="json", by_alias=True),
                "fromCache": outcome.cached,
            }
        )

    @app.get("/api/issues")
    async def issues(
        repo_url: str = Query(default="", alias="repoUrl"),
        labels: str | None = Query(default=None),
        type_: Literal["issue", "pr"] | None = Query(default=None, alias="type"),
        sort: str | None = Query(default=None),
        token: str = Depends(_bearer_token),
    ) -> dict[str, Any]:
        identity = parse_repository_url(repo_url, context.repo_host)
        label_list = [lbl.strip() for lbl in labels.split(",") if lbl.strip()] if labels else None
        sort_mode: IssueSort | None = (
            sort if sort in ("created-desc", "created-asc", "comments-desc") else None
        )
        found = await list_filtered_issues(
            context.host_factory(token), identity, label_list, type_, sort_mode
        )
        return IssuesResponse(issues=found).model_dump(mode="json", by_alias=True)

    return app


def run_service(config: RepoScopeConfig) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(config=config)
    uvicorn.run(app, host=config.service.host, port=config.service.port)
