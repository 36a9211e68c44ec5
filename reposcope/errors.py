"""Error taxonomy shared by the orchestrators, the CLI and the HTTP service."""

from __future__ import annotations


class RepoScopeError(Exception):
    """Base class for errors that surface to a caller with a distinct status."""

    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InputInvalidError(RepoScopeError):
    """Malformed repository URL or missing required field."""

    status_code = 400
    code = "input_invalid"


class UnauthenticatedError(RepoScopeError):
    status_code = 401
    code = "unauthenticated"


class SourceHostError(RepoScopeError):
    """The source-hosting API failed for a reason other than 404/403."""

    status_code = 502
    code = "source_host_error"


class UpstreamNotFoundError(SourceHostError):
    """Repository (or file) absent, or the credential lacks access to it."""

    status_code = 404
    code = "upstream_not_found"


class UpstreamRateLimitedError(SourceHostError):
    """The source host throttled the credential. Never retried here."""

    status_code = 429
    code = "upstream_rate_limited"


class RepositoryNotAnalyzedError(RepoScopeError):
    """Route deep-dive requested before the repository analysis exists."""

    status_code = 409
    code = "repository_not_analyzed"


class RateLimitExhaustedError(RepoScopeError):
    """No model credential can serve the request soon enough."""

    status_code = 402
    code = "rate_limit_exhausted"


class AnalysisFailedError(RepoScopeError):
    """Generic failure caught and logged at an orchestrator boundary."""

    status_code = 500
    code = "analysis_failed"
