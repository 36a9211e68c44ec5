"""RepoScope: repository architecture and route analysis."""

from reposcope.errors import (
    AnalysisFailedError,
    InputInvalidError,
    RateLimitExhaustedError,
    RepoScopeError,
    RepositoryNotAnalyzedError,
    UnauthenticatedError,
    UpstreamNotFoundError,
    UpstreamRateLimitedError,
)
from reposcope.identity import RepositoryIdentity, normalize_repository_url, parse_repository_url

__version__ = "0.1.0"

__all__ = [
    "AnalysisFailedError",
    "InputInvalidError",
    "RateLimitExhaustedError",
    "RepoScopeError",
    "RepositoryIdentity",
    "RepositoryNotAnalyzedError",
    "UnauthenticatedError",
    "UpstreamNotFoundError",
    "UpstreamRateLimitedError",
    "normalize_repository_url",
    "parse_repository_url",
]
