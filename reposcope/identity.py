"""Repository identity parsing and URL normalization."""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, field_validator

from reposcope.errors import InputInvalidError

DEFAULT_HOST = "github.com"


class RepositoryIdentity(BaseModel):
    """The (owner, name) pair addressing one repository."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str
    host: str = DEFAULT_HOST

    @field_validator("owner", "name")
    @classmethod
    def validate_part(cls, v: str) -> str:
        if not v.strip() or "/" in v:
            raise ValueError("owner and name must be non-empty path segments")
        return v

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def url(self) -> str:
        """Canonical form: https://host/owner/name."""
        return f"https://{self.host}/{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.slug


def parse_repository_url(url: str, host: str = DEFAULT_HOST) -> RepositoryIdentity:
    """Parse a repository URL into its identity.

    Accepts ``https://github.com/owner/name`` with optional trailing slash,
    ``.git`` suffix, or deeper path segments (``/tree/main/...``).
    Raises InputInvalidError for anything else.
    """
    if not url or not url.strip():
        raise InputInvalidError("repoUrl is required.")
    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or parsed.hostname != host:
        raise InputInvalidError(
            f"Invalid repository URL. Expected format: https://{host}/owner/repo"
        )
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        raise InputInvalidError(
            f"Invalid repository URL. Expected format: https://{host}/owner/repo"
        )
    owner, name = parts[0], parts[1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not name:
        raise InputInvalidError("Repository name is empty.")
    return RepositoryIdentity(owner=owner, name=name, host=host)


def normalize_repository_url(url: str, host: str = DEFAULT_HOST) -> str:
    """Return the canonical URL for *url*. Idempotent."""
    return parse_repository_url(url, host).url
