"""Tech-stack detection by probing well-known manifest paths."""

from __future__ import annotations

import asyncio
import logging
from typing import Literal, NamedTuple

from reposcope.errors import SourceHostError
from reposcope.evidence.dependency_parser import parse_manifest
from reposcope.identity import RepositoryIdentity
from reposcope.textutil import truncate
from reposcope.vcs.base import SourceHost
from reposcope.vcs.models import TechStack, TechStackCategory

logger = logging.getLogger(__name__)

Side = Literal["root", "frontend", "backend"]

MAX_MANIFEST_CHARS = 5000


class ManifestCandidate(NamedTuple):
    path: str
    side: Side


# Probed concurrently; order decides which explicit match wins per side.
MANIFEST_CANDIDATES: list[ManifestCandidate] = [
    ManifestCandidate("package.json", "root"),
    ManifestCandidate("frontend/package.json", "frontend"),
    ManifestCandidate("client/package.json", "frontend"),
    ManifestCandidate("web/package.json", "frontend"),
    ManifestCandidate("ui/package.json", "frontend"),
    ManifestCandidate("backend/package.json", "backend"),
    ManifestCandidate("server/package.json", "backend"),
    ManifestCandidate("api/package.json", "backend"),
    ManifestCandidate("requirements.txt", "backend"),
    ManifestCandidate("backend/requirements.txt", "backend"),
    ManifestCandidate("server/requirements.txt", "backend"),
    ManifestCandidate("pyproject.toml", "backend"),
    ManifestCandidate("pom.xml", "backend"),
    ManifestCandidate("backend/pom.xml", "backend"),
    ManifestCandidate("go.mod", "backend"),
    ManifestCandidate("Cargo.toml", "backend"),
]

FRONTEND_KEYWORDS = frozenset({"react", "next", "vue", "svelte", "@angular/core", "vite"})
BACKEND_KEYWORDS = frozenset({"express", "nestjs", "fastify", "mongoose", "pg", "typeorm"})


class _Probe(NamedTuple):
    candidate: ManifestCandidate
    category: TechStackCategory


async def _probe(
    host: SourceHost, identity: RepositoryIdentity, candidate: ManifestCandidate
) -> _Probe | None:
    try:
        raw = await host.get_file_content(identity, candidate.path)
    except SourceHostError:
        return None
    if not raw:
        return None
    parsed = parse_manifest(candidate.path, raw)
    return _Probe(
        candidate,
        TechStackCategory(
            source=candidate.path,
            raw=truncate(raw, MAX_MANIFEST_CHARS),
            dependencies=parsed.dependencies,
            dev_dependencies=parsed.dev_dependencies,
        ),
    )


def classify_stack(probes: list[_Probe]) -> TechStack:
    """Assign probed manifests to frontend/backend.

    Explicit path matches win; a root manifest fills whichever side is
    still empty based on keyword matches against its dependency names.
    A root manifest with no backend indicators is assumed frontend.
    """
    frontend = next((p.category for p in probes if p.candidate.side == "frontend"), None)
    backend = next((p.category for p in probes if p.candidate.side == "backend"), None)

    root = next((p.category for p in probes if p.candidate.side == "root"), None)
    if root is not None:
        names = set(root.dependencies) | set(root.dev_dependencies)
        is_frontend = bool(names & FRONTEND_KEYWORDS)
        is_backend = bool(names & BACKEND_KEYWORDS)
        if frontend is None and (is_frontend or not is_backend):
            frontend = root.model_copy(update={"source": "frontend (root)"})
        if backend is None and is_backend:
            backend = root.model_copy(update={"source": "backend (root)"})

    return TechStack(frontend=frontend, backend=backend)


async def detect_tech_stack(host: SourceHost, identity: RepositoryIdentity) -> TechStack:
    """Probe every manifest candidate concurrently. Missing files are absence."""
    results = await asyncio.gather(
        *(_probe(host, identity, c) for c in MANIFEST_CANDIDATES)
    )
    probes = [r for r in results if r is not None]
    logger.debug(
        "Manifests found for %s: %s", identity, [p.candidate.path for p in probes]
    )
    return classify_stack(probes)
