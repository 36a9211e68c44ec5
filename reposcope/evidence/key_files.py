"""Key file selection: routing files, entry points and READMEs."""

from __future__ import annotations

import logging

from reposcope.errors import SourceHostError
from reposcope.identity import RepositoryIdentity
from reposcope.textutil import truncate
from reposcope.vcs.base import SourceHost
from reposcope.vcs.models import KeyFile, TreeItem

logger = logging.getLogger(__name__)

MAX_KEY_FILES = 20
MAX_KEY_FILE_CHARS = 4000
MAX_TREE_ENTRIES = 500

# Path segments that mark vendored code or VCS internals.
EXCLUDED_SEGMENTS = frozenset({"node_modules", ".git", "vendor"})

# Evaluated in order; a path matches when it equals, starts with or ends
# with the pattern. Earlier patterns take priority.
ROUTING_PATTERNS: list[str] = [
    # Next.js App Router
    "app/page.tsx", "app/page.ts", "app/layout.tsx",
    "app/api",
    # Next.js Pages Router
    "pages/index.tsx", "pages/index.ts", "pages/api",
    # Express / Node
    "routes/", "router.js", "router.ts", "server.js", "server.ts",
    "app.js", "app.ts", "index.js", "index.ts",
    # Python / Django / FastAPI / Flask
    "urls.py", "main.py", "app.py", "routes.py",
    # READMEs
    "README.md", "readme.md", "frontend/README.md", "backend/README.md",
    "FRONTEND_README.md", "BACKEND_README.md",
]


def filter_tree(items: list[TreeItem], limit: int = MAX_TREE_ENTRIES) -> list[TreeItem]:
    """Drop vendored/VCS paths and cap the listing."""
    kept = [
        item
        for item in items
        if item.path and not EXCLUDED_SEGMENTS.intersection(item.path.split("/"))
    ]
    return kept[:limit]


def _matches(path: str, pattern: str) -> bool:
    return path == pattern or path.startswith(pattern) or path.endswith(pattern)


def select_key_paths(paths: list[str], limit: int = MAX_KEY_FILES) -> list[str]:
    """Pick up to *limit* unique paths, exhausting each pattern before the next."""
    selected: list[str] = []
    seen: set[str] = set()
    for pattern in ROUTING_PATTERNS:
        for path in paths:
            if path and path not in seen and _matches(path, pattern):
                seen.add(path)
                selected.append(path)
        if len(selected) >= limit:
            break
    return selected[:limit]


async def fetch_key_files(
    host: SourceHost,
    identity: RepositoryIdentity,
    tree: list[TreeItem],
    limit: int = MAX_KEY_FILES,
) -> list[KeyFile]:
    """Fetch truncated contents of the selected key files.

    Files that moved, are binary, or fail to fetch for any source-host
    reason are skipped.
    """
    blob_paths = [item.path for item in tree if item.type == "blob"]
    results: list[KeyFile] = []
    for path in select_key_paths(blob_paths, limit):
        try:
            content = await host.get_file_content(identity, path)
        except SourceHostError as e:
            logger.debug("Skipping key file %s: %s", path, e)
            continue
        if content:
            results.append(KeyFile(path=path, content=truncate(content, MAX_KEY_FILE_CHARS)))
    return results


async def fetch_files(
    host: SourceHost, identity: RepositoryIdentity, paths: list[str]
) -> list[KeyFile]:
    """Fetch full, untruncated contents for *paths*, skipping failures."""
    results: list[KeyFile] = []
    for path in dict.fromkeys(paths):
        try:
            content = await host.get_file_content(identity, path)
        except SourceHostError as e:
            logger.debug("Skipping %s: %s", path, e)
            continue
        results.append(KeyFile(path=path, content=content))
    return results
