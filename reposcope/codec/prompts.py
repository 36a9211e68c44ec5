"""Prompt templates for the architecture, route-catalog and deep-dive calls.

Every evidence section is truncated independently before insertion so
the total prompt stays bounded.
"""

from __future__ import annotations

from collections.abc import Iterable

from reposcope.codec.models import LIFECYCLE_ROLES
from reposcope.textutil import truncate
from reposcope.vcs.models import KeyFile, TechStack, TreeItem

MAX_TREE_PROMPT_CHARS = 4000
MAX_KEY_FILES_PROMPT_CHARS = 18000
MAX_ROUTE_SOURCE_CHARS = 20000
MAX_APP_DIR_CHARS = 2000
MAX_APP_DIR_ENTRIES = 60
MAX_ROUTE_SOURCE_FILES = 8
MAX_CODEBASE_CHARS = 35000
MAX_STACK_DEPS = 40
MAX_RELEVANT_FILES = 10

ROUTE_SOURCE_KEYWORDS = (
    "route",
    "router",
    "urls.py",
    "server",
    "app.js",
    "app.ts",
    "main.py",
    "index.js",
    "index.ts",
    "/api/",
    "pages/",
    "app/",
)
APP_DIR_PREFIXES = ("app/", "pages/", "src/app/", "src/pages/")

# ── Architecture ─────────────────────────────────────────────────────

ARCHITECTURE_SYSTEM_PROMPT = """\
You are a senior software architect. Your job is to analyze a GitHub project and return a strict JSON object.
Return ONLY valid JSON. No markdown, no commentary, no explanation outside the JSON.\
"""

ARCHITECTURE_USER_TEMPLATE = """\
Analyze this project and return a JSON object with EXACTLY these two keys:

1. "overallFlow": A clear paragraph (150-250 words) explaining:
   - What this project does (its purpose)
   - How data flows from user action to database and back
   - The main technologies and how they connect
   - Any external integrations

2. "architectureMermaid": A valid Mermaid.js diagram string using "graph LR" syntax showing a detailed architecture:
   - Step-by-step user interaction flow (e.g., User -> Login -> Dashboard)
   - Frontend components and pages
   - Backend API routes, web sockets, and services
   - Major tech stack choices in the node labels (e.g., "React Frontend", "FastAPI Backend")
   - Database(s) and specific collections/tables if apparent
   - External APIs/services
   - Data flow connections between them with descriptive edge labels

   Mermaid rules:
   - Use ONLY simple alphanumeric node IDs (no spaces/special chars in IDs)
   - Wrap node labels with special characters in double quotes
   - No HTML tags inside labels
   - CRITICAL edge syntax: Do NOT add a trailing ">" after edge labels. Use A -->|Label| B, never A -->|Label|> B.
   - CRITICAL: Never connect a node to itself (e.g., Database --> Database is forbidden).
   - CRITICAL: Never use a node ID that is exactly the same as a subgraph name.
   - CRITICAL: Do NOT prefix edge labels with numbers (use "Visits /login", not "1. Visits /login").
   - Example edge: User["User Browser"] -->|"Visits /login"| App["React App"]

## Project File Tree
```
{file_tree}
```

## Tech Stack
{tech_stack}

## Key File Contents
{key_files}

Return ONLY the JSON object.\
"""

# ── Route catalog ────────────────────────────────────────────────────

ROUTE_CATALOG_SYSTEM_PROMPT = """\
You are an expert API documentation engineer.
Return ONLY a valid JSON array. No markdown, no explanation outside the JSON array.\
"""

ROUTE_CATALOG_USER_TEMPLATE = """\
Analyze these project files and return a JSON ARRAY of ALL routes, pages, and endpoints.

## Tech Stack
{tech_stack}

## Source Files (README + routing files)
{sources}

## App Directory Structure (for inference)
```
{app_dir}
```

Each array item MUST have these exact keys:
- "path": URL path (e.g., "/api/users", "/dashboard")
- "method": HTTP method ("GET", "POST", "PUT", "PATCH", "DELETE") or "PAGE" for UI routes
- "functionality": Plain English explanation of what this route does (2-3 sentences)
- "contribution": How this route contributes to the overall project (1-2 sentences)
- "lifecycleRole": ONE of: {roles}

Rules:
- Include BOTH frontend pages AND backend API endpoints
- For Next.js app/ directory: app/dashboard/page.tsx -> path "/dashboard", method "PAGE"
- For Express: router.get('/api/users') -> path "/api/users", method "GET"
- Include at minimum 5 routes
- Be specific about each route's purpose

Return ONLY the JSON array.\
"""

# ── Route relevance ──────────────────────────────────────────────────

RELEVANCE_SYSTEM_PROMPT = f"""\
You are a Senior Software Engineer. Your task is to identify which files in a repository are most likely to handle a particular route.
Return ONLY a JSON array of strings containing up to a maximum of {MAX_RELEVANT_FILES} file paths. Choose the entrypoint (e.g. main.py, app.js), the specific router/controller file, and the core service/database logic files related to the route. No markdown, purely a JSON array.\
"""

RELEVANCE_USER_TEMPLATE = """\
### TARGET_ROUTE
{route}

### REPOSITORY FILE PATHS
{paths}

Return a JSON array of up to {limit} strings representing the exact file paths.\
"""

# ── Execution trace ──────────────────────────────────────────────────

TRACE_SYSTEM_PROMPT = """\
You are an Expert Software Architect. Your task is to analyze the provided raw codebase and reverse-engineer the exact execution flow for a specific target route.

Analyze the provided files to find exactly where and how TARGET_ROUTE is defined, handled, and executed. Trace its entire lifecycle.

DO NOT OUTPUT JSON. Output your analysis STRICTLY using the exact markdown headers below.

### FLOW_VISUALIZATION
Provide a Mermaid.js flowchart mapping the chronological execution flow.
- Use 'graph TD'.
- Nodes MUST use simple alphanumeric IDs (e.g., A, B, C, N1, N2).
- Node labels MUST be wrapped in double quotes. Limit labels to file names and function names, e.g., A["routes.js"], B["main()"].
- Relations MUST ONLY be simple arrows (e.g., A --> B). Do NOT put text on arrows.
- DO NOT use unquoted special characters like parentheses, colons, or dashes inside the node ID or outside the quotes.
- Example of valid mermaid:
  ```mermaid
  graph TD
    A["main.py"] --> B["auth.py (signup)"]
    B --> C["db.py (save_user)"]
  ```
- Wrap the diagram in standard markdown mermaid backticks ```mermaid ... ```.

### EXECUTION_TRACE
Provide a chronological, step-by-step breakdown of the execution flow across the files.
For EVERY step, use EXACTLY this format:

**Step [Number]: [Action Description]**
* **Location:** [File Path] > [Function Name]
* **Code Snippet:**
  <<<FILE:[Exact File Path]:[StartLine]-[EndLine]>>>
* **Explanation:** A detailed explanation (at least 5 sentences) covering what this block does and why it runs at this point, the important variables, parameters and return values, how it connects to the previous and next step, any side effects such as database writes, API calls or state mutations, and the edge cases or error paths it handles.

CRITICAL: DO NOT WRITE OR SUMMARIZE ANY CODE YOURSELF in the Code Snippet section. Use the exact <<<FILE:path:start-end>>> syntax with the line numbers shown in the reference files. Do NOT use markdown code blocks there. Just use the tag.\
"""

TRACE_USER_TEMPLATE = """\
### TARGET_ROUTE
{route}

### CODEBASE_FILES
{codebase}

Output exactly the two headers ### FLOW_VISUALIZATION and ### EXECUTION_TRACE followed by their content.\
"""


def format_tech_stack(stack: TechStack) -> str:
    lines = []
    for side, category in (("Frontend", stack.frontend), ("Backend", stack.backend)):
        if category is None:
            continue
        deps = [*category.dependencies, *category.dev_dependencies][:MAX_STACK_DEPS]
        lines.append(f"{side} ({category.source}): {', '.join(deps)}")
    return "\n".join(lines) or "None detected"


def format_file_tree(tree: Iterable[TreeItem]) -> str:
    return "\n".join(
        f"{'📁' if item.type == 'tree' else '📄'} {item.path}" for item in tree
    )


def select_route_sources(key_files: list[KeyFile]) -> list[KeyFile]:
    """README files first, then routing/entry-point files, capped."""
    readmes = [f for f in key_files if "readme" in f.path.lower()]
    routing = [
        f
        for f in key_files
        if any(keyword in f.path.lower() for keyword in ROUTE_SOURCE_KEYWORDS)
    ]
    selected: list[KeyFile] = []
    seen: set[str] = set()
    for f in [*readmes, *routing]:
        if f.path in seen:
            continue
        seen.add(f.path)
        selected.append(f)
        if len(selected) >= MAX_ROUTE_SOURCE_FILES:
            break
    return selected


def list_app_dir_paths(tree: Iterable[TreeItem]) -> list[str]:
    paths = [item.path for item in tree if item.path.startswith(APP_DIR_PREFIXES)]
    return paths[:MAX_APP_DIR_ENTRIES]


def format_codebase(files: Iterable[KeyFile], heading: str = "FULL FILE") -> str:
    """Render files with 1-based line numbers (``N| text``) for reference markers."""
    parts = []
    for f in files:
        numbered = "\n".join(
            f"{i}| {line}" for i, line in enumerate(f.content.split("\n"), start=1)
        )
        parts.append(f"\n\n=== {heading}: {f.path} ===\n{numbered}")
    return "".join(parts)


def build_architecture_prompt(
    file_tree: list[TreeItem], tech_stack: TechStack, key_files: list[KeyFile]
) -> tuple[str, str]:
    """Returns (system_prompt, user_prompt)."""
    key_files_str = "".join(f"\n\n=== FILE: {f.path} ===\n{f.content}" for f in key_files)
    user = ARCHITECTURE_USER_TEMPLATE.format(
        file_tree=truncate(format_file_tree(file_tree), MAX_TREE_PROMPT_CHARS),
        tech_stack=format_tech_stack(tech_stack),
        key_files=truncate(key_files_str, MAX_KEY_FILES_PROMPT_CHARS),
    )
    return ARCHITECTURE_SYSTEM_PROMPT, user


def build_route_catalog_prompt(
    key_files: list[KeyFile], file_tree: list[TreeItem], tech_stack: TechStack
) -> tuple[str, str]:
    sources = "".join(
        f"\n\n=== {f.path} ===\n{f.content}" for f in select_route_sources(key_files)
    )
    user = ROUTE_CATALOG_USER_TEMPLATE.format(
        tech_stack=format_tech_stack(tech_stack),
        sources=truncate(sources, MAX_ROUTE_SOURCE_CHARS),
        app_dir=truncate("\n".join(list_app_dir_paths(file_tree)), MAX_APP_DIR_CHARS),
        roles=", ".join(f'"{role}"' for role in LIFECYCLE_ROLES),
    )
    return ROUTE_CATALOG_SYSTEM_PROMPT, user


def build_relevance_prompt(route: str, file_paths: list[str]) -> tuple[str, str]:
    user = RELEVANCE_USER_TEMPLATE.format(
        route=route, paths="\n".join(file_paths), limit=MAX_RELEVANT_FILES
    )
    return RELEVANCE_SYSTEM_PROMPT, user


def build_trace_prompt(route: str, codebase: str) -> tuple[str, str]:
    user = TRACE_USER_TEMPLATE.format(
        route=route, codebase=truncate(codebase, MAX_CODEBASE_CHARS)
    )
    return TRACE_SYSTEM_PROMPT, user
