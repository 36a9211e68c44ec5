"""Tests for prompt building and response decoding."""

import json

import pytest

from reposcope.codec.decoders import (
    HOME_ROUTE,
    MAX_FALLBACK_NARRATIVE_CHARS,
    TRACE_PLACEHOLDER,
    decode_architecture,
    decode_relevant_files,
    decode_route_catalog,
    decode_route_trace,
)
from reposcope.codec.json_blocks import extract_json
from reposcope.codec.mermaid import (
    DEFAULT_ARCHITECTURE_DIAGRAM,
    FLOW_PLACEHOLDER,
    ensure_mermaid_fence,
    extract_graph_block,
    repair_edge_labels,
)
from reposcope.codec.models import Fallback, Parsed, RouteDetail
from reposcope.codec.prompts import (
    MAX_ROUTE_SOURCE_FILES,
    build_architecture_prompt,
    build_relevance_prompt,
    build_route_catalog_prompt,
    build_trace_prompt,
    format_codebase,
    format_file_tree,
    format_tech_stack,
    select_route_sources,
)
from reposcope.codec.references import (
    extract_lines,
    infer_snippet_language,
    resolve_source_references,
)
from reposcope.codec.steps import parse_execution_steps
from reposcope.vcs.models import KeyFile, TechStack, TechStackCategory, TreeItem

NUMBERED = "\n".join(f"line {i}" for i in range(1, 101))


# ── JSON extraction ──────────────────────────────────────────────────


class TestExtractJson:
    def test_fenced_json(self):
        assert extract_json('Here:\n```json\n{"a": 1}\n```\nbye') == {"a": 1}

    def test_untagged_fence(self):
        assert extract_json("```\n[1, 2]\n```") == [1, 2]

    def test_bare_json(self):
        assert extract_json('  {"a": [1]}  ') == {"a": [1]}

    def test_invalid_raises_value_error(self):
        with pytest.raises(ValueError):
            extract_json("no json here")


# ── Mermaid helpers ──────────────────────────────────────────────────


class TestMermaid:
    def test_repair_edge_labels(self):
        assert repair_edge_labels("A -->|calls|> B") == "A -->|calls| B"

    def test_repair_leaves_valid_edges(self):
        assert repair_edge_labels("A -->|calls| B") == "A -->|calls| B"

    def test_extract_graph_block_stops_at_blank_line(self):
        text = "Intro\ngraph LR\n  A --> B\n  B --> C\n\nTrailing prose"
        assert extract_graph_block(text) == "graph LR\n  A --> B\n  B --> C"

    def test_extract_graph_block_absent(self):
        assert extract_graph_block("just prose") is None

    def test_ensure_fence(self):
        assert ensure_mermaid_fence("graph TD\n A-->B") == "```mermaid\ngraph TD\n A-->B\n```"
        fenced = "```mermaid\ngraph TD\n```"
        assert ensure_mermaid_fence(fenced) == fenced


# ── decode_architecture ──────────────────────────────────────────────


class TestDecodeArchitecture:
    def test_valid_json(self):
        payload = {"overallFlow": "Next.js calls the API.", "architectureMermaid": "graph TD\n A -->|x|> B"}
        decoded = decode_architecture(f"```json\n{json.dumps(payload)}\n```")
        assert isinstance(decoded, Parsed)
        assert decoded.value.overall_flow == "Next.js calls the API."
        assert decoded.value.architecture_diagram == "graph TD\n A -->|x| B"

    def test_malformed_json_with_graph(self):
        text = "The app is layered.\n```\nnot json\n```\ngraph TD\n  A --> B\n\nMore prose."
        decoded = decode_architecture(text)
        assert isinstance(decoded, Fallback)
        assert decoded.is_fallback
        assert decoded.value.architecture_diagram == "graph TD\n  A --> B"
        assert "not json" not in decoded.value.overall_flow
        assert decoded.value.overall_flow.startswith("The app is layered.")

    def test_malformed_without_graph_uses_default(self):
        decoded = decode_architecture("x" * 2000)
        assert decoded.value.architecture_diagram == DEFAULT_ARCHITECTURE_DIAGRAM
        assert len(decoded.value.overall_flow) == MAX_FALLBACK_NARRATIVE_CHARS

    def test_missing_keys_is_fallback(self):
        decoded = decode_architecture('{"overallFlow": "only this"}')
        assert isinstance(decoded, Fallback)


# ── decode_route_catalog ─────────────────────────────────────────────


def _route(**overrides):
    entry = {
        "path": "/api/cart",
        "method": "GET",
        "functionality": "Returns the cart",
        "contribution": "Checkout",
        "lifecycleRole": "Data Fetching",
    }
    entry.update(overrides)
    return entry


class TestDecodeRouteCatalog:
    def test_valid_array(self):
        decoded = decode_route_catalog(json.dumps([_route(), _route(path="/", method="PAGE", lifecycleRole="UI Rendering")]))
        assert isinstance(decoded, Parsed)
        assert [r.path for r in decoded.value] == ["/api/cart", "/"]

    def test_unknown_roles_and_missing_fields_kept(self):
        decoded = decode_route_catalog(
            json.dumps(
                [
                    _route(path="/api/users", lifecycleRole="API Endpoint"),
                    _route(path="/login", lifecycleRole="Authentication"),
                    {"path": "/x"},
                ]
            )
        )
        assert isinstance(decoded, Parsed)
        assert [r.path for r in decoded.value] == ["/api/users", "/login", "/x"]
        assert decoded.value[0].lifecycle_role == "API Endpoint"
        assert decoded.value[2].method == ""
        assert decoded.value[2].lifecycle_role == ""

    def test_only_unknown_roles_is_not_a_fallback(self):
        decoded = decode_route_catalog(json.dumps([_route(path="/api/users", lifecycleRole="API")]))
        assert decoded == Parsed([RouteDetail.model_validate(_route(path="/api/users", lifecycleRole="API"))])

    def test_entries_without_path_dropped(self):
        decoded = decode_route_catalog(json.dumps([_route(), "GET /x", {"bad": 1}]))
        assert isinstance(decoded, Parsed)
        assert [r.path for r in decoded.value] == ["/api/cart"]

    def test_role_matching_ignores_case(self):
        decoded = decode_route_catalog(json.dumps([_route(lifecycleRole="crud operation")]))
        assert decoded.value[0].lifecycle_role == "CRUD Operation"

    def test_empty_array_is_parsed(self):
        decoded = decode_route_catalog("[]")
        assert decoded == Parsed([])

    @pytest.mark.parametrize("text", ["not json", '{"routes": []}', '"just a string"'])
    def test_fallback_is_home_route(self, text):
        decoded = decode_route_catalog(text)
        assert isinstance(decoded, Fallback)
        assert decoded.value == [HOME_ROUTE]
        assert HOME_ROUTE.method == "PAGE"


# ── decode_relevant_files ────────────────────────────────────────────


class TestDecodeRelevantFiles:
    def test_valid_list(self):
        decoded = decode_relevant_files('```json\n["app/page.tsx", " lib/db.ts ", 3, ""]\n```')
        assert decoded == Parsed(["app/page.tsx", "lib/db.ts"])

    def test_capped(self):
        decoded = decode_relevant_files(json.dumps([f"f{i}.ts" for i in range(25)]))
        assert len(decoded.value) == 10

    @pytest.mark.parametrize("text", ["nope", '{"files": []}'])
    def test_fallback_empty(self, text):
        decoded = decode_relevant_files(text)
        assert isinstance(decoded, Fallback)
        assert decoded.value == []


# ── decode_route_trace ───────────────────────────────────────────────


class TestDecodeRouteTrace:
    def test_both_sections(self):
        text = (
            "### FLOW_VISUALIZATION\ngraph TD\n  A -->|req|> B\n\n"
            "### EXECUTION_TRACE\n**Step 1: Receive request**\n"
        )
        decoded = decode_route_trace(text)
        assert isinstance(decoded, Parsed)
        assert decoded.value.flow_visualization == "```mermaid\ngraph TD\n  A -->|req| B\n```"
        assert decoded.value.execution_trace == "**Step 1: Receive request**"

    def test_fenced_flow_kept(self):
        text = (
            "### FLOW_VISUALIZATION\n```mermaid\ngraph LR\n A-->B\n```\n"
            "### EXECUTION_TRACE\nStep 1: go"
        )
        decoded = decode_route_trace(text)
        assert decoded.value.flow_visualization == "```mermaid\ngraph LR\n A-->B\n```"

    def test_missing_headers_use_placeholders(self):
        decoded = decode_route_trace("The model rambled instead.")
        assert isinstance(decoded, Fallback)
        assert decoded.value.flow_visualization == FLOW_PLACEHOLDER
        assert decoded.value.execution_trace == TRACE_PLACEHOLDER
        assert "FLOW_VISUALIZATION" in decoded.reason

    def test_empty_trace_section(self):
        decoded = decode_route_trace("### FLOW_VISUALIZATION\ngraph TD\n A\n### EXECUTION_TRACE\n   ")
        assert isinstance(decoded, Fallback)
        assert decoded.value.execution_trace == TRACE_PLACEHOLDER
        assert decoded.reason == "missing section(s): EXECUTION_TRACE"


# ── Prompt building ──────────────────────────────────────────────────


class TestPrompts:
    def test_format_tech_stack(self):
        stack = TechStack(
            frontend=TechStackCategory(source="package.json", dependencies=["react"], dev_dependencies=["vite"]),
        )
        assert format_tech_stack(stack) == "Frontend (package.json): react, vite"
        assert format_tech_stack(TechStack()) == "None detected"

    def test_format_file_tree(self):
        tree = [TreeItem(path="src", type="tree"), TreeItem(path="src/a.ts")]
        assert format_file_tree(tree) == "📁 src\n📄 src/a.ts"

    def test_format_codebase_numbers_lines(self):
        rendered = format_codebase([KeyFile(path="a.ts", content="x\ny")], "FULL FILE")
        assert rendered == "\n\n=== FULL FILE: a.ts ===\n1| x\n2| y"

    def test_select_route_sources_readmes_first(self):
        files = [
            KeyFile(path="app/api/route.ts", content=""),
            KeyFile(path="README.md", content=""),
            KeyFile(path="lib/util.ts", content=""),
        ]
        assert [f.path for f in select_route_sources(files)][0] == "README.md"

    def test_select_route_sources_capped(self):
        files = [KeyFile(path=f"routes/r{i}.js", content="") for i in range(20)]
        assert len(select_route_sources(files)) == MAX_ROUTE_SOURCE_FILES

    def test_architecture_prompt_contains_evidence(self):
        system, user = build_architecture_prompt(
            [TreeItem(path="app/page.tsx")],
            TechStack(),
            [KeyFile(path="README.md", content="# Shop")],
        )
        assert "architectureMermaid" in system + user
        assert "app/page.tsx" in user
        assert "=== FILE: README.md ===" in user

    def test_route_catalog_prompt_lists_roles(self):
        _, user = build_route_catalog_prompt(
            [KeyFile(path="README.md", content="# Shop")],
            [TreeItem(path="app/cart/page.tsx")],
            TechStack(),
        )
        assert '"Data Fetching"' in user
        assert "app/cart/page.tsx" in user

    def test_relevance_prompt(self):
        _, user = build_relevance_prompt("/api/cart", ["a.ts", "b.ts"])
        assert "/api/cart" in user
        assert "a.ts\nb.ts" in user

    def test_trace_prompt_has_marker_format(self):
        system, user = build_trace_prompt("/api/cart", "\n\n=== FULL FILE: a.ts ===\n1| x")
        assert "<<<FILE:" in system + user
        assert "=== FULL FILE: a.ts ===" in user


# ── Source references ────────────────────────────────────────────────


class TestReferences:
    def test_extract_lines_inclusive(self):
        assert extract_lines(NUMBERED, 10, 12) == "line 10\nline 11\nline 12"

    def test_extract_lines_default_span(self):
        snippet = extract_lines(NUMBERED, 5)
        assert snippet.splitlines()[0] == "line 5"
        assert snippet.splitlines()[-1] == "line 35"

    def test_extract_lines_past_end(self):
        assert extract_lines("a\nb", 2, 50) == "b"

    def test_resolves_marker(self):
        trace = "Step 1\n<<<FILE:src/x.ts:10-12>>>\nDone"
        result = resolve_source_references(trace, [KeyFile(path="src/x.ts", content=NUMBERED)])
        assert result == "Step 1\n```typescript\nline 10\nline 11\nline 12\n```\nDone"

    def test_backticked_marker(self):
        trace = "`<<<FILE:main.py:1-1>>>`"
        result = resolve_source_references(trace, [KeyFile(path="main.py", content="import os")])
        assert result == "```python\nimport os\n```"

    def test_unknown_file(self):
        result = resolve_source_references("<<<FILE:nope.ts:1-3>>>", [])
        assert result == "```plaintext\n// File not found: nope.ts\n```"

    def test_fresh_files_win_over_cached(self):
        result = resolve_source_references(
            "<<<FILE:a.ts:1-1>>>",
            [KeyFile(path="a.ts", content="fresh")],
            [KeyFile(path="a.ts", content="cached")],
        )
        assert "fresh" in result and "cached" not in result

    def test_cached_files_used_when_not_fresh(self):
        result = resolve_source_references(
            "<<<FILE:a.ts:1-1>>>", [], [KeyFile(path="a.ts", content="cached")]
        )
        assert "cached" in result

    @pytest.mark.parametrize(
        "path,language",
        [("a.py", "python"), ("a.go", "go"), ("a.jsx", "javascript"), ("a.rs", "rust"), ("a.tsx", "typescript")],
    )
    def test_infer_language(self, path, language):
        assert infer_snippet_language(path) == language


# ── Step parsing ─────────────────────────────────────────────────────


TRACE = """**Step 1: Request arrives**
**Location:** `app/api/cart/route.ts`
```typescript
export async function GET() {}
```
**Explanation:** Next.js dispatches the GET handler.

**Step 2: Query database**
* **Location:** lib/db.ts
```
db.select()
```
Explanation: Loads cart rows.
"""


class TestParseExecutionSteps:
    def test_parses_steps(self):
        steps = parse_execution_steps(TRACE)
        assert [s.number for s in steps] == [1, 2]
        first, second = steps
        assert first.title == "Request arrives"
        assert first.location == "`app/api/cart/route.ts`"
        assert first.language == "typescript"
        assert first.code == "export async function GET() {}"
        assert first.explanation == "Next.js dispatches the GET handler."
        assert second.location == "lib/db.ts"
        assert second.language == "plaintext"
        assert second.code == "db.select()"
        assert second.explanation == "Loads cart rows."

    def test_no_steps(self):
        assert parse_execution_steps("just prose") == []

    def test_step_without_code(self):
        steps = parse_execution_steps("Step 3: Render\nLocation: page.tsx")
        assert steps[0].number == 3
        assert steps[0].code == ""
        assert steps[0].location == "page.tsx"

    def test_route_detail_serializes_camel(self):
        # lifecycle roles cross the wire in camelCase
        detail = RouteDetail(path="/", method="PAGE", lifecycle_role="Navigation")
        assert detail.model_dump(by_alias=True)["lifecycleRole"] == "Navigation"
