"""Extensible manifest parsing via registry pattern.

Adding a new manifest kind requires only defining a parser class and
registering an instance in PARSERS under the manifest's file name.
"""

from __future__ import annotations

import json
import re
import tomllib
import xml.etree.ElementTree as ET
from typing import NamedTuple, Protocol, runtime_checkable

_REQUIREMENT_NAME = re.compile(r"[>=<!~\[;\s]")


class ParsedManifest(NamedTuple):
    dependencies: list[str]
    dev_dependencies: list[str]


@runtime_checkable
class ManifestParser(Protocol):
    """Protocol for manifest file parsers."""

    file_name: str

    def parse(self, content: str) -> ParsedManifest:
        """Extract dependency names. Never raises on malformed content."""
        ...


def _requirement_name(spec: str) -> str:
    return _REQUIREMENT_NAME.split(spec.strip(), maxsplit=1)[0]


class PackageJsonParser:
    """dependencies / devDependencies objects of package.json."""

    file_name = "package.json"

    def parse(self, content: str) -> ParsedManifest:
        try:
            data = json.loads(content)
            return ParsedManifest(
                list((data.get("dependencies") or {}).keys()),
                list((data.get("devDependencies") or {}).keys()),
            )
        except (json.JSONDecodeError, TypeError, AttributeError):
            return ParsedManifest([], [])


class RequirementsTxtParser:
    """Unstructured: every non-empty, non-comment line is kept verbatim."""

    file_name = "requirements.txt"

    def parse(self, content: str) -> ParsedManifest:
        lines = [
            line.strip()
            for line in content.splitlines()
            if line.strip() and not line.lstrip().startswith("#")
        ]
        return ParsedManifest(lines, [])


class PyprojectTomlParser:
    """[project].dependencies, optional-dependencies counted as dev."""

    file_name = "pyproject.toml"

    def parse(self, content: str) -> ParsedManifest:
        try:
            project = tomllib.loads(content).get("project", {})
        except tomllib.TOMLDecodeError:
            return ParsedManifest([], [])
        deps = [_requirement_name(d) for d in project.get("dependencies", [])]
        dev = [
            _requirement_name(d)
            for group in project.get("optional-dependencies", {}).values()
            for d in group
        ]
        return ParsedManifest([d for d in deps if d], [d for d in dev if d])


class CargoTomlParser:
    file_name = "Cargo.toml"

    def parse(self, content: str) -> ParsedManifest:
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError:
            return ParsedManifest([], [])
        return ParsedManifest(
            list(data.get("dependencies", {}).keys()),
            list(data.get("dev-dependencies", {}).keys()),
        )


class GoModParser:
    """require directives, both single-line and block form."""

    file_name = "go.mod"

    def parse(self, content: str) -> ParsedManifest:
        names: list[str] = []
        in_block = False
        for line in content.splitlines():
            stripped = line.split("//", 1)[0].strip()
            if not stripped:
                continue
            if stripped.startswith("require ("):
                in_block = True
                continue
            if in_block:
                if stripped == ")":
                    in_block = False
                    continue
                names.append(stripped.split()[0])
            elif stripped.startswith("require "):
                names.append(stripped.split()[1])
        return ParsedManifest(names, [])


class PomXmlParser:
    """Maven artifactIds; test-scoped dependencies are counted as dev."""

    file_name = "pom.xml"

    def parse(self, content: str) -> ParsedManifest:
        try:
            root = ET.fromstring(content)
        except ET.ParseError:
            return ParsedManifest([], [])
        deps: list[str] = []
        dev: list[str] = []
        for dep in root.iter():
            if not dep.tag.endswith("dependency"):
                continue
            artifact = scope = None
            for child in dep:
                if child.tag.endswith("artifactId"):
                    artifact = (child.text or "").strip()
                elif child.tag.endswith("scope"):
                    scope = (child.text or "").strip()
            if artifact:
                (dev if scope == "test" else deps).append(artifact)
        return ParsedManifest(deps, dev)


# Registry keyed by manifest file name.
PARSERS: dict[str, ManifestParser] = {
    p.file_name: p
    for p in (
        PackageJsonParser(),
        RequirementsTxtParser(),
        PyprojectTomlParser(),
        CargoTomlParser(),
        GoModParser(),
        PomXmlParser(),
    )
}


def parse_manifest(path: str, content: str) -> ParsedManifest:
    """Dispatch on the basename of *path*; unknown kinds yield empty lists."""
    parser = PARSERS.get(path.rsplit("/", 1)[-1])
    if parser is None:
        return ParsedManifest([], [])
    return parser.parse(content)
