"""Typed results produced by the response decoders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar, get_args

from pydantic import Field, field_validator

from reposcope.schema import CamelModel

T = TypeVar("T")

LifecycleRole = Literal[
    "Authentication",
    "Data Fetching",
    "CRUD Operation",
    "UI Rendering",
    "File Processing",
    "Third-party Integration",
    "Real-time",
    "Navigation",
    "Background Processing",
]

LIFECYCLE_ROLES: tuple[str, ...] = get_args(LifecycleRole)


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """The model's own output decoded cleanly."""

    value: T

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class Fallback(Generic[T]):
    """A best-effort substitute used because the model output was malformed."""

    value: T
    reason: str

    @property
    def is_fallback(self) -> bool:
        return True


Decoded = Parsed[T] | Fallback[T]


class ArchitectureAnalysis(CamelModel):
    overall_flow: str
    architecture_diagram: str = Field(alias="architectureMermaid")


class RouteDetail(CamelModel):
    """One catalog entry.

    ``lifecycle_role`` is snapped to the canonical spelling when it names a
    known role; any other label the model invents is kept as written.
    """

    path: str
    method: str = ""
    functionality: str = ""
    contribution: str = ""
    lifecycle_role: str = ""

    @field_validator("lifecycle_role", mode="before")
    @classmethod
    def _match_role_case(cls, v: object) -> object:
        if v is None:
            return ""
        if isinstance(v, str):
            wanted = v.strip()
            for role in LIFECYCLE_ROLES:
                if role.lower() == wanted.lower():
                    return role
            return wanted
        return v


class RouteTrace(CamelModel):
    """Flow diagram plus markdown execution trace for one route."""

    flow_visualization: str
    execution_trace: str


class ParsedExecutionStep(CamelModel):
    number: int
    title: str
    location: str = ""
    language: str = "plaintext"
    code: str = ""
    explanation: str = ""
