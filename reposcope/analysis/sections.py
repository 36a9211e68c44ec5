"""Model calls for each analysis section: prompt, generate, decode."""

from __future__ import annotations

import logging

from reposcope.codec.decoders import (
    decode_architecture,
    decode_relevant_files,
    decode_route_catalog,
    decode_route_trace,
)
from reposcope.codec.models import (
    ArchitectureAnalysis,
    Decoded,
    Fallback,
    RouteDetail,
    RouteTrace,
)
from reposcope.codec.prompts import (
    build_architecture_prompt,
    build_relevance_prompt,
    build_route_catalog_prompt,
    build_trace_prompt,
)
from reposcope.llm.base import LLMProvider
from reposcope.vcs.models import KeyFile, TechStack, TreeItem

logger = logging.getLogger(__name__)

RELEVANCE_MAX_TOKENS = 1000
RELEVANCE_TEMPERATURE = 0.1


def _log_fallback(section: str, decoded: Decoded) -> None:
    if isinstance(decoded, Fallback):
        logger.warning("%s: using fallback (%s)", section, decoded.reason)


async def analyze_architecture(
    llm: LLMProvider,
    file_tree: list[TreeItem],
    tech_stack: TechStack,
    key_files: list[KeyFile],
) -> Decoded[ArchitectureAnalysis]:
    system, user = build_architecture_prompt(file_tree, tech_stack, key_files)
    response = await llm.generate(system, user)
    decoded = decode_architecture(response.content)
    _log_fallback("architecture", decoded)
    return decoded


async def analyze_routes(
    llm: LLMProvider,
    key_files: list[KeyFile],
    file_tree: list[TreeItem],
    tech_stack: TechStack,
) -> Decoded[list[RouteDetail]]:
    system, user = build_route_catalog_prompt(key_files, file_tree, tech_stack)
    response = await llm.generate(system, user)
    decoded = decode_route_catalog(response.content)
    _log_fallback("route catalog", decoded)
    return decoded


async def identify_relevant_files(
    llm: LLMProvider, route: str, file_paths: list[str]
) -> Decoded[list[str]]:
    system, user = build_relevance_prompt(route, file_paths)
    response = await llm.generate(
        system, user, max_tokens=RELEVANCE_MAX_TOKENS, temperature=RELEVANCE_TEMPERATURE
    )
    decoded = decode_relevant_files(response.content)
    _log_fallback("relevant files", decoded)
    return decoded


async def analyze_route_trace(
    llm: LLMProvider, route: str, codebase: str
) -> Decoded[RouteTrace]:
    system, user = build_trace_prompt(route, codebase)
    response = await llm.generate(system, user)
    decoded = decode_route_trace(response.content)
    _log_fallback("route trace", decoded)
    return decoded
