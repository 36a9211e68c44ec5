"""YAML config loading with env var expansion."""

import os
import re
from collections.abc import Iterator
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import RepoScopeConfig

_ENV_REF = re.compile(r"\$\{(\w+)\}")
CONFIG_ENV_VAR = "REPOSCOPE_CONFIG"


def candidate_paths(cli_path: str | None = None) -> Iterator[Path]:
    """Config files in precedence order: CLI, $REPOSCOPE_CONFIG, project, user."""
    for explicit in (cli_path, os.environ.get(CONFIG_ENV_VAR)):
        if explicit:
            yield Path(explicit)
    yield Path("reposcope.yaml")
    yield Path.home() / ".reposcope" / "config.yaml"


def _read_mapping(path: Path) -> dict | None:
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    return _expand_env_vars(raw) if raw else None


def load_config(cli_path: str | None = None) -> RepoScopeConfig:
    """Load the first non-empty config file, or built-in defaults.

    Empty files are skipped so the next location can apply.
    """
    for path in candidate_paths(cli_path):
        if not path.is_file():
            continue
        raw = _read_mapping(path)
        if raw is None:
            continue
        try:
            return RepoScopeConfig.model_validate(raw)
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
    return RepoScopeConfig()


def _expand_env_vars(obj: object) -> object:
    """Replace ${VAR} in every string leaf; unset variables become ""."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), ""), obj)
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


# Default YAML template for `reposcope config init`
DEFAULT_CONFIG_TEMPLATE = """\
# reposcope.yaml

# LLM provider pool. The primary key serves architecture and execution-trace
# analysis; secondary keys alternate on the lightweight file-relevance call.
llm:
  provider: "openai"           # openai (any OpenAI-compatible endpoint) | anthropic
  model: "llama-3.3-70b-versatile"
  base_url: "https://api.groq.com/openai/v1"
  api_key_env: "GROQ_API_KEY"
  secondary_key_envs:
    - "GROQ_API_KEY_1"
    - "GROQ_API_KEY_2"
  max_tokens: 8192
  temperature: 0.2
  max_retries: 0

# Source host
vcs:
  provider: "github"
  token_env: "GITHUB_TOKEN"
  base_url: "https://api.github.com"
  timeout: 15

# Analysis cache (SQLite)
cache:
  path: ".reposcope/cache.db"

# HTTP service
service:
  host: "127.0.0.1"
  port: 8000

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
