from pydantic import BaseModel, Field
from typing import Literal


class LLMSettings(BaseModel):
    provider: Literal["openai", "anthropic"] = "openai"
    model: str = "llama-3.3-70b-versatile"
    base_url: str | None = "https://api.groq.com/openai/v1"
    api_key_env: str = "GROQ_API_KEY"
    secondary_key_envs: list[str] = Field(
        default_factory=lambda: ["GROQ_API_KEY_1", "GROQ_API_KEY_2"]
    )
    max_tokens: int = Field(default=8192, gt=0)
    temperature: float = Field(default=0.2, ge=0)
    timeout: int = Field(default=120, gt=0)
    # SDK-level retries; throttling is handled by reposcope.llm.rate_limit
    max_retries: int = Field(default=0, ge=0)


class VCSConfig(BaseModel):
    provider: Literal["github"] = "github"
    token_env: str = "GITHUB_TOKEN"
    base_url: str = "https://api.github.com"
    host: str = "github.com"
    timeout: int = Field(default=15, gt=0)


class CacheConfig(BaseModel):
    path: str = ".reposcope/cache.db"


class ServiceConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0)


class RepoScopeConfig(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
