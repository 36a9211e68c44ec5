from .loader import load_config
from .models import (
    CacheConfig,
    LLMSettings,
    RepoScopeConfig,
    ServiceConfig,
    VCSConfig,
)

__all__ = [
    "CacheConfig",
    "LLMSettings",
    "RepoScopeConfig",
    "ServiceConfig",
    "VCSConfig",
    "load_config",
]
