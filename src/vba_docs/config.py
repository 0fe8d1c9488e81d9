from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_API_BASE_URL = "https://api.microsoft.com/vba"
DEFAULT_DOCS_BASE_URL = "https://docs.microsoft.com/en-us/office/vba"
SEARCH_API_VERSION = "2023-11-01"


class ConfigError(ValueError):
    pass


def _env_str(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    value = _env_str(environ, name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


@dataclass(frozen=True)
class CatalogConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    docs_base_url: str = DEFAULT_DOCS_BASE_URL
    api_key: str | None = None
    timeout_ms: int = 15_000
    cache_ttl_s: int = 3600
    max_results: int = 50
    default_tokens: int = 10_000

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CatalogConfig":
        env = os.environ if environ is None else environ
        return cls(
            api_base_url=_env_str(env, "VBA_API_BASE_URL") or DEFAULT_API_BASE_URL,
            docs_base_url=(
                _env_str(env, "VBA_DOCS_BASE_URL") or DEFAULT_DOCS_BASE_URL
            ),
            api_key=_env_str(env, "MICROSOFT_API_KEY"),
            timeout_ms=_env_int(env, "VBA_API_TIMEOUT", 15_000),
            cache_ttl_s=_env_int(env, "VBA_CACHE_TTL", 3600),
            max_results=_env_int(env, "VBA_MAX_RESULTS", 50),
            default_tokens=_env_int(env, "VBA_DEFAULT_TOKENS", 10_000),
        )
