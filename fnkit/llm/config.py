"""Provider configuration for chat-completion clients."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "ProviderType",
    "Config",
    "DeepSeekConfig",
    "OpenAIConfig",
    "ClaudeConfig",
    "DEFAULT_CONFIGS",
    "get_default_config",
    "get_json_config",
]


class ProviderType(str, Enum):
    DEEPSEEK = "deepseek"
    OPENAI = "openai"
    CLAUDE = "claude"
    QWEN = "qwen"
    CHATGLM = "chatglm"


@dataclass
class Config:
    """Common client configuration; durations are in seconds."""

    provider: ProviderType | str = ""
    api_key: str = ""
    base_url: str = ""
    timeout: float = 0.0

    default_model: str = ""
    default_temperature: float = 0.0
    default_max_tokens: int = 0
    default_top_p: float = 0.0

    max_retries: int = 0
    retry_interval: float = 0.0

    enable_logging: bool = False
    log_level: str = ""

    enable_rag: bool = False
    max_rag_documents: int = 0
    rag_similarity_min: float = 0.0

    max_concurrency: int = 0
    rate_limit_rps: int = 0

    enable_json_mode: bool = False

    def validate(self) -> None:
        """Raise ValueError if the configuration cannot be used."""
        if not self.api_key:
            raise ValueError("API key is required")
        if not self.base_url:
            raise ValueError("base URL is required")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.default_max_tokens <= 0:
            raise ValueError("default max tokens must be positive")
        if not 0 <= self.default_temperature <= 2:
            raise ValueError("default temperature must be between 0 and 2")
        if not 0 <= self.default_top_p <= 1:
            raise ValueError("default top_p must be between 0 and 1")

    def clone(self) -> Config:
        return dataclasses.replace(self)

    def with_api_key(self, api_key: str) -> Config:
        """Set the API key and return a copy."""
        self.api_key = api_key
        return self.clone()

    def with_json_mode(self) -> Config:
        """Enable JSON output with a low temperature and return a copy."""
        self.enable_json_mode = True
        self.default_temperature = 0.1
        return self.clone()

    def with_model(self, model: str) -> Config:
        self.default_model = model
        return self.clone()

    def with_temperature(self, temperature: float) -> Config:
        self.default_temperature = temperature
        return self.clone()

    def with_max_tokens(self, max_tokens: int) -> Config:
        """Set the default token limit and return this same config."""
        self.default_max_tokens = max_tokens
        return self

    def with_timeout(self, timeout: float) -> Config:
        self.timeout = timeout
        return self

    def with_rag(self, max_documents: int, similarity_min: float) -> Config:
        self.enable_rag = True
        self.max_rag_documents = max_documents
        self.rag_similarity_min = similarity_min
        return self


@dataclass
class DeepSeekConfig(Config):
    enable_reasoner: bool = False


@dataclass
class OpenAIConfig(Config):
    organization: str = ""
    project_id: str = ""


@dataclass
class ClaudeConfig(Config):
    anthropic_version: str = ""


DEFAULT_CONFIGS: dict[ProviderType, Config] = {
    ProviderType.DEEPSEEK: Config(
        provider=ProviderType.DEEPSEEK,
        base_url="https://api.deepseek.com",
        timeout=30.0,
        default_model="deepseek-coder",
        default_temperature=0.1,
        default_max_tokens=2000,
        default_top_p=0.9,
        max_retries=3,
        retry_interval=1.0,
        enable_logging=True,
        log_level="info",
        enable_rag=True,
        max_rag_documents=5,
        rag_similarity_min=0.7,
        max_concurrency=10,
        rate_limit_rps=60,
        enable_json_mode=False,
    ),
    ProviderType.OPENAI: Config(
        provider=ProviderType.OPENAI,
        base_url="https://api.openai.com/v1",
        timeout=60.0,
        default_model="gpt-4",
        default_temperature=0.7,
        default_max_tokens=4000,
        default_top_p=1.0,
        max_retries=3,
        retry_interval=2.0,
        enable_logging=True,
        log_level="info",
        enable_rag=True,
        max_rag_documents=10,
        rag_similarity_min=0.8,
        max_concurrency=5,
        rate_limit_rps=60,
        enable_json_mode=False,
    ),
    ProviderType.CLAUDE: Config(
        provider=ProviderType.CLAUDE,
        base_url="https://api.anthropic.com",
        timeout=60.0,
        default_model="claude-3-5-sonnet-20241022",
        default_temperature=0.3,
        default_max_tokens=4000,
        default_top_p=1.0,
        max_retries=3,
        retry_interval=2.0,
        enable_logging=True,
        log_level="info",
        enable_rag=True,
        max_rag_documents=8,
        rag_similarity_min=0.75,
        max_concurrency=3,
        rate_limit_rps=30,
        enable_json_mode=False,
    ),
}


def get_default_config(provider: ProviderType | str) -> Config:
    """A copy of the provider's defaults; unknown providers get DeepSeek's."""
    config = DEFAULT_CONFIGS.get(provider)  # type: ignore[call-overload]
    if config is None:
        config = DEFAULT_CONFIGS[ProviderType.DEEPSEEK]
    return config.clone()


def get_json_config(provider: ProviderType | str) -> Config:
    """Defaults for ``provider`` with JSON output enabled."""
    config = get_default_config(provider)
    config.enable_json_mode = True
    config.default_temperature = 0.1
    return config