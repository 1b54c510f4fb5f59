"""
LLM Provider Abstraction.

Vision LLM vendor(Claude / ChatGPT / Gemini)를 하나의 인터페이스로 통일.
모델명/파라미터는 config만 SSOT, API 키는 환경변수만.
"""

from .anthropic import ClaudeProvider
from .base import (
    ConfigError,
    LLMProvider,
    NotInitializedError,
    ProviderCallError,
    ProviderConfig,
    ProviderError,
    ProviderResponse,
    ProviderUnavailableError,
    TokenUsage,
)
from .factory import (
    PROVIDER_SPECS,
    AvailableProvider,
    LLMProviderFactory,
    ProviderKey,
    ProviderSpec,
)
from .gemini import GeminiProvider
from .openai import ChatGPTProvider

__all__ = [
    "LLMProvider",
    "ProviderConfig",
    "ProviderResponse",
    "TokenUsage",
    "ProviderError",
    "ConfigError",
    "NotInitializedError",
    "ProviderUnavailableError",
    "ProviderCallError",
    "ClaudeProvider",
    "ChatGPTProvider",
    "GeminiProvider",
    "LLMProviderFactory",
    "ProviderKey",
    "ProviderSpec",
    "PROVIDER_SPECS",
    "AvailableProvider",
]
