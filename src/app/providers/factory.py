"""
LLM Provider Factory.

역할:
- 고정된 provider 집합(claude | chatgpt | gemini)을 한 번만 초기화
- 논리 키 → 초기화된 provider 인스턴스 조회

초기화 정책:
- API 키가 없는 provider는 생성하지 않음 (에러 아님)
- 한 provider의 초기화 실패는 로그만 남기고 나머지는 계속 진행
- 등록된 provider는 프로세스 수명 동안 제거되지 않음 (키 hot-reload 없음)
"""

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.core.config import ConfigSource
from src.domain.errors import ErrorCodes

from .anthropic import ClaudeProvider
from .base import (
    CONFIG_OVERRIDE_KEYS,
    ConfigError,
    LLMProvider,
    ProviderConfig,
    ProviderUnavailableError,
)
from .gemini import GeminiProvider
from .openai import ChatGPTProvider

logger = logging.getLogger(__name__)

# provider별 허용 옵션 키 (default.yaml ai.llm_ocr.providers.<key>)
PROVIDER_OPTION_KEYS = CONFIG_OVERRIDE_KEYS


class ProviderKey(str, Enum):
    """Provider 논리 키."""
    CLAUDE = "claude"
    CHATGPT = "chatgpt"
    GEMINI = "gemini"


@dataclass(frozen=True)
class ProviderSpec:
    """Provider 키 ↔ 클래스 ↔ API 키 환경변수."""
    key: ProviderKey
    provider_class: type[LLMProvider]
    env_key: str


PROVIDER_SPECS: tuple[ProviderSpec, ...] = (
    ProviderSpec(ProviderKey.CLAUDE, ClaudeProvider, "ANTHROPIC_API_KEY"),
    ProviderSpec(ProviderKey.CHATGPT, ChatGPTProvider, "OPENAI_API_KEY"),
    ProviderSpec(ProviderKey.GEMINI, GeminiProvider, "GEMINI_API_KEY"),
)


@dataclass(frozen=True)
class AvailableProvider:
    """사용 가능한 provider 요약."""
    key: str
    name: str
    models: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "models": list(self.models),
        }


def _normalize_key(key: ProviderKey | str) -> str:
    return key.value if isinstance(key, ProviderKey) else key


def build_provider_config(
    api_key: str,
    options: Mapping[str, Any] | None = None,
) -> ProviderConfig:
    """
    API 키 + 옵션 → ProviderConfig.

    값 범위 검증은 provider.initialize()에서 수행.

    Raises:
        ConfigError: 알 수 없는 옵션 키
    """
    options = options or {}

    unknown = set(options) - PROVIDER_OPTION_KEYS
    if unknown:
        raise ConfigError(
            ErrorCodes.CONFIG_INVALID,
            f"Unknown provider option(s): {', '.join(sorted(unknown))}",
        )

    return ProviderConfig(
        api_key=api_key,
        model=options.get("model"),
        max_tokens=options.get("max_tokens"),
        temperature=options.get("temperature"),
    )


class LLMProviderFactory:
    """
    Provider registry 소유 + 조회.

    전역 싱글톤이 아님: 시작 시 한 번 생성해서 호출자에게 주입.

    Usage:
        factory = LLMProviderFactory(EnvConfigSource())
        factory.initialize()
        provider = factory.get_provider("claude")
        response = await provider.process_image(image_base64, prompt)
    """

    def __init__(
        self,
        config_source: ConfigSource,
        provider_options: Mapping[str, Mapping[str, Any]] | None = None,
        specs: tuple[ProviderSpec, ...] = PROVIDER_SPECS,
    ):
        """
        Args:
            config_source: API 키 조회용 (get(key) → str | None)
            provider_options: provider 키 → model/max_tokens/temperature
            specs: 초기화할 provider 목록 (기본: claude, chatgpt, gemini)
        """
        self.config_source = config_source
        self.provider_options = dict(provider_options or {})
        self.specs = specs

        self._providers: dict[str, LLMProvider] = {}
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """
        모든 provider 초기화 (멱등).

        동시에 여러 호출자가 처음 호출해도 한 번만 실행됨.
        """
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            providers: dict[str, LLMProvider] = {}

            for spec in self.specs:
                key = spec.key.value
                name = spec.provider_class.name

                api_key = self.config_source.get(spec.env_key)
                if not api_key:
                    logger.warning(f"{name} API key not found ({spec.env_key})")
                    continue

                try:
                    provider = spec.provider_class()
                    provider.initialize(
                        build_provider_config(api_key, self.provider_options.get(key))
                    )
                    providers[key] = provider
                    logger.info(f"{name} provider initialized successfully")
                except Exception as e:
                    logger.warning(f"Failed to initialize {name} provider: {e}")

            self._providers = providers
            self._initialized = True

    def get_provider(self, key: ProviderKey | str) -> LLMProvider:
        """
        키로 provider 조회 (공유 인스턴스 반환).

        Raises:
            ProviderUnavailableError: 알 수 없는 키 또는 설정되지 않은 provider
        """
        self.initialize()

        key = _normalize_key(key)
        provider = self._providers.get(key)
        if provider is None:
            raise ProviderUnavailableError(
                ErrorCodes.PROVIDER_UNAVAILABLE,
                f"LLM provider '{key}' not available",
                provider=key,
            )

        return provider

    def get_available_providers(self) -> list[AvailableProvider]:
        """사용 가능한 provider 목록 (키, 표시 이름, 지원 모델)."""
        self.initialize()

        return [
            AvailableProvider(
                key=key,
                name=provider.name,
                models=provider.get_supported_models(),
            )
            for key, provider in self._providers.items()
            if provider.is_available()
        ]

    def is_provider_available(self, key: ProviderKey | str) -> bool:
        """
        사용 가능 여부.

        알 수 없는 키와 설정되지 않은 키를 구분하지 않음 (둘 다 False).
        """
        self.initialize()

        provider = self._providers.get(_normalize_key(key))
        return provider.is_available() if provider is not None else False
