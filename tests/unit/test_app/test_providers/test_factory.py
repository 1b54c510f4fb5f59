"""
test_factory.py - LLMProviderFactory 테스트

검증:
- API 키 있는 provider만 등록 (부분 가용성은 정상 상태)
- initialize() 멱등 + 동시 첫 호출에도 한 번만 실행
- 알 수 없는 키 / 설정되지 않은 키 → 동일하게 취급
- 한 provider 초기화 실패가 나머지를 막지 않음
"""

import threading
from unittest.mock import patch

import pytest

from src.app.providers.anthropic import ClaudeProvider
from src.app.providers.base import ConfigError, ProviderUnavailableError
from src.app.providers.factory import (
    PROVIDER_SPECS,
    LLMProviderFactory,
    ProviderKey,
    build_provider_config,
)
from src.core.config import MappingConfigSource
from src.domain.errors import ErrorCodes


class CountingSource(MappingConfigSource):
    """get() 호출 횟수를 세는 ConfigSource."""

    def __init__(self, values):
        super().__init__(values)
        self.calls: list[str] = []
        self._calls_lock = threading.Lock()

    def get(self, key):
        with self._calls_lock:
            self.calls.append(key)
        return super().get(key)


# =============================================================================
# Provider Specs
# =============================================================================


class TestProviderSpecs:
    """고정된 provider 집합."""

    def test_fixed_set(self):
        assert [(spec.key.value, spec.env_key) for spec in PROVIDER_SPECS] == [
            ("claude", "ANTHROPIC_API_KEY"),
            ("chatgpt", "OPENAI_API_KEY"),
            ("gemini", "GEMINI_API_KEY"),
        ]

    def test_provider_key_values(self):
        assert {key.value for key in ProviderKey} == {"claude", "chatgpt", "gemini"}


# =============================================================================
# initialize 테스트
# =============================================================================


class TestInitialize:
    """initialize() 테스트."""

    def test_all_providers_with_all_keys(self, all_keys_source):
        factory = LLMProviderFactory(all_keys_source)
        factory.initialize()

        available = factory.get_available_providers()

        assert [p.key for p in available] == ["claude", "chatgpt", "gemini"]
        assert [p.name for p in available] == ["Claude", "ChatGPT", "Gemini"]

    def test_claude_only(self, claude_only_source):
        """키가 하나만 있으면 그 provider만 등록."""
        factory = LLMProviderFactory(claude_only_source)
        factory.initialize()

        available = factory.get_available_providers()

        assert len(available) == 1
        assert available[0].key == "claude"
        assert available[0].models == ClaudeProvider().get_supported_models()
        assert factory.is_provider_available("chatgpt") is False
        assert factory.is_provider_available("gemini") is False

    def test_no_keys(self):
        factory = LLMProviderFactory(MappingConfigSource({}))
        factory.initialize()

        assert factory.initialized is True
        assert factory.get_available_providers() == []

    def test_missing_key_logged(self, claude_only_source, caplog):
        factory = LLMProviderFactory(claude_only_source)

        with caplog.at_level("WARNING"):
            factory.initialize()

        assert "ChatGPT API key not found (OPENAI_API_KEY)" in caplog.text
        assert "Gemini API key not found (GEMINI_API_KEY)" in caplog.text

    def test_idempotent(self, all_keys_source):
        """두 번 호출해도 registry 동일."""
        factory = LLMProviderFactory(all_keys_source)

        factory.initialize()
        first = dict(factory._providers)
        factory.initialize()

        assert factory._providers == first
        assert all(factory._providers[k] is first[k] for k in first)

    def test_config_source_read_once_per_provider(self):
        source = CountingSource({"ANTHROPIC_API_KEY": "k"})
        factory = LLMProviderFactory(source)

        factory.initialize()
        factory.initialize()
        factory.get_provider("claude")

        assert sorted(source.calls) == sorted(
            ["ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY"]
        )

    def test_concurrent_first_use_initializes_once(self):
        """동시 첫 호출에도 초기화는 한 번만."""
        source = CountingSource({
            "ANTHROPIC_API_KEY": "k1",
            "OPENAI_API_KEY": "k2",
            "GEMINI_API_KEY": "k3",
        })
        factory = LLMProviderFactory(source)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(factory.get_provider("claude"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(source.calls) == 3
        assert len(results) == 8
        assert all(provider is results[0] for provider in results)

    def test_one_failure_does_not_abort_others(self, all_keys_source, caplog):
        """한 provider 초기화 실패 → 로그만, 나머지는 등록."""
        with patch.object(
            ClaudeProvider,
            "_create_client",
            side_effect=ConfigError(ErrorCodes.SDK_NOT_INSTALLED, "anthropic missing"),
        ):
            factory = LLMProviderFactory(all_keys_source)
            with caplog.at_level("WARNING"):
                factory.initialize()

        assert factory.is_provider_available("claude") is False
        assert factory.is_provider_available("chatgpt") is True
        assert factory.is_provider_available("gemini") is True
        assert "Failed to initialize Claude provider" in caplog.text

    def test_provider_options_applied(self, claude_only_source):
        factory = LLMProviderFactory(
            claude_only_source,
            provider_options={
                "claude": {"model": "claude-3-5-haiku-20241022", "max_tokens": 2000},
            },
        )

        provider = factory.get_provider("claude")

        assert provider.config.model == "claude-3-5-haiku-20241022"
        assert provider.config.max_tokens == 2000
        assert provider.config.api_key == "test-claude-key"

    def test_invalid_provider_options_skip_provider(self, all_keys_source):
        factory = LLMProviderFactory(
            all_keys_source,
            provider_options={"gemini": {"temperature": 5}},
        )

        assert factory.is_provider_available("gemini") is False
        assert factory.is_provider_available("claude") is True

    def test_api_key_not_logged(self, all_keys_source, caplog):
        factory = LLMProviderFactory(all_keys_source)

        with caplog.at_level("DEBUG"):
            factory.initialize()

        assert "test-claude-key" not in caplog.text


# =============================================================================
# 조회 테스트
# =============================================================================


class TestLookup:
    """get_provider / is_provider_available 테스트."""

    def test_get_provider_initializes_lazily(self, all_keys_source):
        factory = LLMProviderFactory(all_keys_source)

        provider = factory.get_provider("claude")

        assert factory.initialized is True
        assert provider.name == "Claude"

    def test_get_provider_returns_shared_instance(self, all_keys_source):
        factory = LLMProviderFactory(all_keys_source)

        assert factory.get_provider("gemini") is factory.get_provider("gemini")

    def test_get_provider_accepts_enum(self, all_keys_source):
        factory = LLMProviderFactory(all_keys_source)

        assert factory.get_provider(ProviderKey.CHATGPT) is factory.get_provider("chatgpt")

    def test_unknown_key(self, all_keys_source):
        factory = LLMProviderFactory(all_keys_source)

        with pytest.raises(ProviderUnavailableError) as exc_info:
            factory.get_provider("unknown-key")

        assert "unknown-key" in str(exc_info.value)
        assert exc_info.value.message == "LLM provider 'unknown-key' not available"
        assert exc_info.value.code == ErrorCodes.PROVIDER_UNAVAILABLE

    def test_unconfigured_key_same_error(self, claude_only_source):
        """알 수 없는 키와 설정되지 않은 키는 같은 에러."""
        factory = LLMProviderFactory(claude_only_source)

        with pytest.raises(ProviderUnavailableError) as exc_info:
            factory.get_provider("chatgpt")

        assert exc_info.value.message == "LLM provider 'chatgpt' not available"

    def test_is_provider_available(self, all_keys_source):
        factory = LLMProviderFactory(all_keys_source)
        factory.initialize()

        assert factory.is_provider_available("claude") is True
        assert factory.is_provider_available(ProviderKey.GEMINI) is True
        assert factory.is_provider_available("unknown") is False

    def test_available_providers_to_dict(self, claude_only_source):
        factory = LLMProviderFactory(claude_only_source)

        data = factory.get_available_providers()[0].to_dict()

        assert data["key"] == "claude"
        assert data["name"] == "Claude"
        assert data["models"][0] == "claude-3-5-sonnet-20241022"


# =============================================================================
# build_provider_config 테스트
# =============================================================================


class TestBuildProviderConfig:
    """build_provider_config 테스트."""

    def test_without_options(self):
        config = build_provider_config("k")

        assert config.api_key == "k"
        assert config.model is None

    def test_with_options(self):
        config = build_provider_config(
            "k", {"model": "gpt-4o-mini", "max_tokens": 500, "temperature": 0}
        )

        assert config.model == "gpt-4o-mini"
        assert config.max_tokens == 500
        assert config.temperature == 0

    def test_unknown_option_rejected(self):
        with pytest.raises(ConfigError) as exc_info:
            build_provider_config("k", {"api_key": "leak", "top_p": 0.9})

        assert "api_key, top_p" in exc_info.value.message
