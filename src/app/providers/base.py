"""
LLM Provider 추상 인터페이스.

Provider 추상화로 vendor 교체 가능:
- initialize(config) → vendor 클라이언트 생성 (네트워크 호출 없음)
- is_available() → 초기화 + API 키 존재 여부
- get_supported_models() → 고정된 모델 ID 목록
- process_image(image_base64, prompt, system_prompt) → ProviderResponse

process_image 정책:
- 초기화 전 호출 → NotInitializedError (fail-fast)
- vendor 호출 실패 → ProviderCallError (재시도 없음)
- 부분적으로 채워진 ProviderResponse는 절대 반환하지 않음
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, ClassVar, NoReturn

from src.domain.errors import ErrorCodes, ErrorReasons

logger = logging.getLogger(__name__)

# Vendor에 전달하는 이미지 MIME 타입
IMAGE_MEDIA_TYPE = "image/png"

# with_overrides / factory 옵션으로 바꿀 수 있는 설정 필드
CONFIG_OVERRIDE_KEYS = frozenset({"model", "max_tokens", "temperature"})


# =============================================================================
# Configuration / Result Data Classes
# =============================================================================

@dataclass(frozen=True)
class ProviderConfig:
    """
    Provider 초기화 설정.

    initialize()에 전달된 후에는 변경 불가.
    temperature=0 은 "미설정"과 구분되는 명시적 값.
    """
    api_key: str
    model: str | None = None
    max_tokens: int | None = None
    temperature: float | None = None

    def __repr__(self) -> str:
        # API 키는 로그/repr에 노출 금지
        return (
            f"ProviderConfig(api_key='***', model={self.model!r}, "
            f"max_tokens={self.max_tokens!r}, temperature={self.temperature!r})"
        )


@dataclass(frozen=True)
class TokenUsage:
    """Vendor가 보고한 토큰 사용량."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ProviderResponse:
    """
    정규화된 응답.

    usage: vendor가 토큰 사용량을 보고하지 않으면 None (0으로 채우지 않음)
    """
    content: str
    usage: TokenUsage | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": self.content}
        if self.usage is not None:
            result["usage"] = self.usage.to_dict()
        return result


# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderError(Exception):
    """Provider 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class ConfigError(ProviderError):
    """initialize 시 설정 오류 (API 키 누락/형식 오류)."""
    pass


class NotInitializedError(ProviderError):
    """초기화되지 않은 provider에 작업 시도."""
    pass


class ProviderUnavailableError(ProviderError):
    """Factory 조회 실패 (알 수 없는 키 또는 설정되지 않은 provider)."""
    pass


class ProviderCallError(ProviderError):
    """Vendor API 호출 실패 (네트워크, 인증, 쿼터, 잘못된 응답)."""
    pass


# =============================================================================
# Error Classification
# =============================================================================

ErrorMapping = tuple[tuple[tuple[type[BaseException], ...], str], ...]


def classify_error(error: Exception, mapping: ErrorMapping = ()) -> str:
    """
    Vendor 예외 → ErrorReasons 값.

    mapping 순서대로 isinstance 검사 후, 일치하지 않으면 메시지 기반 추정.
    (서브클래스 관계가 있는 예외는 mapping에서 먼저 나와야 함)
    """
    for exc_types, reason in mapping:
        if isinstance(error, exc_types):
            return reason

    if isinstance(error, TimeoutError):
        return ErrorReasons.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorReasons.CONNECTION

    error_str = str(error).lower()
    if "api_key" in error_str or "api key" in error_str or "401" in error_str:
        return ErrorReasons.AUTH
    elif "quota" in error_str or "rate limit" in error_str or "429" in error_str:
        return ErrorReasons.RATE_LIMIT
    elif "timeout" in error_str or "timed out" in error_str:
        return ErrorReasons.TIMEOUT
    elif "connection" in error_str:
        return ErrorReasons.CONNECTION

    return ErrorReasons.UNKNOWN


# =============================================================================
# Abstract Provider
# =============================================================================

class LLMProvider(ABC):
    """
    Vision LLM Provider 추상 인터페이스.

    역할: 이미지 + 프롬프트 → 정규화된 텍스트 (+ 토큰 사용량)

    하위 클래스 필수 정의:
        name, DEFAULT_MODEL, SUPPORTED_MODELS, _create_client(), _generate()
    """

    # 표시 이름 (예: "Claude")
    name: ClassVar[str] = ""

    DEFAULT_MODEL: ClassVar[str] = ""
    DEFAULT_MAX_TOKENS: ClassVar[int] = 4000
    # 0 = 결정적 출력 요청 (OCR 결과 변동 최소화)
    DEFAULT_TEMPERATURE: ClassVar[float] = 0.0
    MAX_TEMPERATURE: ClassVar[float] = 1.0

    # 첫 번째 항목이 관례상 가장 성능 좋은/기본 모델
    SUPPORTED_MODELS: ClassVar[tuple[str, ...]] = ()

    def __init__(self) -> None:
        self._config: ProviderConfig | None = None
        self._client: Any = None
        self._initialized = False

    @property
    def config(self) -> ProviderConfig | None:
        return self._config

    @property
    def model(self) -> str:
        """실제 호출에 쓰일 모델 (설정값, 없으면 DEFAULT_MODEL)."""
        return self._resolve_model()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def initialize(self, config: ProviderConfig) -> None:
        """
        설정 저장 + vendor 클라이언트 생성.

        클라이언트의 범위는 vendor SDK에 따름 (Gemini는 프로세스 전역).

        재호출 시 클라이언트와 설정을 교체 (이전 클라이언트 정리 없음).
        검증/클라이언트 생성이 실패하면 기존 상태는 유지됨.

        Raises:
            ConfigError: 설정 형식 오류, API 키 누락, SDK 미설치
        """
        self._validate_config(config)
        client = self._create_client(config)

        self._config = config
        self._client = client
        self._initialized = True
        logger.info(f"{self.name} provider initialized")

    def is_available(self) -> bool:
        """초기화 완료 + API 키 존재 여부."""
        return (
            self._initialized
            and self._config is not None
            and bool(self._config.api_key)
        )

    def get_supported_models(self) -> list[str]:
        """지원 모델 ID 목록 (고정, 호출마다 동일)."""
        return list(self.SUPPORTED_MODELS)

    def with_overrides(self, **overrides: Any) -> "LLMProvider":
        """
        현재 설정에서 일부 값만 바꾼 새 provider 생성.

        공유 인스턴스는 변경하지 않음 (동시 호출 안전).
        API 키는 바꿀 수 없으므로 vendor 클라이언트는 원본과 공유
        (호출마다 클라이언트/커넥션 풀을 새로 만들지 않음).

        Args:
            **overrides: model, max_tokens, temperature

        Returns:
            초기화된 새 provider 인스턴스

        Raises:
            ConfigError: 허용되지 않은 키 또는 잘못된 값
        """
        config = self._ensure_ready()

        unknown = set(overrides) - CONFIG_OVERRIDE_KEYS
        if unknown:
            self._config_error(f"cannot override: {', '.join(sorted(unknown))}")

        derived_config = replace(config, **overrides)
        self._validate_config(derived_config)

        derived = type(self)()
        derived._config = derived_config
        derived._client = self._client
        derived._initialized = True
        return derived

    # -------------------------------------------------------------------------
    # Core Operation
    # -------------------------------------------------------------------------

    async def process_image(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None = None,
    ) -> ProviderResponse:
        """
        이미지 1장 + 프롬프트 → 정규화된 응답.

        Args:
            image_base64: base64 인코딩된 PNG
            prompt: 작업 프롬프트
            system_prompt: 시스템 지시 (vendor별 방식으로 전달)

        Returns:
            ProviderResponse

        Raises:
            NotInitializedError: initialize() 전 호출
            ProviderCallError: vendor 호출 실패 (재시도 없음)
        """
        self._ensure_ready()

        try:
            return await self._generate(image_base64, prompt, system_prompt)
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"{self.name} API error: {e}", exc_info=True)
            raise ProviderCallError(
                ErrorCodes.PROVIDER_CALL_FAILED,
                f"{self.name} API error: {e}",
                provider=self.name,
                model=self._resolve_model(),
                reason=self._classify_error(e),
            ) from e

    # -------------------------------------------------------------------------
    # Subclass Hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def _create_client(self, config: ProviderConfig) -> Any:
        """API 키로 vendor 클라이언트 생성 (네트워크 호출 금지)."""
        ...

    @abstractmethod
    async def _generate(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None,
    ) -> ProviderResponse:
        """Vendor 호출 + 응답 정규화. 예외는 process_image에서 변환."""
        ...

    def _classify_error(self, error: Exception) -> str:
        """Vendor 예외 → 실패 사유. 하위 클래스에서 SDK 예외 매핑 추가."""
        return classify_error(error)

    # -------------------------------------------------------------------------
    # Shared Helpers
    # -------------------------------------------------------------------------

    def _ensure_ready(self) -> ProviderConfig:
        """초기화 안 됐거나 API 키 없으면 즉시 실패. 현재 설정 반환."""
        if not self.is_available() or self._config is None:
            raise NotInitializedError(
                ErrorCodes.PROVIDER_NOT_INITIALIZED,
                f"{self.name} provider not properly initialized",
                provider=self.name,
            )
        return self._config

    def _resolve_model(self) -> str:
        if self._config is not None and self._config.model:
            return self._config.model
        return self.DEFAULT_MODEL

    def _resolve_max_tokens(self) -> int:
        if self._config is not None and self._config.max_tokens:
            return self._config.max_tokens
        return self.DEFAULT_MAX_TOKENS

    def _resolve_temperature(self) -> float:
        # 0은 유효한 값 → None 여부로만 판단
        if self._config is not None and self._config.temperature is not None:
            return self._config.temperature
        return self.DEFAULT_TEMPERATURE

    def _validate_config(self, config: ProviderConfig) -> None:
        """설정 검증. 실패 시 ConfigError."""
        if not isinstance(config, ProviderConfig):
            self._config_error(f"expected ProviderConfig, got {type(config).__name__}")

        if not isinstance(config.api_key, str) or not config.api_key.strip():
            self._config_error("API key is missing")

        if config.model is not None and (
            not isinstance(config.model, str) or not config.model.strip()
        ):
            self._config_error(f"invalid model: {config.model!r}")

        if config.max_tokens is not None and (
            isinstance(config.max_tokens, bool)
            or not isinstance(config.max_tokens, int)
            or config.max_tokens <= 0
        ):
            self._config_error(f"max_tokens must be a positive integer: {config.max_tokens!r}")

        if config.temperature is not None:
            if isinstance(config.temperature, bool) or not isinstance(
                config.temperature, (int, float)
            ):
                self._config_error(f"temperature must be a number: {config.temperature!r}")
            if not 0 <= config.temperature <= self.MAX_TEMPERATURE:
                self._config_error(
                    f"temperature must be within [0, {self.MAX_TEMPERATURE}]: "
                    f"{config.temperature!r}"
                )

    def _config_error(self, detail: str) -> NoReturn:
        raise ConfigError(
            ErrorCodes.CONFIG_INVALID,
            f"{self.name} provider config invalid: {detail}",
            provider=self.name,
        )

    def _sdk_missing(self, package: str) -> ConfigError:
        return ConfigError(
            ErrorCodes.SDK_NOT_INSTALLED,
            f"{package} package not installed. Run: pip install {package}",
            provider=self.name,
        )


