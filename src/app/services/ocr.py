"""
OCR Service: 이미지 → 텍스트 추출 (Vision LLM).

정책:
- 모델 선택: 요청 모델 > 테넌트 기본 모델 > 첫 번째 사용 가능 provider에 설정된 모델
  (default.yaml 옵션, 없으면 provider 기본 모델)
- 활성화되지 않은 모델 요청 → 실패 (MODEL_NOT_ENABLED)
- 재시도/다른 provider로의 fallback 없음
- 실패 시 사람 확인 UX로 되돌림 (사유별 메시지)
"""

import base64
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.app.providers.base import (
    ConfigError,
    LLMProvider,
    ProviderError,
    ProviderUnavailableError,
)
from src.app.providers.factory import LLMProviderFactory
from src.domain.errors import ErrorCodes, ErrorReasons
from src.domain.schemas import LLMSettings

from .models import configured_model, find_provider_key

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are an OCR engine. Transcribe text exactly as it appears in the image. "
    "Do not summarize, translate, or add commentary."
)

DEFAULT_OCR_PROMPT = (
    "Extract all text from this image. "
    "Preserve the reading order and keep table structure where present. "
    "Return only the extracted text."
)


@dataclass
class OCRResult:
    """
    OCR 결과.

    필수 추적 키:
    - model_requested: 요청/설정된 모델
    - model_used: 실제 호출된 모델 (fallback 없으므로 성공 시 동일)
    """
    success: bool
    text: str | None = None

    provider: str | None = None
    model_requested: str | None = None
    model_used: str | None = None
    usage: dict[str, int] | None = None

    processed_at: str | None = None
    error_code: str | None = None
    error_reason: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "text": self.text,
            "provider": self.provider,
            "model_requested": self.model_requested,
            "model_used": self.model_used,
            "usage": self.usage,
            "processed_at": self.processed_at,
            "error_code": self.error_code,
            "error_reason": self.error_reason,
            "error_message": self.error_message,
        }


class OCRService:
    """
    OCR 서비스.

    Usage:
        factory = LLMProviderFactory(EnvConfigSource())
        service = OCRService(factory, settings=LLMSettings.from_dict(tenant_settings))
        result = await service.extract_from_file(Path("scan.png"))
    """

    # 실패 사유별 사용자 메시지
    USER_MESSAGES: dict[str, str] = {
        ErrorReasons.AUTH: "API 인증에 실패했습니다. API 키 설정을 확인해주세요.",
        ErrorReasons.PERMISSION: "이 작업을 수행할 권한이 없습니다. API 키의 권한을 확인해주세요.",
        ErrorReasons.RATE_LIMIT: "API 사용량 한도를 초과했습니다. 잠시 후 다시 시도해주세요.",
        ErrorReasons.CONNECTION: "네트워크 연결 오류가 발생했습니다. 잠시 후 다시 시도해주세요.",
        ErrorReasons.TIMEOUT: "요청 시간이 초과되었습니다. 다시 시도해주세요.",
        ErrorReasons.BAD_REQUEST: "요청 형식이 올바르지 않습니다. 이미지 형식과 크기를 확인해주세요.",
        ErrorCodes.MODEL_NOT_ENABLED: "선택한 모델이 활성화되어 있지 않습니다. 설정을 확인해주세요.",
        ErrorCodes.PROVIDER_UNAVAILABLE: "선택한 모델을 사용할 수 없습니다. 관리자에게 문의해주세요.",
    }

    def __init__(
        self,
        factory: LLMProviderFactory,
        settings: LLMSettings | None = None,
        prompt: str = DEFAULT_OCR_PROMPT,
        system_prompt: str | None = DEFAULT_SYSTEM_PROMPT,
    ):
        """
        Args:
            factory: provider factory (시작 시 한 번 생성된 것을 주입)
            settings: 테넌트 LLM 설정 (None이면 모델 제한 없음)
            prompt: OCR 작업 프롬프트
            system_prompt: 시스템 지시 (None이면 전달 안 함)
        """
        self.factory = factory
        self.settings = settings
        self.prompt = prompt
        self.system_prompt = system_prompt

    async def extract_from_file(
        self,
        file_path: Path,
        model: str | None = None,
    ) -> OCRResult:
        """파일에서 텍스트 추출."""
        return await self.extract_from_bytes(file_path.read_bytes(), model=model)

    async def extract_from_bytes(
        self,
        file_bytes: bytes,
        model: str | None = None,
    ) -> OCRResult:
        """바이트에서 텍스트 추출."""
        image_base64 = base64.b64encode(file_bytes).decode("ascii")
        return await self.extract_from_base64(image_base64, model=model)

    async def extract_from_base64(
        self,
        image_base64: str,
        model: str | None = None,
    ) -> OCRResult:
        """
        base64 이미지에서 텍스트 추출.

        Args:
            image_base64: base64 인코딩된 PNG
            model: 사용할 모델 ID (None이면 설정 기반 선택)

        Returns:
            OCRResult (ProviderError는 실패 결과로 변환)
        """
        now = datetime.now(UTC).isoformat()
        model_requested = model
        provider_key: str | None = None

        try:
            model_requested, provider_key = self.resolve_model(model)
            provider = self._get_provider(provider_key, model_requested)

            response = await provider.process_image(
                image_base64,
                self.prompt,
                self.system_prompt,
            )

            return OCRResult(
                success=True,
                text=response.content,
                provider=provider_key,
                model_requested=model_requested,
                model_used=model_requested,
                usage=response.usage.to_dict() if response.usage else None,
                processed_at=now,
            )

        except ProviderError as e:
            logger.warning(f"OCR failed ({provider_key}, {model_requested}): {e}")
            return OCRResult(
                success=False,
                provider=provider_key,
                model_requested=model_requested,
                model_used=None,
                processed_at=now,
                error_code=e.code,
                error_reason=e.context.get("reason"),
                error_message=e.message,
            )

    def resolve_model(self, model: str | None = None) -> tuple[str, str]:
        """
        사용할 모델과 provider 키 결정.

        Returns:
            (model, provider_key)

        Raises:
            ConfigError: 활성화되지 않은 모델 (MODEL_NOT_ENABLED)
            ProviderUnavailableError: 지원하는 provider가 없거나 사용 가능한 provider가 없음
        """
        if model is None and self.settings is not None and self.settings.default_model:
            model = self.settings.default_model

        if model is None:
            available = self.factory.get_available_providers()
            if not available:
                raise ProviderUnavailableError(
                    ErrorCodes.PROVIDER_UNAVAILABLE,
                    "No LLM provider available",
                )
            first = available[0]
            return configured_model(self.factory, first.key), first.key

        if self.settings is not None and not self.settings.is_enabled(model):
            raise ConfigError(
                ErrorCodes.MODEL_NOT_ENABLED,
                f"Model '{model}' is not enabled",
                model=model,
            )

        provider_key = find_provider_key(model)
        if provider_key is None:
            raise ProviderUnavailableError(
                ErrorCodes.PROVIDER_UNAVAILABLE,
                f"No LLM provider supports model '{model}'",
                model=model,
            )

        return model, provider_key

    def _get_provider(self, provider_key: str, model: str) -> LLMProvider:
        """
        공유 provider 조회 후 모델/파라미터 override 적용.

        override가 필요하면 새 인스턴스를 만들고 공유 인스턴스는 그대로 둠.
        새 인스턴스는 공유 인스턴스의 vendor 클라이언트를 재사용.
        """
        provider = self.factory.get_provider(provider_key)

        overrides: dict[str, Any] = {}
        if self.settings is not None:
            overrides.update(self.settings.config_for(model).to_overrides())

        if provider.model != model:
            overrides["model"] = model

        if not overrides:
            return provider
        return provider.with_overrides(**overrides)

    def get_user_message(self, result: OCRResult) -> str:
        """
        OCR 결과에 따른 사용자 메시지.

        실패 시 사유별 메시지, 알 수 없는 사유는 직접 입력 안내.
        """
        if result.success and result.text:
            return "이미지에서 텍스트를 성공적으로 추출했습니다."
        elif result.success:
            return "이미지에서 텍스트를 찾지 못했습니다. 직접 입력해주세요."

        for key in (result.error_reason, result.error_code):
            if key and key in self.USER_MESSAGES:
                return self.USER_MESSAGES[key]

        return "이미지를 인식하지 못했습니다. 직접 입력해주세요."
