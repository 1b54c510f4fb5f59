"""
Google Gemini Provider.

Vendor 규칙:
- 이미지: inline 데이터 (mime_type 명시)
- 시스템 지시: 유저 프롬프트 앞에 빈 줄로 구분해서 붙임
- usage: usage_metadata가 있을 때만 포함 (개별 카운트 누락 시 0)

SDK 제약:
- google.generativeai는 인스턴스별 클라이언트가 없음. genai.configure()가
  프로세스 전역 API 키를 설정하므로 마지막으로 initialize()된 키가 모든
  GeminiProvider 인스턴스에 적용됨 (프로세스당 Gemini 키 하나만 지원)
- with_overrides로 만든 인스턴스는 configure()를 다시 호출하지 않음
"""

import base64
from typing import Any

from src.domain.errors import ErrorReasons

from .base import (
    IMAGE_MEDIA_TYPE,
    LLMProvider,
    ProviderConfig,
    ProviderResponse,
    TokenUsage,
    classify_error,
)


class GeminiProvider(LLMProvider):
    """
    Gemini API Provider.

    Usage:
        provider = GeminiProvider()
        provider.initialize(ProviderConfig(api_key="AI..."))
        response = await provider.process_image(image_base64, prompt)
    """

    name = "Gemini"
    DEFAULT_MODEL = "gemini-2.0-flash-exp"
    MAX_TEMPERATURE = 2.0
    SUPPORTED_MODELS = (
        "gemini-2.0-flash-exp",
        "gemini-1.5-flash",
        "gemini-1.5-flash-8b",
        "gemini-1.5-pro",
        "gemini-pro-vision",
    )

    def _create_client(self, config: ProviderConfig) -> Any:
        """
        Gemini SDK 설정.

        google.generativeai 모듈 자체를 클라이언트로 반환.
        configure()는 프로세스 전역 상태를 바꿈 (인스턴스별 키 불가).
        """
        try:
            import google.generativeai as genai
        except ImportError as e:
            raise self._sdk_missing("google-generativeai") from e

        genai.configure(api_key=config.api_key)
        return genai

    async def _generate(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None,
    ) -> ProviderResponse:
        model_instance = self._client.GenerativeModel(
            model_name=self._resolve_model(),
            generation_config={
                "temperature": self._resolve_temperature(),
                "max_output_tokens": self._resolve_max_tokens(),
            },
        )

        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt

        image_part = {
            "mime_type": IMAGE_MEDIA_TYPE,
            "data": base64.b64decode(image_base64),
        }

        response = await model_instance.generate_content_async([image_part, full_prompt])

        content = response.text or ""

        usage = None
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata:
            usage = TokenUsage(
                prompt_tokens=usage_metadata.prompt_token_count or 0,
                completion_tokens=usage_metadata.candidates_token_count or 0,
                total_tokens=usage_metadata.total_token_count or 0,
            )

        return ProviderResponse(content=content, usage=usage)

    def _classify_error(self, error: Exception) -> str:
        from google.api_core import exceptions as google_exceptions

        return classify_error(
            error,
            (
                ((google_exceptions.Unauthenticated,), ErrorReasons.AUTH),
                ((google_exceptions.PermissionDenied,), ErrorReasons.PERMISSION),
                ((google_exceptions.ResourceExhausted,), ErrorReasons.RATE_LIMIT),
                ((google_exceptions.DeadlineExceeded,), ErrorReasons.TIMEOUT),
                ((google_exceptions.ServiceUnavailable,), ErrorReasons.CONNECTION),
                ((google_exceptions.InvalidArgument,), ErrorReasons.BAD_REQUEST),
            ),
        )
