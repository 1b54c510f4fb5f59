"""
Anthropic (Claude) Provider.

Vendor 규칙:
- 이미지: base64 image 블록 (media_type 명시)
- 시스템 지시: 최상위 system 필드 (있을 때만 포함)
- usage: 성공 시 항상 보고됨 (input_tokens + output_tokens)
"""

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


class ClaudeProvider(LLMProvider):
    """
    Claude API Provider.

    Usage:
        provider = ClaudeProvider()
        provider.initialize(ProviderConfig(api_key="sk-ant-..."))
        response = await provider.process_image(image_base64, prompt)
    """

    name = "Claude"
    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
    MAX_TEMPERATURE = 1.0
    SUPPORTED_MODELS = (
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
        "claude-3-sonnet-20240229",
        "claude-3-haiku-20240307",
        "claude-4-sonnet-20250514",
    )

    def _create_client(self, config: ProviderConfig) -> Any:
        """Anthropic 비동기 클라이언트 생성."""
        try:
            import anthropic
        except ImportError as e:
            raise self._sdk_missing("anthropic") from e

        return anthropic.AsyncAnthropic(api_key=config.api_key)

    async def _generate(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None,
    ) -> ProviderResponse:
        messages = [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": IMAGE_MEDIA_TYPE,
                            "data": image_base64,
                        },
                    },
                    {
                        "type": "text",
                        "text": prompt,
                    },
                ],
            },
        ]

        api_kwargs: dict[str, Any] = {
            "model": self._resolve_model(),
            "max_tokens": self._resolve_max_tokens(),
            "temperature": self._resolve_temperature(),
            "messages": messages,
        }
        if system_prompt:
            api_kwargs["system"] = system_prompt

        response = await self._client.messages.create(**api_kwargs)

        # 텍스트 블록만 사용 (tool_use 등 무시)
        content = "".join(
            block.text for block in response.content if block.type == "text"
        )

        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens

        return ProviderResponse(
            content=content,
            usage=TokenUsage(
                prompt_tokens=input_tokens,
                completion_tokens=output_tokens,
                total_tokens=input_tokens + output_tokens,
            ),
        )

    def _classify_error(self, error: Exception) -> str:
        import anthropic

        # APITimeoutError는 APIConnectionError 하위 → 먼저 검사
        return classify_error(
            error,
            (
                ((anthropic.AuthenticationError,), ErrorReasons.AUTH),
                ((anthropic.PermissionDeniedError,), ErrorReasons.PERMISSION),
                ((anthropic.RateLimitError,), ErrorReasons.RATE_LIMIT),
                ((anthropic.APITimeoutError,), ErrorReasons.TIMEOUT),
                ((anthropic.APIConnectionError,), ErrorReasons.CONNECTION),
                ((anthropic.BadRequestError,), ErrorReasons.BAD_REQUEST),
            ),
        )
