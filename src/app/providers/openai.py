"""
OpenAI (ChatGPT) Provider.

Vendor 규칙:
- 이미지: data URL을 image_url 파트에 포함 (detail="high")
- 시스템 지시: 첫 메시지를 system role로 추가
- usage: vendor가 반환할 때만 포함
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


class ChatGPTProvider(LLMProvider):
    """
    ChatGPT API Provider.

    Usage:
        provider = ChatGPTProvider()
        provider.initialize(ProviderConfig(api_key="sk-...", model="gpt-4o-mini"))
        response = await provider.process_image(image_base64, prompt, system_prompt)
    """

    name = "ChatGPT"
    DEFAULT_MODEL = "gpt-4o"
    MAX_TEMPERATURE = 2.0
    SUPPORTED_MODELS = (
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4-turbo",
        "gpt-4-turbo-preview",
        "gpt-4-vision-preview",
        "gpt-4",
    )

    def _create_client(self, config: ProviderConfig) -> Any:
        """OpenAI 비동기 클라이언트 생성."""
        try:
            import openai
        except ImportError as e:
            raise self._sdk_missing("openai") from e

        return openai.AsyncOpenAI(api_key=config.api_key)

    async def _generate(
        self,
        image_base64: str,
        prompt: str,
        system_prompt: str | None,
    ) -> ProviderResponse:
        messages: list[dict[str, Any]] = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({
            "role": "user",
            "content": [
                {
                    "type": "text",
                    "text": prompt,
                },
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:{IMAGE_MEDIA_TYPE};base64,{image_base64}",
                        "detail": "high",
                    },
                },
            ],
        })

        response = await self._client.chat.completions.create(
            model=self._resolve_model(),
            messages=messages,
            max_tokens=self._resolve_max_tokens(),
            temperature=self._resolve_temperature(),
            response_format={"type": "text"},
        )

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )

        return ProviderResponse(content=content, usage=usage)

    def _classify_error(self, error: Exception) -> str:
        import openai

        # APITimeoutError는 APIConnectionError 하위 → 먼저 검사
        return classify_error(
            error,
            (
                ((openai.AuthenticationError,), ErrorReasons.AUTH),
                ((openai.PermissionDeniedError,), ErrorReasons.PERMISSION),
                ((openai.RateLimitError,), ErrorReasons.RATE_LIMIT),
                ((openai.APITimeoutError,), ErrorReasons.TIMEOUT),
                ((openai.APIConnectionError,), ErrorReasons.CONNECTION),
                ((openai.BadRequestError,), ErrorReasons.BAD_REQUEST),
            ),
        )
