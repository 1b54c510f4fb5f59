"""
Model catalog: 사용 가능한 모델 목록.

관리자 화면에서 기본/활성 모델을 고를 때 쓰는 목록.
모델 ID 목록 자체는 각 provider의 SUPPORTED_MODELS가 SSOT.
"""

from src.app.providers.factory import PROVIDER_SPECS, LLMProviderFactory
from src.domain.schemas import AvailableModel

# 모델 ID → (표시 이름, 설명)
MODEL_DISPLAY_INFO: dict[str, tuple[str, str | None]] = {
    # Claude
    "claude-3-5-sonnet-20241022": (
        "Claude 3.5 Sonnet",
        "Latest Claude model with enhanced capabilities",
    ),
    "claude-3-5-haiku-20241022": ("Claude 3.5 Haiku", "Fast and cost-efficient"),
    "claude-3-opus-20240229": ("Claude 3 Opus", "Most capable Claude 3 model"),
    "claude-3-sonnet-20240229": ("Claude 3 Sonnet", None),
    "claude-3-haiku-20240307": ("Claude 3 Haiku", None),
    "claude-4-sonnet-20250514": ("Claude 4 Sonnet", None),
    # ChatGPT
    "gpt-4o": ("GPT-4o", "Multimodal flagship model"),
    "gpt-4o-mini": ("GPT-4o mini", "Fast and cost-efficient"),
    "gpt-4-turbo": ("GPT-4 Turbo", None),
    "gpt-4-turbo-preview": ("GPT-4 Turbo Preview", None),
    "gpt-4-vision-preview": ("GPT-4 Vision Preview", None),
    "gpt-4": ("GPT-4", None),
    # Gemini
    "gemini-2.0-flash-exp": ("Gemini 2.0 Flash (Experimental)", None),
    "gemini-1.5-flash": ("Gemini 1.5 Flash", "Fast and versatile"),
    "gemini-1.5-flash-8b": ("Gemini 1.5 Flash-8B", None),
    "gemini-1.5-pro": ("Gemini 1.5 Pro", "Complex reasoning tasks"),
    "gemini-pro-vision": ("Gemini Pro Vision", None),
}


def find_provider_key(model: str) -> str | None:
    """
    모델 ID를 지원하는 provider 키.

    Returns:
        "claude" | "chatgpt" | "gemini", 없으면 None
    """
    for spec in PROVIDER_SPECS:
        if model in spec.provider_class.SUPPORTED_MODELS:
            return spec.key.value
    return None


def configured_model(factory: LLMProviderFactory, provider_key: str) -> str:
    """
    provider에 설정된 모델 (factory 옵션 > provider DEFAULT_MODEL).

    Raises:
        ProviderUnavailableError: 사용할 수 없는 provider
    """
    return factory.get_provider(provider_key).model


def list_available_models(factory: LLMProviderFactory) -> list[AvailableModel]:
    """
    사용 가능한 provider의 모든 모델.

    표시 이름이 없으면 모델 ID를 그대로 사용.
    """
    models: list[AvailableModel] = []

    for available in factory.get_available_providers():
        for model in available.models:
            display_name, description = MODEL_DISPLAY_INFO.get(model, (model, None))
            models.append(
                AvailableModel(
                    model=model,
                    display_name=display_name,
                    provider=available.key,
                    description=description,
                )
            )

    return models
