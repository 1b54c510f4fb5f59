"""
Data schemas for model selection.

테넌트 설정(어떤 모델이 기본/활성인지)과
호출자에게 노출하는 모델 목록 DTO.
저장/조회는 이 모듈의 책임이 아님.
"""

from dataclasses import dataclass, field
from typing import Any

# =============================================================================
# Available Model
# =============================================================================

@dataclass(frozen=True)
class AvailableModel:
    """
    호출자에게 광고하는 모델 정보 (읽기 전용).

    예: AvailableModel("claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", "claude")
    """
    model: str
    display_name: str
    provider: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "model": self.model,
            "display_name": self.display_name,
            "provider": self.provider,
            "description": self.description,
        }
        return {k: v for k, v in result.items() if v is not None}


# =============================================================================
# Tenant LLM Settings
# =============================================================================

@dataclass(frozen=True)
class ModelConfig:
    """모델별 호출 파라미터 override."""
    max_tokens: int | None = None
    temperature: float | None = None

    def to_overrides(self) -> dict[str, Any]:
        """None이 아닌 값만 (with_overrides 인자용)."""
        overrides: dict[str, Any] = {}
        if self.max_tokens is not None:
            overrides["max_tokens"] = self.max_tokens
        if self.temperature is not None:
            overrides["temperature"] = self.temperature
        return overrides


@dataclass
class LLMSettings:
    """
    테넌트별 LLM 설정.

    - default_model: 기본 모델 ID
    - enabled_models: 사용 허용 모델 ID 목록 (기본 모델은 항상 포함)
    - model_configs: 모델 ID → ModelConfig
    """
    default_model: str = ""
    enabled_models: list[str] = field(default_factory=list)
    model_configs: dict[str, ModelConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # 기본 모델은 비활성화할 수 없음
        if self.default_model and self.default_model not in self.enabled_models:
            self.enabled_models = [*self.enabled_models, self.default_model]

    def is_enabled(self, model: str) -> bool:
        return model in self.enabled_models

    def config_for(self, model: str) -> ModelConfig:
        return self.model_configs.get(model, ModelConfig())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LLMSettings":
        """
        dict → LLMSettings.

        테넌트 저장소의 camelCase 키(defaultModel, enabledModels,
        modelConfigs)와 snake_case 키를 모두 허용.
        """
        default_model = data.get("default_model", data.get("defaultModel")) or ""
        enabled_models = data.get("enabled_models", data.get("enabledModels")) or []
        raw_configs = data.get("model_configs", data.get("modelConfigs")) or {}

        model_configs = {
            model: ModelConfig(
                max_tokens=cfg.get("max_tokens", cfg.get("maxTokens")),
                temperature=cfg.get("temperature"),
            )
            for model, cfg in raw_configs.items()
        }

        return cls(
            default_model=default_model,
            enabled_models=list(enabled_models),
            model_configs=model_configs,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "default_model": self.default_model,
            "enabled_models": list(self.enabled_models),
            "model_configs": {
                model: cfg.to_overrides() for model, cfg in self.model_configs.items()
            },
        }
