"""
Configuration: API 키 조회 + default.yaml 로드.

규칙:
- API 키는 환경변수(.env 포함)에서만 조회, yaml에 저장 금지
- 모델명/파라미터는 default.yaml (ai.llm_ocr.providers.<key>)
- 실제 환경변수가 .env보다 우선
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml
from dotenv import load_dotenv

# 프로젝트 루트의 default.yaml
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "default.yaml"


# =============================================================================
# Config Sources
# =============================================================================

class ConfigSource(Protocol):
    """키 → 문자열 값 (없으면 None)."""

    def get(self, key: str) -> str | None:
        ...


class EnvConfigSource:
    """
    환경변수 기반 ConfigSource.

    Usage:
        source = EnvConfigSource()          # 프로젝트 .env 자동 탐색
        source = EnvConfigSource(".env.local")
        api_key = source.get("ANTHROPIC_API_KEY")
    """

    def __init__(self, env_file: str | Path | None = None, load_env: bool = True):
        """
        Args:
            env_file: .env 파일 경로 (None이면 python-dotenv 기본 탐색)
            load_env: False면 .env 로드 생략 (os.environ만 사용)
        """
        if load_env:
            # override=False: 실제 환경변수 우선
            load_dotenv(env_file, override=False)

    def get(self, key: str) -> str | None:
        value = os.environ.get(key)
        # 빈 문자열은 미설정으로 취급
        return value if value else None


class MappingConfigSource:
    """dict 기반 ConfigSource (테스트/임베딩용)."""

    def __init__(self, values: Mapping[str, str | None] | None = None):
        self._values = dict(values or {})

    def get(self, key: str) -> str | None:
        value = self._values.get(key)
        return value if value else None


# =============================================================================
# YAML Config
# =============================================================================

def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """설정 파일 로드. 파일이 없으면 빈 dict."""
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[str, Any] | None = yaml.safe_load(f)
        return data or {}


def get_llm_ocr_config(config: dict[str, Any]) -> dict[str, Any]:
    """ai.llm_ocr 섹션."""
    section: dict[str, Any] = config.get("ai", {}).get("llm_ocr", {}) or {}
    return section


def get_provider_options(config: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """
    provider별 옵션 (ai.llm_ocr.providers).

    Returns:
        {"claude": {"model": ..., "max_tokens": ...}, ...}
    """
    providers = get_llm_ocr_config(config).get("providers", {}) or {}
    return {key: dict(options or {}) for key, options in providers.items()}

