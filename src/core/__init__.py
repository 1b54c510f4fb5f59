"""
Core layer: 설정 조회.

역할:
- API 키 조회 (ConfigSource: 환경변수 / .env / dict)
- default.yaml 로드
"""

from .config import (
    ConfigSource,
    EnvConfigSource,
    MappingConfigSource,
    get_provider_options,
    load_config,
)

__all__ = [
    "ConfigSource",
    "EnvConfigSource",
    "MappingConfigSource",
    "load_config",
    "get_provider_options",
]
