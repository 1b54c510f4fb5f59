"""
Pytest fixtures for the LLM OCR tests.

테스트 구성 규칙:
- 네트워크 호출 금지 (vendor 클라이언트는 provider._client 교체로 mock)
- 환경변수 API 키는 테스트마다 제거 (로컬 .env 영향 차단)
"""

import base64
from pathlib import Path

import pytest

from src.core.config import MappingConfigSource

# 1x1 흰색 PNG
SAMPLE_PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)

API_KEY_ENV_VARS = ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GEMINI_API_KEY")


# =============================================================================
# Environment Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clear_api_key_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """실제 API 키 환경변수 제거."""
    for name in API_KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def sample_png_bytes() -> bytes:
    """1x1 PNG 바이트."""
    return SAMPLE_PNG_BYTES


@pytest.fixture
def sample_image_base64() -> str:
    """1x1 PNG base64."""
    return base64.b64encode(SAMPLE_PNG_BYTES).decode("ascii")


@pytest.fixture
def sample_png_file(tmp_path: Path) -> Path:
    """디스크에 저장된 1x1 PNG."""
    path = tmp_path / "scan.png"
    path.write_bytes(SAMPLE_PNG_BYTES)
    return path


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def all_keys_source() -> MappingConfigSource:
    """세 provider 모두 API 키 있음."""
    return MappingConfigSource({
        "ANTHROPIC_API_KEY": "test-claude-key",
        "OPENAI_API_KEY": "test-openai-key",
        "GEMINI_API_KEY": "test-gemini-key",
    })


@pytest.fixture
def claude_only_source() -> MappingConfigSource:
    """Claude API 키만 있음."""
    return MappingConfigSource({"ANTHROPIC_API_KEY": "test-claude-key"})
