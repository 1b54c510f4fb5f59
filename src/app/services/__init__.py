"""
Application Services.

역할:
- ocr: 테넌트 설정 기반 모델 선택 → Vision LLM OCR
- models: 사용 가능한 모델 목록 (표시 이름/설명)
"""

from .models import configured_model, find_provider_key, list_available_models
from .ocr import OCRResult, OCRService

__all__ = [
    "OCRService",
    "OCRResult",
    "configured_model",
    "find_provider_key",
    "list_available_models",
]
