#!/usr/bin/env python3
"""
check_providers.py - Vision LLM provider 연결 확인 스크립트

설정된 API 키(.env / 환경변수)로 provider를 초기화하고,
각 provider의 기본 모델(또는 --model)로 이미지 한 장을 OCR 요청.

사용법:
    # 설정된 모든 provider 확인 (내장 1x1 PNG)
    uv run python scripts/check_providers.py

    # 실제 이미지 + 특정 모델
    uv run python scripts/check_providers.py --image scan.png --model gpt-4o-mini

주의: 실제 vendor API를 호출하므로 과금될 수 있음.
"""

import argparse
import asyncio
import base64
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

# 프로젝트 루트를 path에 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.app.providers.factory import LLMProviderFactory
from src.app.services.models import configured_model
from src.app.services.ocr import OCRService
from src.core.config import EnvConfigSource, get_provider_options, load_config

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# 1x1 흰색 PNG
SAMPLE_IMAGE_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)


@dataclass
class CheckResult:
    """provider 하나의 확인 결과."""
    provider: str
    model: str
    success: bool
    detail: str


async def check_providers(
    service: OCRService,
    image_base64: str,
    models: list[str],
) -> list[CheckResult]:
    """
    모델별로 OCR 요청 후 결과 수집.

    Args:
        service: OCRService
        image_base64: base64 PNG
        models: 확인할 모델 ID 목록
    """
    results: list[CheckResult] = []

    for model in models:
        result = await service.extract_from_base64(image_base64, model=model)

        if result.success:
            preview = (result.text or "").strip().replace("\n", " ")[:60]
            detail = f"text={preview!r}, usage={result.usage}"
        else:
            detail = f"{result.error_code} ({result.error_reason}): {result.error_message}"

        results.append(
            CheckResult(
                provider=result.provider or "-",
                model=model,
                success=result.success,
                detail=detail,
            )
        )

    return results


def default_models(factory: LLMProviderFactory) -> list[str]:
    """사용 가능한 provider별 설정 모델 (OCRService 기본 선택과 동일 규칙)."""
    return [
        configured_model(factory, available.key)
        for available in factory.get_available_providers()
    ]


def main():
    parser = argparse.ArgumentParser(
        description="Vision LLM provider 연결 확인",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--image",
        type=Path,
        help="OCR할 PNG 이미지 (기본: 내장 1x1 PNG)",
    )
    parser.add_argument(
        "--model",
        action="append",
        help="확인할 모델 ID (여러 번 지정 가능, 기본: provider별 기본 모델)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help=".env 파일 경로 (기본: 자동 탐색)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="default.yaml 경로 (기본: 프로젝트 루트)",
    )

    args = parser.parse_args()

    factory = LLMProviderFactory(
        EnvConfigSource(args.env_file),
        provider_options=get_provider_options(load_config(args.config)),
    )
    factory.initialize()

    available = factory.get_available_providers()
    if not available:
        logger.error("사용 가능한 provider 없음: ANTHROPIC_API_KEY / OPENAI_API_KEY / GEMINI_API_KEY 확인")
        return 1

    logger.info(f"사용 가능한 provider: {', '.join(p.key for p in available)}")

    if args.image is not None:
        if not args.image.exists():
            logger.error(f"이미지 없음: {args.image}")
            return 1
        image_base64 = base64.b64encode(args.image.read_bytes()).decode("ascii")
    else:
        image_base64 = SAMPLE_IMAGE_BASE64

    models = args.model or default_models(factory)
    results = asyncio.run(check_providers(OCRService(factory), image_base64, models))

    logger.info("=" * 50)
    for result in results:
        status = "PASS" if result.success else "FAIL"
        logger.info(f"[{status}] {result.provider} / {result.model}: {result.detail}")
    logger.info("=" * 50)

    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
