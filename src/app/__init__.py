"""
App layer: Vision LLM OCR.

역할:
- providers/ → vendor별 adapter + factory
- services/ → 모델 선택, OCR 호출, 결과 정규화
- ⚠️ HTTP 라우트/테넌트 설정 저장 없음 (호출자에 위임)
"""
