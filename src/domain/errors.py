"""
Error codes for the LLM OCR provider layer.

규칙:
- 조용한 실패 금지 → ProviderError 계열로 명시적 실패
- 한 provider의 초기화 실패는 factory 전체를 중단시키지 않음
- 재시도/다른 provider로의 fallback 없음 (호출자 책임)
"""


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수. ProviderError.code 로 사용."""

    # === Initialize ===
    CONFIG_INVALID = "CONFIG_INVALID"
    SDK_NOT_INSTALLED = "SDK_NOT_INSTALLED"

    # === Provider state ===
    PROVIDER_NOT_INITIALIZED = "PROVIDER_NOT_INITIALIZED"
    PROVIDER_UNAVAILABLE = "PROVIDER_UNAVAILABLE"

    # === Vendor call ===
    PROVIDER_CALL_FAILED = "PROVIDER_CALL_FAILED"

    # === Model selection ===
    MODEL_NOT_ENABLED = "MODEL_NOT_ENABLED"


class ErrorReasons:
    """
    Vendor 호출 실패 사유 (ProviderCallError.context["reason"]).

    사용자에게 일반 실패 대신 구분 가능한 사유를 보여주기 위함.
    """

    AUTH = "auth"
    PERMISSION = "permission"
    RATE_LIMIT = "rate_limit"
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    BAD_REQUEST = "bad_request"
    UNKNOWN = "unknown"
