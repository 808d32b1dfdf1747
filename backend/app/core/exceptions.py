"""
Custom exception classes for unified error handling.

Every class carries a user-facing ``message`` (Korean, shown in the chat UI)
and an optional ``detail`` for logs and JSON error bodies.
"""

from fastapi import HTTPException, status


class AppBaseError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ConfigurationError(AppBaseError):
    """Raised when a credential is missing or a backend cannot be created."""
    def __init__(self, message: str = "서버에 AI API 키가 설정되어 있지 않습니다.", detail: str | None = None):
        super().__init__(message=message, detail=detail)


class IndexUnavailableError(ConfigurationError):
    """Raised by every search after the vector index failed to initialize."""
    def __init__(self, detail: str | None = None):
        super().__init__(
            message="지식 색인을 사용할 수 없습니다. 관리자에게 문의해 주세요.",
            detail=detail,
        )


class UpstreamError(AppBaseError):
    """Raised when the generation or embedding backend fails mid-request."""
    def __init__(self, message: str = "AI 응답을 생성하는 중 문제가 발생했습니다.", detail: str | None = None):
        super().__init__(message=message, detail=detail)


class FrameParseError(UpstreamError):
    """Raised when a stream frame cannot be decoded."""
    def __init__(self, detail: str):
        super().__init__(
            message="스트림 응답을 해석하지 못했습니다.",
            detail=detail,
        )


class ValidationError(AppBaseError):
    """Raised when a chat request is rejected before any stream work."""
    def __init__(self, message: str = "질문이 비어 있습니다. 질문을 입력해 주세요."):
        super().__init__(message=message, detail=None)


# ── Utility: convert to HTTPException ────────────────────

def app_error_to_http(error: AppBaseError, status_code: int = 400) -> HTTPException:
    """Convert an AppBaseError to an HTTPException with consistent JSON body."""
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.message,
            "detail": error.detail,
            "type": type(error).__name__,
        },
    )


def status_for(error: AppBaseError) -> int:
    """Pick the HTTP status code for a non-streaming endpoint."""
    match error:
        case ValidationError():
            return status.HTTP_400_BAD_REQUEST
        case ConfigurationError():
            return status.HTTP_503_SERVICE_UNAVAILABLE
        case UpstreamError():
            return status.HTTP_502_BAD_GATEWAY
        case _:
            return status.HTTP_500_INTERNAL_SERVER_ERROR
