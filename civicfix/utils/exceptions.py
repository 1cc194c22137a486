"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns
and for the issue submission/feed failure taxonomy. Services raise these
directly; FastAPI renders them without extra handlers.

Usage:
    from civicfix.utils.exceptions import NotFoundError, IssueValidationError
    raise NotFoundError("Issue not found")
    raise IssueValidationError("Location required")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (issue, profile) does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired.

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches.

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _cause_summary(cause: BaseException) -> str:
    # 드라이버 메시지 첫 줄만 — SQL text and bound parameters stay out of responses
    message = str(getattr(cause, "orig", None) or cause).strip()
    return message.splitlines()[0] if message else type(cause).__name__


# ---------------------------------------------------------------------------
# 이슈 제출 예외 — Issue submission failures
# ---------------------------------------------------------------------------


class IssueValidationError(BadRequestError):
    """초안 검증 실패 — 네트워크/DB 호출 이전에 발생.

    Draft validation failure (missing location/category, unknown enum value).
    Always raised before any record store or object storage call.
    """


class TooManyImagesError(BadRequestError):
    """사진 선택 한도 초과 — 추가하려던 사진만 거부됩니다.

    Raised when adding images would exceed the per-issue limit.
    Only the addition is rejected; already queued images stay queued.
    """

    def __init__(self, limit: int) -> None:
        super().__init__(f"Too many images: you can upload a maximum of {limit} images per issue")
        self.limit: int = limit


class NotAuthenticatedError(UnauthorizedError):
    """인증된 사용자 없이 제출 시도.

    No authenticated principal is available for the submission.
    """

    def __init__(self, detail: str = "User not authenticated") -> None:
        super().__init__(detail)


class SubmissionStepError(HTTPException):
    """제출 단계 실패 공통 부모 — 원인 예외를 보존합니다.

    Base class for fatal submission step failures. Keeps the underlying
    cause on ``self.cause`` and includes it in the response detail.

    Args:
        status_code: HTTP 상태 코드 (HTTP status code)
        message: 사용자용 메시지 (User-facing message)
        cause: 원인 예외 (Underlying exception)
    """

    def __init__(self, status_code: int, message: str, cause: BaseException | None = None) -> None:
        detail = message if cause is None else f"{message}: {_cause_summary(cause)}"
        super().__init__(status_code=status_code, detail=detail)
        self.cause: BaseException | None = cause


class ProfileSyncFailedError(SubmissionStepError):
    """프로필 upsert 실패 + 기존 프로필 없음 — 이슈 FK를 만족할 수 없음."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, "Failed to sync user profile", cause)


class IssueCreateFailedError(SubmissionStepError):
    """이슈 레코드 생성 실패 — 사진 업로드는 시도되지 않습니다."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(422, "Failed to report issue", cause)


class FetchFailedError(SubmissionStepError):
    """이슈 목록 조회 실패 — Issue feed could not be loaded."""

    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, "Failed to load issues", cause)
