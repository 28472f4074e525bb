"""Error response builder for RFC 7807 Problem Details.

Converts DomainError values returned by services into problem responses.

Exports:
    ErrorResponseBuilder: Utility class for building RFC 7807 responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from gymaccess.core.config import settings
from gymaccess.core.enums import ErrorCode
from gymaccess.core.errors import DomainError
from gymaccess.presentation.routers.api.v1.errors.problem_details import ProblemDetails

PROBLEM_JSON = "application/problem+json"

_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VENDOR_SETTINGS_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VENDOR_AUTHENTICATION_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VENDOR_TOKEN_EXPIRED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VENDOR_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.VENDOR_RATE_LIMITED: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.VENDOR_CALL_FAILED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VENDOR_INVALID_RESPONSE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VENDOR_PERSON_NOT_FOUND: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VENDOR_DEVICE_OFFLINE: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.VENDOR_REQUEST_REJECTED: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.WEBHOOK_SIGNATURE_INVALID: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.WEBHOOK_PAYLOAD_INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.STORE_OPERATION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SYNC_LOG_WRITE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_TITLES: dict[ErrorCode, str] = {
    ErrorCode.VENDOR_SETTINGS_NOT_FOUND: "Branch Not Configured",
    ErrorCode.VENDOR_AUTHENTICATION_FAILED: "Vendor Authentication Failed",
    ErrorCode.VENDOR_TOKEN_EXPIRED: "Vendor Authentication Failed",
    ErrorCode.VENDOR_UNAVAILABLE: "Vendor Unavailable",
    ErrorCode.VENDOR_RATE_LIMITED: "Vendor Rate Limit Exceeded",
    ErrorCode.WEBHOOK_SIGNATURE_INVALID: "Invalid Signature",
    ErrorCode.WEBHOOK_PAYLOAD_INVALID: "Invalid Payload",
}


class ErrorResponseBuilder:
    """Build RFC 7807 Problem Details error responses.

    Example:
        >>> result = await ingestion.ingest(branch_id, body, headers)
        >>> if isinstance(result, Failure):
        ...     return ErrorResponseBuilder.from_domain_error(result.error, request)
    """

    @staticmethod
    def from_domain_error(error: DomainError, request: Request) -> JSONResponse:
        """Convert a DomainError to an RFC 7807 JSON response.

        Args:
            error: Error returned by a service.
            request: FastAPI Request object (for instance URL).

        Returns:
            JSONResponse with ProblemDetails content.
        """
        return ErrorResponseBuilder.problem(
            status_code=_STATUS.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
            title=_TITLES.get(error.code, "External Service Error"),
            detail=error.message,
            request=request,
            code=error.code.value,
        )

    @staticmethod
    def not_found(detail: str, request: Request) -> JSONResponse:
        return ErrorResponseBuilder.problem(
            status_code=status.HTTP_404_NOT_FOUND,
            title="Resource Not Found",
            detail=detail,
            request=request,
            code="not_found",
        )

    @staticmethod
    def problem(
        *,
        status_code: int,
        title: str,
        detail: str,
        request: Request,
        code: str,
    ) -> JSONResponse:
        problem = ProblemDetails(
            type=f"{settings.api_base_url}/errors/{code}",
            title=title,
            status=status_code,
            detail=detail,
            instance=str(request.url.path),
            code=code,
        )
        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
            media_type=PROBLEM_JSON,
        )
