"""RFC 7807 Problem Details for HTTP APIs.

RFC 7807: https://tools.ietf.org/html/rfc7807

Exports:
    ProblemDetails: RFC 7807 compliant error response schema
"""

from pydantic import BaseModel, Field


class ProblemDetails(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    Attributes:
        type: URI reference identifying the problem type
        title: Short, human-readable summary of the problem type
        status: HTTP status code for this occurrence
        detail: Human-readable explanation specific to this occurrence
        instance: URI reference identifying the specific occurrence
        code: Machine-readable error code (extension member)

    Examples:
        >>> problem = ProblemDetails(
        ...     type="http://localhost:8000/errors/vendor_settings_not_found",
        ...     title="Branch Not Configured",
        ...     status=404,
        ...     detail="Vendor API settings not found or inactive for branch",
        ...     instance="/api/v1/webhooks/vendor/7b0c...",
        ...     code="vendor_settings_not_found",
        ... )
    """

    type: str = Field(..., description="URI identifying the problem type")
    title: str = Field(..., description="Short summary of the problem type")
    status: int = Field(..., ge=400, le=599, description="HTTP status code")
    detail: str = Field(..., description="Explanation of this occurrence")
    instance: str = Field(..., description="Request path of this occurrence")
    code: str | None = Field(None, description="Machine-readable error code")
