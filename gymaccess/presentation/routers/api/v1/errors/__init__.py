"""RFC 7807 error responses for the v1 API."""

from gymaccess.presentation.routers.api.v1.errors.error_response_builder import (
    ErrorResponseBuilder,
)
from gymaccess.presentation.routers.api.v1.errors.problem_details import ProblemDetails

__all__ = ["ErrorResponseBuilder", "ProblemDetails"]
