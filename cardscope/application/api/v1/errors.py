"""Centralized error transformation for API routes.

Maps cardscope errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from cardscope.domain.shared.error import (
    CardscopeError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
}


def map_cardscope_error(error: CardscopeError) -> HTTPException:
    """Map a cardscope error to an HTTPException.

    Args:
        error: The cardscope error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        # The card source is unavailable, not the request's fault
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        return HTTPException(status_code=status_code, detail=detail)

    return HTTPException(status_code=500, detail=detail)
