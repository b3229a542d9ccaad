"""
Error envelope schemas, used to document the error responses of each route.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict, Tuple


class FieldError(BaseModel):
    """One failing field of a request."""

    field: Optional[str] = Field(None, examples=["body -> price"])
    message: str = Field(..., examples=["Input should be greater than 0"])
    type: Optional[str] = Field(None, examples=["greater_than"])


class ErrorBody(BaseModel):
    code: str = Field(..., examples=["VALIDATION_ERROR"])
    message: str = Field(..., examples=["Property has no assigned agent"])
    timestamp: str = Field(..., description="UTC time of the failure", examples=["2026-01-01T00:00:00Z"])
    request_id: str = Field(..., description="Matches the X-Request-ID response header", examples=["3f9c2a1b"])
    details: Optional[List[FieldError]] = Field(
        None,
        description="Field errors, or diagnostic text outside production"
    )


class ErrorEnvelope(BaseModel):
    """Body of every non-2xx response."""

    error: ErrorBody


# status -> (description, {example name: (code, message)})
_DOCUMENTED_ERRORS: Dict[int, Tuple[str, Dict[str, Tuple[str, str]]]] = {
    400: ("Validation or business rule failure", {
        "no_agent": ("VALIDATION_ERROR", "Property has no assigned agent"),
        "invalid_status": ("VALIDATION_ERROR", "Invalid status"),
        "duplicate_email": ("DUPLICATE_EMAIL", "Email already registered"),
    }),
    401: ("Missing, invalid or expired token, or bad credentials", {
        "missing_token": ("UNAUTHORIZED", "Authentication token required"),
        "bad_credentials": ("UNAUTHORIZED", "Invalid email or password"),
    }),
    403: ("Caller's role or ownership does not allow the action", {
        "not_owner": ("FORBIDDEN", "You don't own this property"),
    }),
    404: ("Resource not found", {
        "property": ("NOT_FOUND", "Property not found with ID: 123e4567-e89b-12d3-a456-426614174000"),
    }),
    422: ("Request failed schema validation", {
        "schema": ("VALIDATION_ERROR", "Request validation failed"),
    }),
    503: ("Database unreachable", {
        "store": ("STORE_UNAVAILABLE", "Database unavailable"),
    }),
}


def _openapi_entry(description: str, examples: Dict[str, Tuple[str, str]]) -> Dict[str, Any]:
    return {
        "description": description,
        "model": ErrorEnvelope,
        "content": {
            "application/json": {
                "examples": {
                    name: {
                        "summary": message,
                        "value": {
                            "error": {
                                "code": code,
                                "message": message,
                                "timestamp": "2026-01-01T00:00:00Z",
                                "request_id": "3f9c2a1b",
                            }
                        },
                    }
                    for name, (code, message) in examples.items()
                }
            }
        },
    }


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """OpenAPI ``responses`` mapping for the given error statuses."""
    return {
        code: _openapi_entry(*_DOCUMENTED_ERRORS[code])
        for code in status_codes
        if code in _DOCUMENTED_ERRORS
    }
