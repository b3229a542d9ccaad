"""
Error rendering for the exception handlers registered in ``main``.

Every handled error is logged with the id of the request that caused it
and returned as ``{"error": {code, message, timestamp, request_id, details?}}``.
"""

from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
from fastapi import Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from estate_api.config import Settings
from estate_api.utils.exceptions import APIException, ValidationError
import logging
import uuid

logger = logging.getLogger(__name__)

# Codes for framework-raised HTTP errors (unknown route, wrong method, ...)
STATUS_ERROR_CODES = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    503: "STORE_UNAVAILABLE",
}


class ErrorHandlerService:

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        body = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "request_id": request_id or ErrorHandlerService._new_request_id(),
        }
        if details:
            body["details"] = details
        return {"error": body}

    @staticmethod
    def handle_api_exception(exception: APIException, request: Optional[Request] = None) -> JSONResponse:
        """Render an application exception with its own status and code."""
        return ErrorHandlerService._respond(
            request,
            status_code=exception.status_code,
            error_code=exception.error_code,
            message=exception.detail,
            details=exception.field_errors if isinstance(exception, ValidationError) else None,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        exception: RequestValidationError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Schema failures become a 422 listing each failing field as ``body -> price``."""
        details = [
            {
                "field": " -> ".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exception.errors()
        ]
        return ErrorHandlerService._respond(
            request,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            details=details
        )

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None,
        settings: Optional[Settings] = None
    ) -> JSONResponse:
        return ErrorHandlerService._respond(
            request,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_SERVER_ERROR",
            message="Database operation failed",
            details=ErrorHandlerService._debug_details(exception, settings),
            exception=exception
        )

    @staticmethod
    def handle_http_exception(exception: HTTPException, request: Optional[Request] = None) -> JSONResponse:
        return ErrorHandlerService._respond(
            request,
            status_code=exception.status_code,
            error_code=STATUS_ERROR_CODES.get(exception.status_code, f"HTTP_{exception.status_code}"),
            message=str(exception.detail),
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None,
        settings: Optional[Settings] = None
    ) -> JSONResponse:
        """Anything unhandled is a 500; the exception text is only exposed outside production."""
        return ErrorHandlerService._respond(
            request,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred. Please try again later.",
            details=ErrorHandlerService._debug_details(exception, settings),
            exception=exception
        )

    @staticmethod
    def get_request_id(request: Optional[Request]) -> str:
        """Request id assigned by the middleware, or a fresh one."""
        request_id = getattr(request.state, "request_id", None) if request else None
        return request_id or ErrorHandlerService._new_request_id()

    @staticmethod
    def _respond(
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
        exception: Optional[Exception] = None
    ) -> JSONResponse:
        request_id = ErrorHandlerService.get_request_id(request)
        path = request.url.path if request else None

        if exception is not None:
            logger.error(
                f"[{request_id}] {request.method if request else ''} {path} failed: "
                f"{type(exception).__name__}: {exception}",
                exc_info=exception
            )
        else:
            logger.warning(f"[{request_id}] {path} -> {status_code} {error_code}: {message}")

        return JSONResponse(
            status_code=status_code,
            content=ErrorHandlerService.format_error_response(error_code, message, details, request_id),
            headers=headers
        )

    @staticmethod
    def _debug_details(exception: Exception, settings: Optional[Settings]) -> Optional[List[Dict[str, Any]]]:
        """Exception type and text, withheld when the app runs in production."""
        if settings is not None and settings.is_production:
            return None
        return [{"type": type(exception).__name__, "message": str(exception)}]

    @staticmethod
    def _new_request_id() -> str:
        return str(uuid.uuid4())[:8]
