"""
Common decorators and helpers for API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger

from core.models.errors import (
    ForbiddenError,
    TargetServiceError,
    UnauthenticatedError,
    ValidationError,
)
from core.utils.config import get_config
from core.utils.constants import CORS_ORIGIN, ERROR_CODE_ORIGIN_NOT_ALLOWED
from core.utils.request import get_header
from core.utils.response import ResponseBuilder

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]

_SERVICE_ERROR_STATUS: tuple[tuple[type[TargetServiceError], HTTPStatus], ...] = (
    (ValidationError, HTTPStatus.BAD_REQUEST),
    (UnauthenticatedError, HTTPStatus.UNAUTHORIZED),
    (ForbiddenError, HTTPStatus.FORBIDDEN),
)


def _get_user_friendly_message(exc: Exception) -> str:
    """
    Return the exception message, or a generic one when it carries none.
    """
    exc_str = str(exc)
    if exc_str:
        return exc_str

    if isinstance(exc, ValueError):
        return "The provided data is invalid. Please check your input and try again."

    if isinstance(exc, PermissionError):
        return "You don't have permission to perform this action."

    return "We encountered an issue processing your request. Please try again."


def _log_error(
    message: str,
    *,
    handler_name: str,
    request_id: str | None,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        handler_name: Name of the handler function
        request_id: AWS request ID
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if level == "exception":
        logger.exception(message, extra=log_extra)
    else:
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


def _service_error_response(
    exc: TargetServiceError,
    *,
    request_id: str | None,
) -> JsonDict:
    for error_type, status in _SERVICE_ERROR_STATUS:
        if isinstance(exc, error_type):
            return ResponseBuilder.error(
                status=status,
                error=exc.error_code,
                message=exc.message,
                details=exc.details,
                request_id=request_id,
            )

    return ResponseBuilder.internal_error(
        exc.message,
        error=exc.error_code,
        details=exc.details,
        request_id=request_id,
    )


def api_gateway_handler(
    func: Callable[..., JsonDict],
) -> Callable[..., JsonDict]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - CORS preflight (OPTIONS) handling and origin allow-listing
    - Centralized exception handling and error responses
    - Request ID tracking and structured logging

    Example:
        @api_gateway_handler
        def lambda_handler(event, context):
            return {"statusCode": 200, "body": "Success"}
    """

    @wraps(func)
    def wrapper(event: Any, context: Any) -> JsonDict:
        request_id = getattr(context, "aws_request_id", None)

        try:
            config = get_config()
        except Exception as exc:
            _log_error(
                "Service configuration is invalid",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                "Service configuration is invalid",
                request_id=request_id,
            )

        origin = get_header(event, "origin")

        if not config.allows_origin(origin):
            logger.warning(
                "Request from disallowed origin",
                extra={"handler": func.__name__, "origin": origin, "request_id": request_id},
            )
            return ResponseBuilder.forbidden(
                "Not allowed by CORS",
                error=ERROR_CODE_ORIGIN_NOT_ALLOWED,
                request_id=request_id,
            )

        cors_origin = CORS_ORIGIN if CORS_ORIGIN in config.allowed_origins else origin

        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.no_content(cors_origin=cors_origin)

        try:
            response = func(event, context)

        except TargetServiceError as exc:
            _log_error(
                "Service error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="warning" if isinstance(exc, ValidationError) else "exception",
            )
            response = _service_error_response(exc, request_id=request_id)

        # Client errors (4xx) - Bad Request
        except (ValueError, UnicodeDecodeError) as exc:
            _log_error(
                "Validation error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            response = ResponseBuilder.bad_request(
                _get_user_friendly_message(exc),
                request_id=request_id,
            )

        # Client errors (4xx) - Forbidden
        except PermissionError as exc:
            _log_error(
                "Permission denied in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
            )
            response = ResponseBuilder.forbidden(
                _get_user_friendly_message(exc),
                request_id=request_id,
            )

        # Catch-all for unexpected errors
        except Exception as exc:
            _log_error(
                "Unexpected error in handler",
                handler_name=func.__name__,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            response = ResponseBuilder.internal_error(
                _get_user_friendly_message(exc),
                request_id=request_id,
            )

        if cors_origin:
            response.setdefault("headers", {})["Access-Control-Allow-Origin"] = cors_origin

        return response

    return wrapper
