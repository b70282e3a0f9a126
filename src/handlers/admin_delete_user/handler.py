"""
Lambda handler for privileged user deletion.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import (
    ForbiddenError,
    InternalError,
    UnauthenticatedError,
    ValidationError,
)
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.request import get_header, read_json_body
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import AdminDeleteUserRequest, AdminDeleteUserResponse
from .service import STATUS_DOMAIN_ONLY, CascadingDeleter

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle admin user deletion requests.

    This function:
    - Authenticates the caller from the bearer credential
    - Validates the `user_id` in the JSON body
    - Delegates authorization and the cascading delete to the service layer
    - Translates domain errors into HTTP responses

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received admin delete user request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": request_id,
        },
    )

    if event.get("httpMethod") != "POST":
        return ResponseBuilder.method_not_allowed(request_id=request_id)

    service = CascadingDeleter()

    try:
        caller = service.authenticate(get_header(event, "authorization"))
    except UnauthenticatedError as exc:
        logger.warning("Unauthenticated delete attempt", extra={"request_id": request_id})
        return ResponseBuilder.unauthorized(exc.message, request_id=request_id)

    try:
        request = validate_request(AdminDeleteUserRequest, read_json_body(event))
    except PydanticValidationError as exc:
        errors = sanitize_validation_errors(exc.errors())
        logger.warning("Request validation failed", extra={"errors": errors})
        return ResponseBuilder.validation_error(
            message="user_id required",
            details=errors,
            request_id=request_id,
        )
    except ValueError as exc:
        logger.warning("Malformed request body", extra={"error": str(exc)})
        return ResponseBuilder.bad_request(str(exc), request_id=request_id)

    try:
        result = service.run(caller=caller, target_user_id=request.user_id)

    except ValidationError as exc:
        return ResponseBuilder.validation_error(
            message=exc.message,
            details=exc.details,
            request_id=request_id,
        )

    except ForbiddenError as exc:
        return ResponseBuilder.forbidden(exc.message, error=exc.error_code, request_id=request_id)

    except InternalError as exc:
        logger.exception(
            "User deletion failed",
            extra={"target_user_id": request.user_id, "request_id": request_id},
        )
        return ResponseBuilder.internal_error(
            exc.message,
            error=exc.error_code,
            details=exc.details,
            request_id=request_id,
        )

    if result.status == STATUS_DOMAIN_ONLY:
        metrics.add_metric(name="UserDeletionsPartial", unit=MetricUnit.Count, value=1)
    else:
        metrics.add_metric(name="UsersDeleted", unit=MetricUnit.Count, value=1)

    response = AdminDeleteUserResponse(
        status=result.status,
        user_id=result.user_id,
        deleted_rows=result.deleted_rows,
        warning=result.warning,
        detail=result.detail,
    )

    return ResponseBuilder.ok(response.model_dump(exclude_none=True), request_id=request_id)
