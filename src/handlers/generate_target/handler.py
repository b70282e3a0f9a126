"""
Lambda handler that turns a reference image into an AR tracking target.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.infrastructure.aws.cognito_identity import CognitoIdentityGateway
from core.models.errors import InternalError, UnauthenticatedError, ValidationError
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.request import get_header, parse_multipart_form, read_body, read_json_body
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import GenerateTargetResponse, TargetFromUrlRequest, TargetUploadRequest
from .service import IngestionResult, TargetIngestor

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)

SUCCESS_MESSAGE = "Target successfully uploaded and converted"


def _resolve_owner(event: dict[str, Any]) -> str | None:
    """Return the caller's user id when the request is authenticated.

    Anonymous uploads are allowed; a present but invalid credential is not.
    """
    auth_header = get_header(event, "authorization")
    if not auth_header or not auth_header.strip():
        return None

    return CognitoIdentityGateway().resolve(auth_header).user_id


def _parse_upload(event: dict[str, Any], content_type: str) -> TargetUploadRequest:
    fields = parse_multipart_form(read_body(event), content_type)
    file_field = fields.get("file")
    video_field = fields.get("videoUrl")

    data: dict[str, Any] = {
        "file": file_field.data if file_field else b"",
        "filename": file_field.filename if file_field else None,
        "content_type": file_field.content_type if file_field else None,
        "videoUrl": video_field.text if video_field else None,
    }
    return validate_request(
        TargetUploadRequest,
        {key: value for key, value in data.items() if value is not None},
    )


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle target generation requests.

    Accepted bodies:
    - multipart/form-data with `file` (image) and `videoUrl`
    - application/json with `imageUrl` and `videoUrl`

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response with the public artifact URLs
    """
    request_id = getattr(context, "aws_request_id", None)
    content_type = get_header(event, "content-type") or ""

    logger.info(
        "Received target generation request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "content_type": content_type.split(";")[0],
            "request_id": request_id,
        },
    )

    if event.get("httpMethod") != "POST":
        return ResponseBuilder.method_not_allowed(request_id=request_id)

    try:
        if content_type.lower().startswith("multipart/form-data"):
            upload = _parse_upload(event, content_type)
            from_url = None
        elif content_type.lower().startswith("application/json"):
            from_url = validate_request(TargetFromUrlRequest, read_json_body(event))
            upload = None
        else:
            return ResponseBuilder.bad_request(
                "Expected multipart/form-data or application/json",
                request_id=request_id,
            )

    except PydanticValidationError as exc:
        errors = sanitize_validation_errors(exc.errors())
        logger.warning("Request validation failed", extra={"errors": errors})
        return ResponseBuilder.validation_error(
            message=(
                f"{errors[0]['field']}: {errors[0]['message']}"
                if len(errors) == 1
                else "Invalid request payload"
            ),
            details=errors,
            request_id=request_id,
        )

    except ValueError as exc:
        logger.warning("Malformed request body", extra={"error": str(exc)})
        return ResponseBuilder.bad_request(str(exc), request_id=request_id)

    try:
        owner_id = _resolve_owner(event)
        service = TargetIngestor()

        result: IngestionResult
        if upload is not None:
            result = service.ingest_upload(
                image=upload.file,
                video_url=upload.video_url,
                filename=upload.filename,
                content_type=upload.content_type,
                owner_id=owner_id,
            )
        else:
            result = service.ingest_from_url(
                image_url=from_url.image_url,
                video_url=from_url.video_url,
                owner_id=owner_id,
            )

    except UnauthenticatedError as exc:
        logger.warning("Rejected credential on target upload", extra={"request_id": request_id})
        return ResponseBuilder.unauthorized(exc.message, request_id=request_id)

    except ValidationError as exc:
        logger.warning("Validation error during target generation", extra={"error": exc.message})
        return ResponseBuilder.validation_error(
            message=exc.message,
            details=exc.details,
            request_id=request_id,
        )

    except InternalError as exc:
        logger.exception(
            "Target generation failed",
            extra={"stage": exc.details.get("stage"), "request_id": request_id},
        )
        return ResponseBuilder.internal_error(
            exc.message,
            error=exc.error_code,
            details=exc.details,
            request_id=request_id,
        )

    metrics.add_metric(name="TargetsGenerated", unit=MetricUnit.Count, value=1)

    response = GenerateTargetResponse(
        message=SUCCESS_MESSAGE,
        target_id=result.target_id,
        mind_url=result.mind_url,
        image_url=result.image_url if result.image_uploaded else None,
    )

    return ResponseBuilder.ok(
        response.model_dump(by_alias=True, exclude_none=True),
        request_id=request_id,
    )
