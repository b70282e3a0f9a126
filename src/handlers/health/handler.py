"""
Lambda handler for the liveness probe.
"""

from typing import Any

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder

logger = Logger(UTC=True)


@api_gateway_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Report that the service is up. No authentication, no dependencies."""
    logger.debug("Health check", extra={"path": event.get("path")})
    return ResponseBuilder.ok({"ok": True})
