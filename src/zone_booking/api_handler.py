from __future__ import annotations

from typing import Any

from aws_lambda_powertools import Logger
from mangum import Mangum
from mangum.types import LambdaContext

from zone_booking.api import app

logger = Logger()
handler = Mangum(app, lifespan="off")


def lambda_handler(event: dict[str, Any], context: LambdaContext) -> Any:
    # Fill in the request context fields a bare HTTP API v2.0 event may lack
    if isinstance(event, dict) and event.get("version") == "2.0":
        request_context = event.setdefault("requestContext", {})
        http_ctx = request_context.setdefault("http", {})
        http_ctx.setdefault("sourceIp", "127.0.0.1")
        http_ctx.setdefault("userAgent", "unknown")
        request_context.setdefault("stage", "$default")
        logger.debug("Normalized HTTP API event", extra={"path": event.get("rawPath")})

    return handler(event, context)
