"""
Lambda handler for the scheduled expired-session sweep.

Triggered by an EventBridge schedule; takes no input.

Dependencies: chat_relay.dependencies
System role: Lambda entry point for the Expiry Sweeper
"""

import asyncio
import json
import logging
from typing import Any

from chat_relay.configs import get_settings
from chat_relay.core.exceptions import ConfigurationError
from chat_relay.dependencies import get_worker_context
from chat_relay.observability import configure_logging, correlation_scope

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Delete every session whose expiry has passed.

    Args:
        event: Scheduler event (unused)
        context: Lambda context object

    Returns:
        Dict with statusCode and JSON body
    """
    settings = get_settings()
    configure_logging(
        level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name,
    )

    with correlation_scope(getattr(context, "aws_request_id", None)):
        try:
            worker = get_worker_context()
        except ConfigurationError as e:
            logger.error("%s:handler - ConfigurationError: %s", __name__, e)
            return {"statusCode": 500, "body": json.dumps({"error": "Cleanup failed"})}

        result = asyncio.run(worker.sweeper.run())
        if not result.success:
            return {"statusCode": 500, "body": json.dumps({"error": "Cleanup failed"})}

        return {
            "statusCode": 200,
            "body": json.dumps(
                {"message": "Cleanup completed successfully", "deleted": result.deleted}
            ),
        }
