"""
Configuration and secrets management utilities for Lambda.
"""

import json
import logging
import os

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from chat_relay.configs import Settings

logger = logging.getLogger(__name__)

SECRET_ARN_VARIABLE = "PERPLEXITY_SECRET_ARN"
API_KEY_VARIABLE = "PERPLEXITY_API_KEY"


def validate_environment(settings: Settings) -> list[str]:
    """
    Report required settings that are missing.

    Returns:
        list[str]: Missing environment variable names (empty when valid)
    """
    missing = settings.missing_required()
    if missing:
        logger.error(
            "%s:validate_environment - Missing required configuration: %s",
            __name__,
            ", ".join(missing),
        )
    return missing


def configure_secrets() -> None:
    """
    Fetch the Perplexity API key from Secrets Manager into the environment.

    Runs only when PERPLEXITY_SECRET_ARN is set and PERPLEXITY_API_KEY is
    not. The secret is either a plain string or JSON with an `api_key` field.
    Failures are logged; validate_environment reports the missing key.
    """
    secret_arn = os.getenv(SECRET_ARN_VARIABLE)
    if not secret_arn or os.getenv(API_KEY_VARIABLE):
        return

    try:
        client = boto3.session.Session().client("secretsmanager")
        response = client.get_secret_value(SecretId=secret_arn)
    except (BotoCoreError, ClientError) as e:
        logger.error("%s:configure_secrets - Failed to fetch API key secret: %s", __name__, e)
        return

    secret = response.get("SecretString") or ""
    try:
        api_key = json.loads(secret).get("api_key", "")
    except (ValueError, AttributeError):
        api_key = secret

    if api_key:
        os.environ[API_KEY_VARIABLE] = api_key
        logger.info("%s:configure_secrets - Set PERPLEXITY_API_KEY from secret", __name__)
    else:
        logger.warning("%s:configure_secrets - API key secret is empty", __name__)
