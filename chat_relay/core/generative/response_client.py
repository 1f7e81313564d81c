"""
Generative response client for the Perplexity chat completions API.

Builds the tenant-framed prompt, calls the OpenAI-compatible endpoint with
bounded linear-backoff retries, and converts every failure into the
tenant's fallback reply. generate() never raises.

Dependencies: httpx, tenacity, langchain_core, chat_relay.core.generative
System role: Generative Response Client
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx
from langchain_core.messages import convert_to_openai_messages
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_incrementing,
)

from chat_relay.configs.generative import GenerativeSettings
from chat_relay.core.exceptions import ExternalServiceError
from chat_relay.core.generative.response_fallbacks import (
    fallback_response,
    local_development_response,
)
from chat_relay.core.generative.response_prompt import build_messages
from chat_relay.models.session import Exchange
from chat_relay.models.tenant import TenantConfiguration

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
DEFAULT_MAX_TOKENS = 600
DEFAULT_TEMPERATURE = 0.4


def is_retryable(exc: BaseException) -> bool:
    """Return True for failures another attempt may fix."""
    return isinstance(exc, ExternalServiceError) and exc.retryable


class ResponseClient:
    """
    Completion client with retry and fallback handling.

    Holds no per-request state; one instance is shared by every invocation
    of a worker.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://api.perplexity.ai",
        model: str = "sonar-pro",
        request_timeout: float = 20.0,
        max_attempts: int = 3,
        retry_base_delay: float = 1.0,
        offline_api_key: str = "dummy-key-for-local-dev",
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize response client.

        Args:
            api_key: Perplexity API key
            base_url: API base URL
            model: Completion model identifier
            request_timeout: Per-attempt timeout in seconds
            max_attempts: Total attempts per generate call
            retry_base_delay: Linear backoff base in seconds
            offline_api_key: Key value that enables canned local replies
            http_client: Shared async client; a short-lived one is opened per call if None
            sleep: Awaitable used between attempts
        """
        self._api_key = api_key or ""
        self._completions_url = f"{base_url.rstrip('/')}/chat/completions"
        self._model = model
        self._request_timeout = request_timeout
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay
        self._offline = self._api_key == offline_api_key
        self._http_client = http_client
        self._sleep = sleep

        logger.info(
            "%s:__init__ - API key status",
            __name__,
            extra={
                "present": bool(self._api_key),
                "offline": self._offline,
                "length": len(self._api_key),
            },
        )

    @classmethod
    def from_settings(cls, settings: GenerativeSettings) -> "ResponseClient":
        """Build a client from generative settings."""
        return cls(
            api_key=settings.api_key,
            base_url=settings.base_url,
            model=settings.model,
            request_timeout=settings.request_timeout,
            max_attempts=settings.max_attempts,
            retry_base_delay=settings.retry_base_delay,
            offline_api_key=settings.offline_api_key,
        )

    @property
    def offline(self) -> bool:
        """True when running with the local development key."""
        return self._offline

    async def generate(
        self,
        user_text: str,
        history: Sequence[Exchange],
        config: TenantConfiguration,
    ) -> str:
        """
        Produce a reply for the user message.

        Args:
            user_text: Sanitized user message
            history: Session exchanges, oldest first
            config: Tenant configuration snapshot

        Returns:
            str: Completion text, offline placeholder, or fallback reply
        """
        if self._offline:
            logger.info(
                "%s:generate - Using local development response",
                __name__,
                extra={"company": config.name},
            )
            return local_development_response(user_text, config)

        try:
            payload = self._build_payload(user_text, history, config)
            logger.info(
                "%s:generate - Preparing completion request",
                __name__,
                extra={
                    "company": config.name,
                    "history_length": len(history),
                    "message_count": len(payload["messages"]),
                },
            )
            reply = await self._complete_with_retry(payload, config)
        except ExternalServiceError as e:
            logger.error(
                "%s:generate - Completion failed, using fallback response",
                __name__,
                extra={
                    "company": config.name,
                    "error_class": "retryable" if e.retryable else "non_retryable",
                    "status_code": e.status_code,
                    "error_msg": e.message,
                },
            )
            return fallback_response(config)
        except Exception as e:
            logger.exception(
                "%s:generate - Unexpected %s, using fallback response",
                __name__,
                type(e).__name__,
                extra={"company": config.name, "error_class": "unexpected"},
            )
            return fallback_response(config)

        logger.info(
            "%s:generate - Completion generated",
            __name__,
            extra={"company": config.name, "reply_length": len(reply)},
        )
        return reply

    def _build_payload(
        self,
        user_text: str,
        history: Sequence[Exchange],
        config: TenantConfiguration,
    ) -> dict[str, Any]:
        """Build the chat completions request body."""
        return {
            "model": self._model,
            "messages": convert_to_openai_messages(build_messages(user_text, history, config)),
            "max_tokens": config.max_response_tokens or DEFAULT_MAX_TOKENS,
            "temperature": DEFAULT_TEMPERATURE if config.temperature is None else config.temperature,
            "stream": False,
        }

    async def _complete_with_retry(
        self,
        payload: dict[str, Any],
        config: TenantConfiguration,
    ) -> str:
        """Run completion attempts under the retry policy."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_incrementing(start=self._retry_base_delay, increment=self._retry_base_delay),
            retry=retry_if_exception(is_retryable),
            before_sleep=self._log_retry(config),
            sleep=self._sleep,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._complete(payload)
        raise ExternalServiceError("Retry loop exited without a result")  # pragma: no cover

    def _log_retry(self, config: TenantConfiguration) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "%s:_complete_with_retry - Retry %d/%d",
                __name__,
                retry_state.attempt_number,
                self._max_attempts,
                extra={
                    "company": config.name,
                    "status_code": getattr(exc, "status_code", None),
                    "delay_s": retry_state.next_action.sleep if retry_state.next_action else None,
                },
            )

        return before_sleep

    async def _complete(self, payload: dict[str, Any]) -> str:
        """
        Execute one completion attempt.

        Raises:
            ExternalServiceError: Classified as retryable for 429/5xx,
                timeouts and network errors; non-retryable otherwise
        """
        if not self._api_key:
            raise ExternalServiceError("Perplexity API key is not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self._completions_url, headers=headers, json=payload
                )
            else:
                async with httpx.AsyncClient(timeout=self._request_timeout) as client:
                    response = await client.post(self._completions_url, headers=headers, json=payload)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ExternalServiceError(f"Completion request timeout: {type(e).__name__}", retryable=True) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ExternalServiceError(
                f"Completion request failed with status {status}",
                status_code=status,
                retryable=status in RETRYABLE_STATUS_CODES,
            ) from e
        except httpx.TransportError as e:
            raise ExternalServiceError(f"Completion network error: {type(e).__name__}", retryable=True) from e

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ExternalServiceError("Malformed completion response") from e

        if not content or not content.strip():
            raise ExternalServiceError("Empty completion response")
        return content.strip()
