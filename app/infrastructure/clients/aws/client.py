"""Base AWS client utilities for infrastructure clients.

Provides `get_boto3_client` and `execute_aws_api_call` with the
OperationResult pattern. This module intentionally avoids reading
settings at import time and accepts configuration via parameters.
"""

from typing import Any, Dict, Iterable, List, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.exceptions import BotoCoreError, ClientError  # type: ignore

from infrastructure.logging import get_module_logger
from infrastructure.operations import (
    OperationCancelledError,
    OperationContext,
    OperationResult,
    OperationStatus,
)

logger = get_module_logger()

DEFAULT_THROTTLING_CODES = (
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "ProvisionedThroughputExceededException",
)

# Server-side failures worth another attempt
TRANSIENT_CODES = ("InternalServerError", "ServiceUnavailable")

CONFLICT_CODES = (
    "ResourceInUseException",
    "ResourceAlreadyExistsException",
    "ConditionalCheckFailedException",
)


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'dynamodb')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url, config)

    Returns:
        botocore client instance
    """
    session = boto3.Session(**(session_config or {}))
    return session.client(service_name, **(client_config or {}))


def _calculate_retry_delay(attempt: int, backoff_factor: float = 0.5) -> float:
    return backoff_factor * (2**attempt)


def _collect_pages(
    client: BaseClient,
    method: str,
    keys: Optional[List[str]],
    ctx: OperationContext,
    kwargs: Dict[str, Any],
) -> List[Any]:
    paginator = client.get_paginator(method)
    results: List[Any] = []
    for page in paginator.paginate(**kwargs):
        ctx.check()
        if keys:
            for k in keys:
                if k in page and isinstance(page[k], list):
                    results.extend(page[k])
        else:
            for k, v in page.items():
                if k == "ResponseMetadata":
                    continue
                if isinstance(v, list):
                    results.extend(v)
    return results


def _call_api_once(
    client: BaseClient,
    method: str,
    keys: Optional[List[str]],
    ctx: OperationContext,
    force_paginate: bool,
    kwargs: Dict[str, Any],
) -> Any:
    ctx.check()
    if force_paginate:
        return _collect_pages(client, method, keys, ctx, kwargs)
    return getattr(client, method)(**kwargs)


def _map_client_error(
    e: ClientError,
    service_name: str,
    method: str,
    throttling_codes: Iterable[str],
) -> OperationResult:
    error_code = e.response.get("Error", {}).get("Code")
    error_message = e.response.get("Error", {}).get("Message", str(e))

    if error_code in CONFLICT_CODES:
        logger.info(
            "aws_api_conflict",
            service=service_name,
            method=method,
            code=error_code,
            message=error_message,
        )
        return OperationResult.permanent_error(
            message=error_message, error_code=error_code
        )

    if error_code in throttling_codes or error_code in TRANSIENT_CODES:
        retry_after = None
        try:
            retry_after = int(e.response.get("RetryAfter", 0))
        except (TypeError, ValueError):
            retry_after = None
        return OperationResult.transient_error(
            message=error_message, error_code=error_code, retry_after=retry_after
        )

    if error_code in ("AccessDeniedException", "UnauthorizedOperation"):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED, message=error_message, error_code=error_code
        )

    if error_code == "ResourceNotFoundException":
        return OperationResult.error(
            OperationStatus.NOT_FOUND, message=error_message, error_code=error_code
        )

    return OperationResult.permanent_error(message=error_message, error_code=error_code)


def execute_aws_api_call(
    client: BaseClient,
    method: str,
    ctx: OperationContext,
    service_name: str = "aws",
    keys: Optional[List[str]] = None,
    max_retries: int = 3,
    force_paginate: bool = False,
    backoff_factor: float = 0.5,
    throttling_codes: Iterable[str] = DEFAULT_THROTTLING_CODES,
    **kwargs,
) -> OperationResult:
    """Execute an AWS API call with retries and standardized results.

    Remaining kwargs are passed to the boto3 method. The context is checked
    before every attempt and between result pages, and retry backoff sleeps
    wake up early when it finishes. Nothing is raised: every outcome is an
    ``OperationResult``.

    With ``force_paginate`` the method's paginator is consumed completely and
    ``data`` holds the concatenated list values (restricted to ``keys`` when
    given). A failure on any page fails the whole call.
    """

    last_exc: Optional[Exception] = None

    for attempt in range(max_retries + 1):
        try:
            result = _call_api_once(client, method, keys, ctx, force_paginate, kwargs)
            return OperationResult.success(
                data=result, message=f"{service_name}.{method} succeeded"
            )

        except OperationCancelledError as e:
            logger.warning(
                "aws_api_cancelled",
                service=service_name,
                method=method,
                error_code=e.error_code,
            )
            return OperationResult.cancelled(message=e.message, error_code=e.error_code)

        except ClientError as e:
            last_exc = e
            mapped = _map_client_error(e, service_name, method, throttling_codes)

            # Retry on transient errors if attempts remain
            if (
                mapped.status == OperationStatus.TRANSIENT_ERROR
                and attempt < max_retries
            ):
                delay = _calculate_retry_delay(attempt, backoff_factor)
                logger.warning(
                    "aws_api_retry",
                    service=service_name,
                    method=method,
                    attempt=attempt + 1,
                    error=str(e),
                    delay=delay,
                )
                if not ctx.wait(delay):
                    return OperationResult.cancelled(
                        message=f"{service_name}.{method} cancelled during retry backoff",
                        error_code="DEADLINE_EXCEEDED" if ctx.expired else "CANCELLED",
                    )
                continue

            if mapped.error_code not in CONFLICT_CODES:
                logger.error(
                    "aws_api_error_final",
                    service=service_name,
                    method=method,
                    error=str(e),
                )
            return mapped

        except BotoCoreError as e:
            last_exc = e
            logger.error(
                "aws_api_botocore_error",
                service=service_name,
                method=method,
                error=str(e),
            )
            return OperationResult.permanent_error(
                message=str(e), error_code=type(e).__name__
            )

        except Exception as e:  # pylint: disable=broad-except
            last_exc = e
            logger.error(
                "aws_api_unexpected_error",
                service=service_name,
                method=method,
                error=str(e),
            )
            return OperationResult.permanent_error(message=str(e))

    return OperationResult.permanent_error(
        message=str(last_exc) if last_exc else "unknown_error"
    )
