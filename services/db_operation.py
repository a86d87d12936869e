"""
Database Operation Guard

Decorator applied to every service method that talks to MongoDB:
- runs the call under a deadline
- retries transient connection failures with exponential backoff
- logs slow and failed operations
- translates raw driver errors into domain exceptions
"""

import asyncio
import time
from functools import wraps

from pymongo.errors import ConnectionFailure, ExecutionTimeout, PyMongoError

from config import settings
from exceptions import DatabaseOperationException, DatabaseTimeoutException, KickaboutException
from logging_config import logger

# Threshold in seconds for what constitutes a "slow" operation
SLOW_QUERY_THRESHOLD = 1.0


def with_retry(
    operation_name: str,
    max_attempts: int | None = None,
    base_delay: float | None = None,
    timeout: float | None = None,
    slow_threshold: float | None = None,
):
    """
    Decorator guarding an async database operation

    Args:
        operation_name: Descriptive name of the operation, used in logs and errors
        max_attempts: Attempts before giving up on transient failures (default DB_RETRY_ATTEMPTS)
        base_delay: First backoff delay in seconds, doubled per retry (default DB_RETRY_BASE_DELAY)
        timeout: Deadline in seconds for a single attempt (default DB_TIMEOUT_SECONDS)
        slow_threshold: Log a warning when an attempt takes longer than this

    Only connection failures are retried. Deadline overruns, application
    exceptions and other driver errors surface immediately, so methods whose
    side effects are not repeatable must keep those side effects idempotent
    (e.g. by generating document ids before the insert).

    Usage:
        @with_retry("get_match_by_id")
        async def get_match_by_id(self, match_id):
            ...
    """
    threshold = slow_threshold or SLOW_QUERY_THRESHOLD

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            attempts = max_attempts or settings.DB_RETRY_ATTEMPTS
            delay = base_delay if base_delay is not None else settings.DB_RETRY_BASE_DELAY
            deadline = timeout or settings.DB_TIMEOUT_SECONDS

            for attempt in range(1, attempts + 1):
                start_time = time.time()
                try:
                    result = await asyncio.wait_for(func(*args, **kwargs), timeout=deadline)
                except KickaboutException:
                    raise
                except (asyncio.TimeoutError, ExecutionTimeout) as e:
                    logger.bind(operation=operation_name, timeout_seconds=deadline, attempt=attempt).error(
                        f"Operation timed out: {operation_name}"
                    )
                    raise DatabaseTimeoutException(
                        operation_name,
                        details={"timeout_seconds": deadline},
                    ) from e
                except ConnectionFailure as e:
                    if attempt >= attempts:
                        logger.bind(operation=operation_name, error=str(e)).error(
                            f"Operation failed after {attempts} attempts: {operation_name}"
                        )
                        raise DatabaseTimeoutException(
                            operation_name,
                            message="Database is unavailable. Please try again.",
                            details={"attempts": attempts, "error": str(e)},
                        ) from e
                    wait = delay * (2 ** (attempt - 1))
                    logger.bind(operation=operation_name, error=str(e)).warning(
                        f"Retrying {operation_name} (attempt {attempt + 1}/{attempts}) in {wait}s"
                    )
                    await asyncio.sleep(wait)
                    continue
                except PyMongoError as e:
                    logger.bind(operation=operation_name, error=str(e)).error(f"Operation failed: {operation_name}")
                    raise DatabaseOperationException(
                        operation_name,
                        message=f"Failed to {operation_name.replace('_', ' ')}",
                        details={"error": str(e)},
                    ) from e

                elapsed = time.time() - start_time
                if elapsed > threshold:
                    logger.bind(
                        operation=operation_name,
                        duration_seconds=round(elapsed, 3),
                        function_name=func.__name__,
                        threshold=threshold,
                    ).warning(f"Slow query detected: {operation_name}")
                else:
                    logger.bind(operation=operation_name, duration_seconds=round(elapsed, 3)).debug(
                        f"Query completed: {operation_name}"
                    )
                return result

        return wrapper

    return decorator
