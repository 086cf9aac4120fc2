"""
Runs a single orchestration step
"""
from logging import Logger
from typing import Awaitable, Callable, TypeVar

from kiosk.api.errors import NetworkFailure
from kiosk.core.cancellation import CancellationToken

T = TypeVar("T")


async def run_step(
    name: str,
    action: Callable[[], Awaitable[T]],
    cancellation: CancellationToken,
    logger: Logger,
    network_retries: int = 0,
) -> T:
    """
    Runs the step unless cancelled. If the step fails with a NetworkFailure, then the whole step is re-run up to
    `network_retries` times. Any other failure is raised immediately.

    Steps must be safe to re-run from the beginning, i.e., session state written by a request that succeeded must
    prevent the request from being sent again.

    :exception OperationCancelled: if cancelled before or while the step is running
    """
    attempts = network_retries + 1
    for attempt in range(1, attempts + 1):
        cancellation.raise_if_cancelled()
        logger.debug("step: %s (attempt %s of %s)", name, attempt, attempts)
        try:
            return await cancellation.run(action())
        except NetworkFailure as err:
            if attempt == attempts:
                raise
            logger.warning("step failed: %s - retrying: %s", name, err)

    raise AssertionError("unreachable")
