"""
Per-document batch processor with bounded concurrency, timeouts and optional retries.
"""

import logging
import math
from typing import Any, Callable, Coroutine, Generic, Optional, Sequence, TypeVar

import anyio
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .ConceptLinkerErrors import ModelTransportError

logger = logging.getLogger(__name__)

# Type variables for generic input and output
TInput = TypeVar("TInput")
TOutput = TypeVar("TOutput")


def _first_leaf(group: BaseExceptionGroup) -> BaseException:
    """Return the first non-group exception inside a (possibly nested) exception group."""
    error: BaseException = group
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


class DocumentBatchProcessor(Generic[TInput, TOutput]):
    """
    Runs one async call per item concurrently and joins before returning.

    GUARANTEES:
    - Order preservation: results are returned in the same order as inputs
    - Bounded concurrency: at most max_concurrent items are in flight
    - Per-call timeout and run deadline: expiry surfaces as ModelTransportError
    - Retries only transport failures, with exponential backoff (single attempt by default)
    - Fail fast: without a fallback, the first failure cancels siblings and propagates
    """

    # Default configuration constants
    DEFAULT_MAX_CONCURRENT = 5
    DEFAULT_MAX_ATTEMPTS = 1
    DEFAULT_RETRY_MIN_WAIT = 1000  # milliseconds
    DEFAULT_RETRY_MAX_WAIT = 10000  # milliseconds

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        retry_min_wait: int = DEFAULT_RETRY_MIN_WAIT,
        retry_max_wait: int = DEFAULT_RETRY_MAX_WAIT,
        call_timeout: Optional[float] = None,
        retry_exceptions: Optional[tuple[type[Exception], ...]] = None,
    ):
        """
        Initialize the batch processor.

        Args:
            max_concurrent: Number of items processed at the same time
            max_attempts: Attempts per item, including the first one
            retry_min_wait: Minimum wait time between retries (milliseconds)
            retry_max_wait: Maximum wait time between retries (milliseconds)
            call_timeout: Timeout per attempt in seconds (None for no timeout)
            retry_exceptions: Exception types that trigger a retry (default: ModelTransportError)
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._max_concurrent = max_concurrent
        self._max_attempts = max_attempts
        self._retry_min_wait = retry_min_wait
        self._retry_max_wait = retry_max_wait
        self._call_timeout = call_timeout
        self._retry_exceptions = retry_exceptions or (ModelTransportError,)

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _attempt_timeout(self, deadline: Optional[float]) -> float:
        """Seconds available for the next attempt, bounded by call timeout and run deadline."""
        timeout = self._call_timeout if self._call_timeout is not None else math.inf
        if deadline is not None:
            timeout = min(timeout, deadline - anyio.current_time())
        return timeout

    async def run_one(
        self,
        item: TInput,
        processor_func: Callable[[TInput], Coroutine[Any, Any, TOutput]],
        deadline: Optional[float] = None,
    ) -> TOutput:
        """
        Run the processor for a single item with timeout and retry policy applied.

        Args:
            item: Item to process
            processor_func: Async function processing one item
            deadline: Absolute anyio clock time after which no attempt may run

        Returns:
            The processor result

        Raises:
            ModelTransportError: When every attempt failed or timed out
        """

        @retry(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(min=self._retry_min_wait / 1000, max=self._retry_max_wait / 1000),
            retry=retry_if_exception_type(self._retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async def attempt() -> TOutput:
            timeout = self._attempt_timeout(deadline)
            if timeout <= 0:
                raise ModelTransportError("Run deadline exceeded before the call could start")
            try:
                with anyio.fail_after(timeout):
                    return await processor_func(item)
            except TimeoutError as e:
                raise ModelTransportError(f"Model call timed out after {timeout:.1f}s", cause=e) from e

        return await attempt()

    async def process_batch(
        self,
        items: Sequence[TInput],
        processor_func: Callable[[TInput], Coroutine[Any, Any, TOutput]],
        fallback_func: Optional[Callable[[TInput, Exception], Coroutine[Any, Any, TOutput]]] = None,
        deadline: Optional[float] = None,
    ) -> list[TOutput]:
        """
        Process all items concurrently and join before returning.

        IMPORTANT: Order is preserved - results are returned in the same order
        as input items, regardless of completion order or retries.

        Args:
            items: Sequence of items to process
            processor_func: Async function to process each item
            fallback_func: Async function called with (item, error) once all attempts fail.
                           It may return a substitute result or raise.
            deadline: Absolute anyio clock time bounding every attempt

        Returns:
            List of results in the same order as inputs
        """
        if not items:
            return []

        limiter = anyio.CapacityLimiter(self._max_concurrent)

        # Use a dictionary to maintain order
        results_dict: dict[int, TOutput] = {}

        async def process_with_limiter(idx: int, item: TInput) -> None:
            async with limiter:
                try:
                    results_dict[idx] = await self.run_one(item, processor_func, deadline)
                except Exception as e:
                    if fallback_func is None:
                        raise
                    logger.warning(f"Item {idx} failed after {self._max_attempts} attempt(s): {e}")
                    results_dict[idx] = await fallback_func(item, e)

        try:
            async with anyio.create_task_group() as tg:
                for idx, item in enumerate(items):
                    tg.start_soon(process_with_limiter, idx, item)
        except BaseExceptionGroup as group:
            raise _first_leaf(group)

        return [results_dict[i] for i in range(len(items))]
