# /bundler_resilience/core/polling.py
# Condition polling for callers waiting on asynchronous on-chain state.
import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_delay, wait_fixed

from bundler_resilience.core.config import settings
from bundler_resilience.core.errors import WaitTimeoutError
from bundler_resilience.core.logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")
Probe = Callable[[], Union[Optional[T], Awaitable[Optional[T]]]]


async def sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def _probe_name(probe: Any) -> str:
    return getattr(probe, "__qualname__", None) or repr(probe)


async def wait_for(
    probe: Probe,
    timeout: float | None = None,
    interval: float | None = None,
) -> T:
    """
    Poll ``probe`` until it returns something other than ``None``.

    The probe may be a plain function or a coroutine function. It is always
    invoked at least once, even with ``timeout=0``. Exceptions raised by the
    probe propagate unchanged.

    Args:
        probe: zero-argument callable.
        timeout: total seconds to keep polling.
        interval: seconds to sleep between attempts.

    Raises:
        WaitTimeoutError: the timeout elapsed without a value.
    """
    timeout = settings.WAIT_FOR_TIMEOUT_SECONDS if timeout is None else timeout
    interval = settings.WAIT_FOR_INTERVAL_SECONDS if interval is None else interval

    retrying = AsyncRetrying(
        retry=retry_if_result(lambda value: value is None),
        stop=stop_after_delay(timeout),
        wait=wait_fixed(interval),
        sleep=sleep,
    )
    try:
        async for attempt in retrying:
            with attempt:
                result = probe()
                if inspect.isawaitable(result):
                    result = await result
            if not attempt.retry_state.outcome.failed:
                attempt.retry_state.set_result(result)
    except RetryError as e:
        name = _probe_name(probe)
        log.warning("WAIT_FOR_TIMED_OUT", probe=name, timeout=timeout)
        raise WaitTimeoutError(f"Timed out waiting for {name}") from e
    return result
