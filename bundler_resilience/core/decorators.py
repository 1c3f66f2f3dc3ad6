# /bundler_resilience/core/decorators.py
# Retry policy for idempotent reads against the execution client.
import asyncio
import logging

import aiohttp
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential, before_sleep_log

from bundler_resilience.core.logger import get_logger

log = get_logger(__name__)

# Transport-level failures only. A JSON-RPC error response is the node's
# answer and is returned to the caller on the first attempt.
TRANSIENT_NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError)

retriable_network_call = retry(
    retry=retry_if_exception_type(TRANSIENT_NETWORK_ERRORS),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=5),
    before_sleep=before_sleep_log(log, logging.WARNING),
    reraise=True,
)
