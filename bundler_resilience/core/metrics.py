# /bundler_resilience/core/metrics.py
# Best-effort gas telemetry. Nothing in here may raise into, retry inside, or
# block the bundling flow that reports the metric.
import asyncio
import json
from typing import Any, Callable, Mapping, Optional, Set, Union

from bundler_resilience.core.config import settings
from bundler_resilience.core.context import ResilienceContext
from bundler_resilience.core.logger import get_logger, METRICS_PUBLISHED, METRICS_DROPPED
from bundler_resilience.core.models import MetricRecord
from bundler_resilience.core.utils import deep_hexlify

log = get_logger(__name__)


def serialize_metric(record: MetricRecord) -> str:
    """JSON body with wire (camelCase) keys, unset fields omitted and integers as 0x hex."""
    payload = record.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(deep_hexlify(payload))


def _default_parameter_store():
    from bundler_resilience.adapters.aws import SsmParameterStore
    return SsmParameterStore()


def _default_transport():
    from bundler_resilience.adapters.aws import SqsTransport
    return SqsTransport()


class MetricPublisher:
    """
    Publishes partial MetricRecords to the telemetry queue.

    The queue URL is looked up lazily from the parameter store and cached in
    the context once found; a failed lookup is retried on the next publish.
    The transport client is built once, on first use after resolution.
    publish() only schedules the work; drain() waits for it.
    """

    def __init__(
        self,
        context: ResilienceContext,
        parameter_store: Optional[Any] = None,
        transport_factory: Optional[Callable[[], Any]] = None,
        queue_parameter: Optional[str] = None,
    ):
        self.context = context
        self.parameter_store = parameter_store or _default_parameter_store()
        self.transport_factory = transport_factory or _default_transport
        self.queue_parameter = queue_parameter or settings.METRIC_QUEUE_PARAMETER
        self._pending: Set[asyncio.Task] = set()

    async def publish(self, record: Union[MetricRecord, Mapping[str, Any]]) -> None:
        """Schedule ``record`` for delivery and return without waiting on the queue."""
        task = asyncio.create_task(self._publish(record))
        self._pending.add(task)
        task.add_done_callback(self._on_publish_done)

    async def _publish(self, record: Union[MetricRecord, Mapping[str, Any]]) -> bool:
        queue_url = await self._get_queue_url()
        if queue_url is None:
            METRICS_DROPPED.labels("queue_unresolved").inc()
            log.warning("METRIC_QUEUE_UNRESOLVED_SKIPPING_RECORD", parameter=self.queue_parameter)
            return False

        try:
            if not isinstance(record, MetricRecord):
                record = MetricRecord.model_validate(record)
            body = serialize_metric(record)
        except Exception as e:
            METRICS_DROPPED.labels("serialization").inc()
            log.error("METRIC_SERIALIZATION_FAILED", error=str(e))
            return False

        transport = self._get_transport()
        if transport is None:
            METRICS_DROPPED.labels("transport_unavailable").inc()
            return False

        result = await transport.send_message(body, queue_url)
        log.debug("METRIC_PUBLISHED", result=result)
        return True

    async def drain(self) -> None:
        """Wait for every scheduled publish to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _on_publish_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            METRICS_DROPPED.labels("cancelled").inc()
            return
        e = task.exception()
        if e is not None:
            METRICS_DROPPED.labels("transport_error").inc()
            log.error("METRIC_PUBLISH_FAILED", error=repr(e))
            return
        if task.result():
            METRICS_PUBLISHED.inc()

    async def _get_queue_url(self) -> Optional[str]:
        queue = self.context.queue
        if not queue.resolved:
            try:
                queue.url = await self.parameter_store.get(self.queue_parameter) or None
                if queue.url:
                    log.info("METRIC_QUEUE_RESOLVED", parameter=self.queue_parameter)
            except Exception as e:
                log.error("METRIC_QUEUE_LOOKUP_FAILED", parameter=self.queue_parameter, error=repr(e))
        return queue.url

    def _get_transport(self):
        if self.context.transport is None:
            try:
                self.context.transport = self.transport_factory()
            except Exception as e:
                log.error("METRIC_TRANSPORT_INIT_FAILED", error=repr(e))
        return self.context.transport
