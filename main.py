# /main.py
# One-shot diagnostic: checks the configured execution client, resolves fees
# for its chain and reports a startup metric, exercising every fallback path.
import asyncio
from datetime import datetime, timezone

from bundler_resilience.core.config import settings
from bundler_resilience.core.logger import configure_logging, get_logger, bind_request_context
from bundler_resilience.core.context import ResilienceContext
from bundler_resilience.core.capabilities import detect_full_feature_support
from bundler_resilience.core.fees import resolve_fees
from bundler_resilience.core.metrics import MetricPublisher
from bundler_resilience.core.models import MetricRecord
from bundler_resilience.adapters.rpc import Web3Connection

async def main():
    configure_logging()
    log = get_logger("BundlerResilience.System")
    context = ResilienceContext()

    connection = Web3Connection.from_url(settings.rpc_url)
    chain_id = await connection.chain_id()
    bind_request_context(chain_id=chain_id)

    full_featured = await detect_full_feature_support(connection, context.capabilities)
    log.info(
        "RPC_CAPABILITIES",
        client_version=context.capabilities.client_version(connection),
        debug_trace_call=full_featured,
    )

    fees = await resolve_fees(connection)
    log.info("FEE_ESTIMATE", **fees.model_dump())

    publisher = MetricPublisher(context)
    await publisher.publish(MetricRecord(
        chain_id=chain_id,
        submit_time=datetime.now(timezone.utc).isoformat(),
    ))
    await publisher.drain()
    log.info("DIAGNOSTIC_COMPLETE")

if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
