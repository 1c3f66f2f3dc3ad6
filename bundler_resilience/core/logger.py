# /bundler_resilience/core/logger.py
import logging
import structlog
from structlog.contextvars import bind_contextvars
import sentry_sdk
from prometheus_client import Counter
from bundler_resilience.core.config import settings

# --- Prometheus Metrics ---
CAPABILITY_PROBES = Counter(
    "bundler_capability_probes_total",
    "JSON-RPC capability probes by method and outcome",
    ["method", "outcome"],
)
GAS_STATION_FALLBACKS = Counter(
    "bundler_gas_station_fallbacks_total",
    "Fee resolutions that fell back to the hardcoded gas-station defaults",
)
METRICS_PUBLISHED = Counter(
    "bundler_metric_messages_published_total",
    "Telemetry messages accepted by the queue transport",
)
METRICS_DROPPED = Counter(
    "bundler_metric_messages_dropped_total",
    "Telemetry messages that were not delivered",
    ["reason"],
)

def configure_logging():
    if settings.SENTRY_DSN:
        sentry_sdk.init(dsn=settings.SENTRY_DSN.get_secret_value(), traces_sample_rate=1.0)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(), # Production-ready JSON logs
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(settings.LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

def get_logger(name: str):
    return structlog.get_logger(name)

def bind_request_context(**values):
    """Attach values (e.g. ``user_op_hash``) to every event logged by the current task."""
    bind_contextvars(**values)

configure_logging()
log = get_logger("BundlerResilience.System")
