# /bundler_resilience/core/capabilities.py
# Detects which optional JSON-RPC methods an execution client implements.
import asyncio
import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from bundler_resilience.core.errors import RpcErrorCode
from bundler_resilience.core.logger import get_logger, CAPABILITY_PROBES

log = get_logger(__name__)

CLIENT_VERSION_METHOD = "web3_clientVersion"
# Only clients with debug/tracing extensions (geth and friends) implement this.
FULL_FEATURE_PROBE_METHOD = "debug_traceCall"


class ProbeOutcome(Enum):
    METHOD_SUPPORTED = "supported"
    METHOD_UNSUPPORTED = "unsupported"
    INDETERMINATE = "indeterminate"


def classify_error_code(code: Optional[int]) -> ProbeOutcome:
    """
    Map the error code of an empty-params probe call to an outcome.

    "Invalid params" means the endpoint routed the call to a real handler,
    so the method exists.
    """
    if code == RpcErrorCode.INVALID_PARAMS:
        return ProbeOutcome.METHOD_SUPPORTED
    if code in (RpcErrorCode.METHOD_NOT_FOUND, RpcErrorCode.METHOD_NOT_SUPPORTED):
        return ProbeOutcome.METHOD_UNSUPPORTED
    return ProbeOutcome.INDETERMINATE


def error_code_of(exc: BaseException) -> Optional[int]:
    code = getattr(exc, "code", None)
    if isinstance(code, int):
        return code
    # web3.py raises Web3RPCError with the raw response attached
    response = getattr(exc, "rpc_response", None)
    if isinstance(response, dict) and isinstance(response.get("error"), dict):
        code = response["error"].get("code")
        return code if isinstance(code, int) else None
    if exc.args and isinstance(exc.args[0], dict):
        code = exc.args[0].get("code")
        return code if isinstance(code, int) else None
    return None


@dataclass
class ConnectionCapabilities:
    client_version: Optional[str] = None
    version_checked: bool = False
    methods: Dict[str, ProbeOutcome] = field(default_factory=dict)
    inflight: Dict[str, "asyncio.Future[ProbeOutcome]"] = field(default_factory=dict)


class CapabilityCache:
    """Per-connection probe results, dropped when the connection is garbage collected."""

    def __init__(self):
        # keyed by object identity; connections need not be hashable
        self._entries: Dict[int, ConnectionCapabilities] = {}
        self._pinned: Dict[int, Any] = {}

    def entry(self, connection: Any) -> ConnectionCapabilities:
        key = id(connection)
        caps = self._entries.get(key)
        if caps is None:
            caps = ConnectionCapabilities()
            self._entries[key] = caps
            try:
                weakref.finalize(connection, self._entries.pop, key, None)
            except TypeError:
                # not weak-referenceable: keep it alive so its id is never reused
                self._pinned[key] = connection
        return caps

    def client_version(self, connection: Any) -> Optional[str]:
        caps = self._entries.get(id(connection))
        return caps.client_version if caps else None

    def __len__(self) -> int:
        return len(self._entries)


async def probe_method(connection: Any, method: str) -> ProbeOutcome:
    """Call ``method`` with no params and interpret the failure. Never raises."""
    try:
        await connection.send(method, [])
    except Exception as e:
        outcome = classify_error_code(error_code_of(e))
        log.debug("RPC_METHOD_PROBED", method=method, outcome=outcome.value, error=str(e))
    else:
        # An empty-params call that succeeds tells us nothing reliable.
        outcome = ProbeOutcome.INDETERMINATE
        log.debug("RPC_METHOD_PROBED", method=method, outcome=outcome.value)
    CAPABILITY_PROBES.labels(method, outcome.value).inc()
    return outcome


async def supports_method(connection: Any, method: str, cache: Optional[CapabilityCache] = None) -> bool:
    if cache is None:
        return await probe_method(connection, method) is ProbeOutcome.METHOD_SUPPORTED

    caps = cache.entry(connection)
    if method not in caps.methods:
        # concurrent callers share one in-flight probe
        probe = caps.inflight.get(method)
        if probe is None:
            probe = asyncio.ensure_future(probe_method(connection, method))
            caps.inflight[method] = probe
        outcome = await asyncio.shield(probe)
        caps.methods[method] = outcome
        caps.inflight.pop(method, None)
    return caps.methods[method] is ProbeOutcome.METHOD_SUPPORTED


async def detect_full_feature_support(connection: Any, cache: CapabilityCache) -> bool:
    """
    Report whether the endpoint offers debugging/tracing extensions.

    The client version string is looked up once per connection and kept for
    diagnostics only; no version parsing is attempted. Never raises.
    """
    caps = cache.entry(connection)
    if not caps.version_checked:
        caps.version_checked = True
        try:
            caps.client_version = await connection.send(CLIENT_VERSION_METHOD, [])
            log.info("RPC_CLIENT_VERSION", client_version=caps.client_version)
        except Exception as e:
            log.warning("RPC_CLIENT_VERSION_LOOKUP_FAILED", error=str(e))
    return await supports_method(connection, FULL_FEATURE_PROBE_METHOD, cache)
