# /bundler_resilience/adapters/mock.py
# In-process stand-ins for the execution client, gas station, parameter store
# and queue transport. Used by the test-suite and for dry runs without
# network access.

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from bundler_resilience.core.errors import RpcError, RpcErrorCode
from bundler_resilience.core.logger import get_logger
from bundler_resilience.core.models import FeeEstimate

log = get_logger(__name__)


class MockConnection:
    """
    A scripted JSON-RPC connection.

    ``responses`` maps a method name to either a result or an exception
    instance to raise. Unknown methods fail with "method not found", like a
    real node. Every call is recorded in ``calls``.
    """
    def __init__(
        self,
        chain_id: int = 1,
        responses: Optional[Dict[str, Any]] = None,
        fee_data: Optional[FeeEstimate] = None,
    ):
        self._chain_id = chain_id
        self.responses: Dict[str, Any] = dict(responses or {})
        self.fee_data = fee_data or FeeEstimate(gas_price=1_000_000_000)
        self.calls: List[Tuple[str, list]] = []
        self.fee_data_calls = 0

    def calls_to(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)

    async def send(self, method: str, params: list) -> Any:
        self.calls.append((method, params))
        if method not in self.responses:
            raise RpcError(f"the method {method} does not exist/is not available", RpcErrorCode.METHOD_NOT_FOUND)
        response = self.responses[method]
        if isinstance(response, BaseException):
            raise response
        return response

    async def chain_id(self) -> int:
        return self._chain_id

    async def get_fee_data(self) -> FeeEstimate:
        self.fee_data_calls += 1
        return self.fee_data


class MockGasStation:
    """Returns a fixed fast tier, or raises ``error`` when set."""
    def __init__(self, max_fee: str = "30", max_priority_fee: str = "30", error: Optional[Exception] = None):
        self.max_fee = Decimal(max_fee)
        self.max_priority_fee = Decimal(max_priority_fee)
        self.error = error
        self.calls = 0

    async def fetch_fast_tier(self) -> Tuple[Decimal, Decimal]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.max_fee, self.max_priority_fee


class MockParameterStore:
    def __init__(self, values: Optional[Dict[str, str]] = None, error: Optional[Exception] = None):
        self.values = dict(values or {})
        self.error = error
        self.calls = 0

    def set_error(self, error: Optional[Exception]):
        """Make every following lookup raise ``error``; ``None`` restores normal lookups."""
        self.error = error

    async def get(self, name: str) -> str:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.values[name]


class MockTransport:
    """Collects delivered messages instead of sending them anywhere."""
    instances = 0

    def __init__(self, error: Optional[Exception] = None):
        MockTransport.instances += 1
        self.error = error
        self.sent: List[Dict[str, str]] = []
        log.info("MOCK_TRANSPORT_INITIALIZED")

    async def send_message(self, body: str, destination: str) -> dict:
        if self.error is not None:
            log.error("MOCK_TRANSPORT_FORCED_FAILURE", destination=destination)
            raise self.error
        message_id = f"mock-{len(self.sent)}"
        self.sent.append({"body": body, "destination": destination, "message_id": message_id})
        return {"message_id": message_id}
