# /bundler_resilience/adapters/rpc.py
# Thin JSON-RPC connection over web3.py. Exposes the raw send() used for
# capability probes plus the chain id and native fee estimate.
from typing import Any, List

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from bundler_resilience.core.config import settings
from bundler_resilience.core.decorators import retriable_network_call
from bundler_resilience.core.errors import RpcError
from bundler_resilience.core.logger import get_logger
from bundler_resilience.core.models import FeeEstimate

log = get_logger(__name__)

# Default tip used when the latest block carries a base fee.
DEFAULT_PRIORITY_FEE_WEI = Web3.to_wei("1.5", "gwei")


class Web3Connection:
    """
    A handle to one execution-client endpoint.

    ``send`` never retries: capability probes must see the first error as-is.
    Read-only helpers retry through the shared network policy.
    """
    def __init__(self, w3: AsyncWeb3):
        self.w3 = w3
        self._chain_id: int | None = None

    @classmethod
    def from_url(cls, url: str | None = None, timeout: float | None = None) -> "Web3Connection":
        url = url or settings.rpc_url
        if not url:
            raise ValueError("No RPC_URL configured")
        request_timeout = aiohttp.ClientTimeout(total=timeout or settings.RPC_TIMEOUT_SECONDS)
        w3 = AsyncWeb3(AsyncHTTPProvider(url, request_kwargs={"timeout": request_timeout}))
        log.info("WEB3_CONNECTION_CREATED")
        return cls(w3)

    async def send(self, method: str, params: List[Any]) -> Any:
        response = await self.w3.provider.make_request(method, params)
        error = response.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise RpcError(error.get("message", ""), error.get("code"), error.get("data"))
            raise RpcError(str(error))
        return response.get("result")

    async def chain_id(self) -> int:
        # fixed for the lifetime of the connection
        if self._chain_id is None:
            self._chain_id = await self._read_chain_id()
        return self._chain_id

    @retriable_network_call
    async def _read_chain_id(self) -> int:
        return await self.w3.eth.chain_id

    @retriable_network_call
    async def get_fee_data(self) -> FeeEstimate:
        """
        Native fee estimate.

        On EIP-1559 chains the tip is a flat 1.5 gwei and the max fee allows
        the base fee to double before the transaction is priced out.
        """
        latest_block = await self.w3.eth.get_block("latest")
        gas_price = await self.w3.eth.gas_price
        base_fee = latest_block.get("baseFeePerGas")
        if base_fee is None:
            return FeeEstimate(gas_price=gas_price)

        priority_fee = DEFAULT_PRIORITY_FEE_WEI
        return FeeEstimate(
            gas_price=gas_price,
            last_base_fee_per_gas=base_fee,
            max_priority_fee_per_gas=priority_fee,
            max_fee_per_gas=base_fee * 2 + priority_fee,
        )
