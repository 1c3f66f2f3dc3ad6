import pytest

from bundler_resilience.core.capabilities import supports_method
from bundler_resilience.core.errors import RpcError
from bundler_resilience.core.models import FeeEstimate
from bundler_resilience.adapters.rpc import Web3Connection

GWEI = 10**9


class DummyProvider:
    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    async def make_request(self, method, params):
        self.requests.append((method, params))
        return self.responses[method]


class DummyEth:
    def __init__(self, block, gas_price=25 * GWEI, chain_id=1):
        self._block = block
        self._gas_price = gas_price
        self._chain_id = chain_id

    async def get_block(self, _):
        return self._block

    @property
    def gas_price(self):
        async def value():
            return self._gas_price
        return value()

    @property
    def chain_id(self):
        async def value():
            return self._chain_id
        return value()


class DummyW3:
    def __init__(self, provider=None, eth=None):
        self.provider = provider
        self.eth = eth


@pytest.mark.asyncio
async def test_send_returns_result():
    provider = DummyProvider({"web3_clientVersion": {"jsonrpc": "2.0", "id": 1, "result": "Geth/v1.13.5"}})
    conn = Web3Connection(DummyW3(provider=provider))
    assert await conn.send("web3_clientVersion", []) == "Geth/v1.13.5"
    assert provider.requests == [("web3_clientVersion", [])]


@pytest.mark.asyncio
async def test_send_raises_structured_error():
    provider = DummyProvider({"debug_traceCall": {
        "jsonrpc": "2.0", "id": 1,
        "error": {"code": -32602, "message": "missing value for required argument 0", "data": "0x"},
    }})
    conn = Web3Connection(DummyW3(provider=provider))
    with pytest.raises(RpcError) as exc_info:
        await conn.send("debug_traceCall", [])
    assert exc_info.value.code == -32602
    assert exc_info.value.data == "0x"
    assert await supports_method(conn, "debug_traceCall") is True


@pytest.mark.asyncio
async def test_native_fee_data_on_eip1559_chain():
    conn = Web3Connection(DummyW3(eth=DummyEth({"number": 100, "baseFeePerGas": 10 * GWEI})))
    assert await conn.get_fee_data() == FeeEstimate(
        gas_price=25 * GWEI,
        last_base_fee_per_gas=10 * GWEI,
        max_priority_fee_per_gas=1_500_000_000,
        max_fee_per_gas=21_500_000_000,
    )


@pytest.mark.asyncio
async def test_native_fee_data_on_legacy_chain():
    conn = Web3Connection(DummyW3(eth=DummyEth({"number": 100}, gas_price=3 * GWEI, chain_id=56)))
    fees = await conn.get_fee_data()
    assert fees == FeeEstimate(gas_price=3 * GWEI)
    assert await conn.chain_id() == 56


def test_from_url_requires_an_endpoint(monkeypatch):
    from bundler_resilience.core.config import settings
    monkeypatch.setattr(settings, "RPC_URL", None)
    with pytest.raises(ValueError):
        Web3Connection.from_url()


class CountingEth(DummyEth):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.chain_id_reads = 0
        self.block_reads = 0

    @property
    def chain_id(self):
        self.chain_id_reads += 1
        return super().chain_id

    async def get_block(self, tag):
        self.block_reads += 1
        raise RpcError("header not found", -32000)


@pytest.mark.asyncio
async def test_chain_id_is_read_once_per_connection():
    eth = CountingEth({}, chain_id=137)
    conn = Web3Connection(DummyW3(eth=eth))
    assert await conn.chain_id() == 137
    assert await conn.chain_id() == 137
    assert eth.chain_id_reads == 1


@pytest.mark.asyncio
async def test_rpc_error_responses_are_not_retried():
    eth = CountingEth({})
    conn = Web3Connection(DummyW3(eth=eth))
    with pytest.raises(RpcError):
        await conn.get_fee_data()
    assert eth.block_reads == 1
