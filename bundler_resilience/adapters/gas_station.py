# /bundler_resilience/adapters/gas_station.py
# Polygon gas station client. The provider's own fee estimate is unreliable on
# Polygon PoS, so the "fast" tier from the gas station is used instead.
# Reference: https://wiki.polygon.technology/docs/develop/tools/polygon-gas-station/
from decimal import Decimal
from typing import Tuple
import aiohttp

from bundler_resilience.core.config import settings
from bundler_resilience.core.logger import get_logger

log = get_logger(__name__)


class GasStationError(Exception):
    """Raised when the gas station response is unusable."""
    pass


class GasStationClient:
    def __init__(self, url: str | None = None, timeout: float | None = None):
        self.url = url or settings.GAS_STATION_URL
        self.timeout = aiohttp.ClientTimeout(total=timeout or settings.GAS_STATION_TIMEOUT_SECONDS)

    async def fetch_fast_tier(self) -> Tuple[Decimal, Decimal]:
        """Returns ``(max_fee, max_priority_fee)`` of the fast tier, in gwei."""
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(self.url) as resp:
                resp.raise_for_status()
                data = await resp.json(content_type=None)
        return parse_fast_tier(data)


def parse_fast_tier(data) -> Tuple[Decimal, Decimal]:
    try:
        fast = data["fast"]
        max_fee = fast["maxFee"]
        max_priority_fee = fast.get("maxPriorityFee", fast.get("maxPriorityFeePerGas"))
        if max_priority_fee is None:
            raise KeyError("maxPriorityFee")
        return Decimal(str(max_fee)), Decimal(str(max_priority_fee))
    except (KeyError, TypeError, AttributeError, ArithmeticError) as e:
        raise GasStationError(f"Malformed gas station response: {data!r}") from e
