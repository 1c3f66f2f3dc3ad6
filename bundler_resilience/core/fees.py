# /bundler_resilience/core/fees.py
# Chain-aware fee estimation with a gas-station override for Polygon PoS.
import math
from decimal import Decimal
from typing import Any, Optional

from web3 import Web3

from bundler_resilience.adapters.gas_station import GasStationClient
from bundler_resilience.core.config import settings
from bundler_resilience.core.logger import get_logger, GAS_STATION_FALLBACKS
from bundler_resilience.core.models import FeeEstimate

log = get_logger(__name__)


def gwei_ceil_to_wei(amount_gwei: Decimal) -> int:
    """Round up to a whole gwei, then scale. Underpricing gets transactions dropped."""
    return Web3.to_wei(math.ceil(amount_gwei), "gwei")


def fallback_fee_estimate() -> FeeEstimate:
    fee = Web3.to_wei(settings.GAS_STATION_FALLBACK_GWEI, "gwei")
    return FeeEstimate(max_fee_per_gas=fee, max_priority_fee_per_gas=fee)


async def resolve_fees(provider: Any, gas_station: Optional[GasStationClient] = None) -> FeeEstimate:
    """
    Produce a fresh fee estimate for the provider's chain.

    On the gas-station chain the station's "fast" tier is used; if the
    station cannot be reached or returns garbage the fixed fallback fees are
    returned instead. Every other chain gets the provider's native estimate,
    unmodified. If the chain id cannot be read the native estimate is used;
    only errors from that native call reach the caller.
    """
    try:
        chain_id = await provider.chain_id()
    except Exception as e:
        log.warning("CHAIN_ID_UNAVAILABLE_USING_NATIVE_FEES", error=repr(e))
        return await provider.get_fee_data()
    if chain_id != settings.GAS_STATION_CHAIN_ID:
        return await provider.get_fee_data()

    station = gas_station or GasStationClient()
    try:
        max_fee, max_priority_fee = await station.fetch_fast_tier()
        estimate = FeeEstimate(
            max_fee_per_gas=gwei_ceil_to_wei(max_fee),
            max_priority_fee_per_gas=gwei_ceil_to_wei(max_priority_fee),
        )
    except Exception as e:
        GAS_STATION_FALLBACKS.inc()
        log.warning(
            "GAS_STATION_UNAVAILABLE_USING_DEFAULTS",
            chain_id=chain_id,
            fallback_gwei=settings.GAS_STATION_FALLBACK_GWEI,
            error=repr(e),
        )
        return fallback_fee_estimate()

    log.debug("GAS_STATION_FEES", chain_id=chain_id, max_fee_gwei=str(max_fee), max_priority_fee_gwei=str(max_priority_fee))
    return estimate
