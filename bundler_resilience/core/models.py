# /bundler_resilience/core/models.py
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class FeeEstimate(BaseModel):
    """
    Gas pricing parameters, all in wei.

    Either ``gas_price`` is set (legacy pricing) or both ``max_fee_per_gas``
    and ``max_priority_fee_per_gas`` are set (EIP-1559 pricing). A provider
    may report both shapes at once.
    """
    model_config = ConfigDict(frozen=True)

    gas_price: Optional[int] = Field(default=None, ge=0)
    max_fee_per_gas: Optional[int] = Field(default=None, ge=0)
    max_priority_fee_per_gas: Optional[int] = Field(default=None, ge=0)
    last_base_fee_per_gas: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_pricing_shape(self) -> "FeeEstimate":
        dynamic = (self.max_fee_per_gas is not None, self.max_priority_fee_per_gas is not None)
        if dynamic[0] != dynamic[1]:
            raise ValueError("maxFeePerGas and maxPriorityFeePerGas must be set together")
        if self.gas_price is None and not all(dynamic):
            raise ValueError("either gasPrice or both EIP-1559 fee fields are required")
        return self

    @property
    def is_dynamic(self) -> bool:
        return self.max_fee_per_gas is not None


class MetricRecord(BaseModel):
    """
    A partial gas telemetry record for one user operation.

    Every field is optional: a single operation is reported in several
    publishes over its lifecycle (submission, simulation, inclusion).
    """
    model_config = ConfigDict(populate_by_name=True)

    chain_id: Optional[int] = Field(default=None, alias="chainId")
    entry_point: Optional[str] = Field(default=None, alias="entryPoint")
    user_op: Optional[Dict[str, Any]] = Field(default=None, alias="userOp")
    user_op_hash: Optional[str] = Field(default=None, alias="userOpHash")
    prefund: Optional[int] = None
    rt_l1_gas_limit: Optional[int] = Field(default=None, alias="rtL1GasLimit")
    rt_l2_gas_limit: Optional[int] = Field(default=None, alias="rtL2GasLimit")
    # expected, calculated and actual preVerificationGas
    rt_pre_verification_gas: Optional[int] = Field(default=None, alias="rtPreVerificationGas")
    rt_pre_verification_gas1: Optional[int] = Field(default=None, alias="rtPreVerificationGas1")
    rt_pre_verification_gas2: Optional[int] = Field(default=None, alias="rtPreVerificationGas2")
    actual_gas: Optional[int] = Field(default=None, alias="actualGas")
    tx_hash: Optional[str] = Field(default=None, alias="txHash")
    submit_time: Optional[str] = Field(default=None, alias="submitTime")
