# /bundler_resilience/core/config.py
from pydantic_settings import BaseSettings
from pydantic import SecretStr

# Flat settings loader. Every value can be overridden from the environment or
# a local .env file.
class Settings(BaseSettings):
    # Execution client
    RPC_URL: SecretStr | None = None
    RPC_TIMEOUT_SECONDS: float = 10.0

    # Gas station override (Polygon PoS mainnet)
    GAS_STATION_CHAIN_ID: int = 137
    GAS_STATION_URL: str = "https://gasstation-mainnet.matic.network/v2"
    GAS_STATION_TIMEOUT_SECONDS: float = 5.0
    GAS_STATION_FALLBACK_GWEI: int = 40

    # Telemetry queue
    METRIC_QUEUE_PARAMETER: str = "/bundler/metric/stdQueue"
    AWS_REGION: str = "us-west-2"

    # Polling defaults for wait_for()
    WAIT_FOR_TIMEOUT_SECONDS: float = 10.0
    WAIT_FOR_INTERVAL_SECONDS: float = 0.5

    # Operational Settings
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: SecretStr | None = None

    @property
    def rpc_url(self) -> str | None:
        """Plain-text RPC endpoint, or ``None`` when not configured."""
        return self.RPC_URL.get_secret_value() if self.RPC_URL else None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

try:
    settings = Settings()
except Exception as e:
    # Late import to avoid circular dependency only for logging the failure
    try:
        from bundler_resilience.core.logger import get_logger
        log = get_logger("BundlerResilience.Config")
        log.critical("FAILED_TO_LOAD_SETTINGS", error=str(e))
    except Exception:
        print("FAILED_TO_LOAD_SETTINGS", e)
    # In a container, a hard exit is often appropriate if config fails.
    raise SystemExit(1)
