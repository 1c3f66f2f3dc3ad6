# /bundler_resilience/core/context.py
# Caller-owned holder for the "resolve once, reuse" state of this layer.
from dataclasses import dataclass, field
from typing import Any, Optional

from bundler_resilience.core.capabilities import CapabilityCache


@dataclass
class QueueEndpoint:
    """Destination of telemetry messages. Stays unresolved until a lookup succeeds."""
    url: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.url is not None


@dataclass
class ResilienceContext:
    """
    Create one per process (or per test) and hand it to the components.

    The metric publisher is the only writer of ``queue`` and ``transport``.
    """
    capabilities: CapabilityCache = field(default_factory=CapabilityCache)
    queue: QueueEndpoint = field(default_factory=QueueEndpoint)
    transport: Optional[Any] = None
