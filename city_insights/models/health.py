"""Health check response models."""

from enum import Enum

from pydantic import BaseModel


class ServiceStatus(str, Enum):
    available = "available"
    not_available = "not_available"


class HealthResponse(BaseModel):
    """Overall status plus the availability of each backing service.

    The service is ``ok`` only when every dependency answers; otherwise it
    is ``degraded`` since lookups still work without the backend or Redis.
    """

    status: str
    dependencies: dict[str, ServiceStatus]

    @classmethod
    def from_checks(cls, **checks: ServiceStatus) -> "HealthResponse":
        healthy = all(status is ServiceStatus.available for status in checks.values())
        return cls(status="ok" if healthy else "degraded", dependencies=checks)
