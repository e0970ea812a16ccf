from typing import Literal
from .common import CamelModel


class HealthCheckResponse(CamelModel):
    status: Literal["healthy", "unhealthy"]
    timestamp: str
    uptime: float
    database: bool
    completion_api_configured: bool
    environment: str
    version: str
