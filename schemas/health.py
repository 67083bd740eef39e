"""
Health Endpoint Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime, timezone


class TierStatus(BaseModel):
    """Availability of one provider tier."""
    status: str  # "configured", "not_configured" or "disabled"
    missing: Optional[list] = None


class HealthResponse(BaseModel):
    """Response schema for GET /system/health"""
    status: str  # "healthy" or "degraded"
    message: str
    real_ai_enabled: bool
    tiers: Dict[str, TierStatus]
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"))
