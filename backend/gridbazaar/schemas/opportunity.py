"""
GridBazaar - Opportunity Schemas
"""
from typing import Any, Optional
from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    lat: float
    lng: float


class OpportunityResponse(BaseModel):
    """Idle site or distressed company in one shape."""
    id: str
    type: str  # idle, distressed
    name: str
    location: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    estimated_power_mw: float = 0.0
    distress_score: float = 0.0
    ai_insights: str = ""
    sources: list[str] = []
    status: str
    last_updated: Optional[str] = None
    opportunity_details: dict[str, Any] = {}


class ScanRequest(BaseModel):
    """Scan parameters."""
    jurisdiction: str = Field(..., min_length=1, max_length=100)
    types: list[str] = Field(default_factory=lambda: ["idle", "distressed"])


class ScanResponse(BaseModel):
    """Combined scan result ordered by distress score."""
    jurisdiction: str
    total: int
    counts: dict[str, int]
    opportunities: list[OpportunityResponse]
