"""
GridBazaar - Feature Capability Schemas
"""
from typing import Any
from pydantic import BaseModel


class FeatureStatus(BaseModel):
    name: str
    label: str
    enabled: bool


class FeatureList(BaseModel):
    features: list[FeatureStatus]


class FeatureActionResult(BaseModel):
    """Outcome of invoking a capability."""
    success: bool
    enabled: bool
    message: str
    data: Any = None
