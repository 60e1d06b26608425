"""
Feature Capability Registry

Marketplace capabilities that can be switched on per deployment. A
capability without a real implementation is backed by DisabledFeature,
which answers every call with a successful "temporarily disabled" result
and lists nothing. Registering a real adapter under the same name
replaces it without touching the routes.
"""
from typing import Any, Optional

from loguru import logger


class Feature:
    """Capability adapter interface."""
    
    name: str
    label: str
    enabled: bool = True
    
    async def list(self, profile_id: int, **filters: Any) -> list[dict]:
        raise NotImplementedError
    
    async def perform(self, action: str, profile_id: int, payload: Optional[dict] = None) -> dict:
        raise NotImplementedError
    
    def status(self) -> dict:
        return {"name": self.name, "label": self.label, "enabled": self.enabled}


class DisabledFeature(Feature):
    """Placeholder for a capability that is not available."""
    
    enabled = False
    
    def __init__(self, name: str, label: str):
        self.name = name
        self.label = label
    
    @property
    def message(self) -> str:
        return f"{self.label} is temporarily disabled"
    
    async def list(self, profile_id: int, **filters: Any) -> list[dict]:
        return []
    
    async def perform(self, action: str, profile_id: int, payload: Optional[dict] = None) -> dict:
        logger.debug(f"{self.name}.{action} requested by profile {profile_id} while disabled")
        return {"success": True, "enabled": False, "message": self.message}


class UnknownFeatureError(KeyError):
    """No capability registered under the name."""


class FeatureRegistry:
    """Name -> capability adapter."""
    
    def __init__(self):
        self._features: dict[str, Feature] = {}
    
    def register(self, feature: Feature) -> None:
        if feature.name in self._features:
            logger.info(f"Replacing feature adapter '{feature.name}'")
        self._features[feature.name] = feature
    
    def get(self, name: str) -> Feature:
        try:
            return self._features[name]
        except KeyError:
            raise UnknownFeatureError(name) from None
    
    def is_enabled(self, name: str) -> bool:
        feature = self._features.get(name)
        return bool(feature and feature.enabled)
    
    def statuses(self) -> list[dict]:
        return [feature.status() for feature in self._features.values()]
    
    def __contains__(self, name: str) -> bool:
        return name in self._features
    
    def __len__(self) -> int:
        return len(self._features)


DEFAULT_DISABLED_FEATURES = {
    "documents": "Document management",
    "due_diligence": "Due diligence",
    "loi": "Letters of intent",
    "reviews": "Reviews",
    "saved_searches": "Saved searches",
    "verification": "ID verification",
    "sec_filings_analysis": "SEC filings analysis",
    "satellite_analysis": "Satellite analysis",
}


def build_default_registry() -> FeatureRegistry:
    """Registry with every unimplemented capability disabled."""
    registry = FeatureRegistry()
    for name, label in DEFAULT_DISABLED_FEATURES.items():
        registry.register(DisabledFeature(name, label))
    return registry
