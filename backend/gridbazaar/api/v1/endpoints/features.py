"""
GridBazaar - Feature Capability Endpoints
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from gridbazaar.dependencies import get_current_profile, get_feature_registry
from gridbazaar.db.models.profile import Profile
from gridbazaar.core.features import Feature, FeatureRegistry, UnknownFeatureError
from gridbazaar.schemas.features import FeatureList, FeatureActionResult

router = APIRouter()


def _feature(registry: FeatureRegistry, name: str) -> Feature:
    try:
        return registry.get(name)
    except UnknownFeatureError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown feature: {name}"
        )


@router.get("/", response_model=FeatureList)
async def list_features(
    registry: Annotated[FeatureRegistry, Depends(get_feature_registry)],
):
    """Capability flags of this deployment."""
    return FeatureList(features=registry.statuses())


@router.get("/{name}/items")
async def list_feature_items(
    name: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    registry: Annotated[FeatureRegistry, Depends(get_feature_registry)],
) -> list[dict]:
    return await _feature(registry, name).list(profile.id)


@router.post("/{name}/{action}", response_model=FeatureActionResult)
async def perform_feature_action(
    name: str,
    action: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    registry: Annotated[FeatureRegistry, Depends(get_feature_registry)],
    payload: Optional[dict] = Body(None),
):
    return await _feature(registry, name).perform(action, profile.id, payload)
