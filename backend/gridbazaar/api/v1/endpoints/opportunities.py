"""
GridBazaar - Opportunity Endpoints
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from gridbazaar.dependencies import get_db, get_current_active_user
from gridbazaar.db.models.user import User
from gridbazaar.core.opportunities.scanner import OpportunityScanner
from gridbazaar.schemas.opportunity import OpportunityResponse, ScanRequest, ScanResponse

router = APIRouter()


@router.post("/scan", response_model=ScanResponse)
async def scan_opportunities(
    data: ScanRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Run the requested scanners for a jurisdiction."""
    scanner = OpportunityScanner(db)
    opportunities, counts = await scanner.scan(data.jurisdiction, data.types)
    return ScanResponse(
        jurisdiction=data.jurisdiction,
        total=len(opportunities),
        counts=counts,
        opportunities=[o.to_dict() for o in opportunities],
    )


@router.get("/idle", response_model=list[OpportunityResponse])
async def idle_properties(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    jurisdiction: str = Query(..., min_length=1),
):
    scanner = OpportunityScanner(db)
    return [o.to_dict() for o in await scanner.scan_idle_properties(jurisdiction)]


@router.get("/distressed", response_model=list[OpportunityResponse])
async def distressed_companies(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    jurisdiction: str = Query(..., min_length=1),
):
    scanner = OpportunityScanner(db)
    return [o.to_dict() for o in await scanner.analyze_corporate_distress(jurisdiction)]
