"""
Opportunity Scanner

Maps two intelligence sources into a single Opportunity shape:
- verified heavy-power sites that look idle ("idle")
- companies whose financial data signals distress ("distressed")

Fetch or mapping failures are logged and yield an empty list; a broken
source never fails the scan.
"""
import json
import re
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from gridbazaar.config import settings
from gridbazaar.db.models.intelligence import HeavyPowerSite, Company


IDLE = "idle"
DISTRESSED = "distressed"
OPPORTUNITY_TYPES = (IDLE, DISTRESSED)

IDLE_SOURCES = ["Satellite Imagery", "Industrial Database"]
DISTRESSED_SOURCES = ["SEC Filings", "Financial Data", "News Intelligence"]

NO_SATELLITE_ANALYSIS = "No satellite analysis available"

# Site metadata key -> opportunity detail key
SITE_METADATA_DETAILS = {
    "satellite_image_url": "satellite_image_url",
    "capacity_utilization": "capacity_utilization",
    "transmission_access": "transmission_access",
    "substation_distance_km": "substation_distance",
    "year_built": "year_built",
    "lot_size_acres": "lot_size",
    "square_footage": "square_footage",
    "listing_price": "listing_price",
    "price_per_sqft": "price_per_sqft",
    "zoning": "zoning",
    "naics_code": "naics_code",
}

COMPANY_FINANCIAL_DETAILS = (
    "financial_health_score",
    "current_ratio",
    "debt_to_equity",
    "revenue_growth",
    "profit_margin",
    "distress_signals",
    "locations",
)

_POINT_RE = re.compile(r"POINT\s*\(\s*(-?[\d.]+)\s+(-?[\d.]+)\s*\)", re.IGNORECASE)


@dataclass
class Opportunity:
    """Idle site or distressed company, identified by its source row."""
    id: str
    type: str
    name: str
    location: str
    estimated_power_mw: float = 0.0
    distress_score: float = 0.0
    ai_insights: str = ""
    sources: list[str] = field(default_factory=list)
    status: str = "monitoring"
    last_updated: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    coordinates: Optional[dict[str, float]] = None
    opportunity_details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def _number(value: Any) -> float:
    """Falsy or non-numeric values count as zero."""
    return _optional_float(value) or 0.0


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric value: {value!r}")
        return None


def _timestamp(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def _field(row: Any, name: str, default: Any = None) -> Any:
    """Read a column from an ORM row or a plain mapping."""
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def parse_coordinates(raw: Any) -> Optional[dict[str, float]]:
    """
    Normalise stored coordinates to ``{"lat": .., "lng": ..}``.
    
    Accepts a mapping with lat/lng (or latitude/longitude), a WKT
    ``POINT(lng lat)`` string, a JSON string of either, or a
    ``[lng, lat]`` pair. Anything else gives None.
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        match = _POINT_RE.search(raw)
        if match:
            return {"lat": float(match.group(2)), "lng": float(match.group(1))}
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if isinstance(raw, Mapping):
        lat = raw.get("lat", raw.get("latitude"))
        lng = raw.get("lng", raw.get("lon", raw.get("longitude")))
        if lat is None or lng is None:
            return None
        try:
            return {"lat": float(lat), "lng": float(lng)}
        except (TypeError, ValueError):
            return None
    if isinstance(raw, (list, tuple)) and len(raw) == 2:
        try:
            return {"lat": float(raw[1]), "lng": float(raw[0])}
        except (TypeError, ValueError):
            return None
    return None


def parse_satellite_analysis(analysis: Any) -> str:
    """Turn stored satellite analysis into a one-paragraph narrative."""
    if not analysis:
        return NO_SATELLITE_ANALYSIS
    if isinstance(analysis, str):
        return analysis
    if not isinstance(analysis, Mapping):
        return NO_SATELLITE_ANALYSIS
    
    parts = []
    summary = analysis.get("summary") or analysis.get("analysis")
    if summary:
        parts.append(str(summary).rstrip("."))
    if analysis.get("activity_level"):
        parts.append(f"Activity level: {analysis['activity_level']}")
    idle_probability = _optional_float(analysis.get("idle_probability"))
    if idle_probability is not None:
        parts.append(f"Idle probability: {idle_probability:.0%}")
    indicators = analysis.get("visual_indicators") or analysis.get("indicators") or []
    if indicators:
        parts.append("Indicators: " + ", ".join(str(i) for i in indicators))
    if not parts:
        return NO_SATELLITE_ANALYSIS
    return ". ".join(parts) + "."


def map_idle_site(row: Any, jurisdiction: str) -> Opportunity:
    """Map a heavy-power site row into an idle opportunity."""
    metadata = _field(row, "site_metadata", None)
    if metadata is None:
        metadata = _field(row, "metadata", None)
    metadata = metadata if isinstance(metadata, Mapping) else {}
    
    details = {
        "facility_type": _field(row, "facility_type"),
        "industry_type": _field(row, "industry_type"),
        "business_status": _field(row, "business_status"),
        "confidence_level": _field(row, "confidence_level"),
        "power_potential": _field(row, "power_potential"),
        "validation_status": _field(row, "validation_status"),
    }
    for source_key, detail_key in SITE_METADATA_DETAILS.items():
        details[detail_key] = metadata.get(source_key)
    
    city = _field(row, "city")
    return Opportunity(
        id=str(_field(row, "id")),
        type=IDLE,
        name=_field(row, "name") or "Unknown Facility",
        location=f"{city or ''}, {jurisdiction}",
        address=_field(row, "address"),
        city=city,
        state=_field(row, "state"),
        zip_code=_field(row, "zip_code"),
        coordinates=parse_coordinates(_field(row, "coordinates")),
        estimated_power_mw=_number(_field(row, "estimated_free_mw")),
        distress_score=_number(_field(row, "idle_score")),
        ai_insights=parse_satellite_analysis(metadata.get("satellite_analysis")),
        sources=list(IDLE_SOURCES),
        status="monitoring",
        last_updated=_timestamp(_field(row, "updated_at") or _field(row, "created_at")),
        opportunity_details=details,
    )


def map_distressed_company(row: Any, jurisdiction: str) -> Opportunity:
    """Map a company row into a distressed opportunity."""
    financial = _field(row, "financial_data") or {}
    signals = financial.get("distress_signals") or []
    market_cap = _field(row, "market_cap")
    
    details = {
        "ticker": _field(row, "ticker"),
        "industry": _field(row, "industry"),
        "sector": _field(row, "sector"),
        "market_cap": _optional_float(market_cap),
    }
    for key in COMPANY_FINANCIAL_DETAILS:
        details[key] = financial.get(key)
    
    return Opportunity(
        id=str(_field(row, "id")),
        type=DISTRESSED,
        name=_field(row, "name"),
        location=jurisdiction,
        coordinates=None,
        estimated_power_mw=_number(financial.get("power_usage_estimate")),
        distress_score=100 - _number(financial.get("financial_health_score")),
        ai_insights="Financial distress signals detected: " + ", ".join(str(s) for s in signals),
        sources=list(DISTRESSED_SOURCES),
        status="active",
        last_updated=_timestamp(_field(row, "updated_at")),
        opportunity_details=details,
    )


def _map_rows(
    rows: Iterable[Any],
    mapper: Callable[[Any, str], Opportunity],
    jurisdiction: str,
) -> list[Opportunity]:
    """Map rows one by one; a row that fails is logged and skipped."""
    opportunities = []
    for row in rows:
        try:
            opportunities.append(mapper(row, jurisdiction))
        except Exception as e:
            logger.warning(f"Skipping {mapper.__name__} row {_field(row, 'id')}: {e}")
    return opportunities


class OpportunityScanner:
    """
    Reads the intelligence tables and maps rows into opportunities.
    
    Usage:
        scanner = OpportunityScanner(db_session)
        opportunities, counts = await scanner.scan("Texas")
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def scan_idle_properties(self, jurisdiction: str) -> list[Opportunity]:
        """Newest non-deleted heavy-power sites as idle opportunities."""
        try:
            result = await self.db.execute(
                select(HeavyPowerSite)
                .where(HeavyPowerSite.deleted_at.is_(None))
                .order_by(HeavyPowerSite.created_at.desc())
                .limit(settings.SCANNER_IDLE_SITE_LIMIT)
            )
            sites = result.scalars().all()
        except Exception as e:
            logger.error(f"Error scanning idle properties for {jurisdiction}: {e}")
            return []
        return _map_rows(sites, map_idle_site, jurisdiction)
    
    async def analyze_corporate_distress(self, jurisdiction: str) -> list[Opportunity]:
        """Newest companies with financial data as distressed opportunities."""
        try:
            result = await self.db.execute(
                select(Company)
                .where(Company.financial_data.is_not(None))
                .order_by(Company.created_at.desc())
                .limit(settings.SCANNER_COMPANY_LIMIT)
            )
            companies = result.scalars().all()
        except Exception as e:
            logger.error(f"Error analyzing corporate distress for {jurisdiction}: {e}")
            return []
        return _map_rows(companies, map_distressed_company, jurisdiction)
    
    async def scan(
        self,
        jurisdiction: str,
        types: Optional[list[str]] = None,
    ) -> tuple[list[Opportunity], dict[str, int]]:
        """
        Run the requested scanners.
        
        Returns:
            (opportunities ordered by distress score desc, count per type)
        """
        requested = [t for t in (types or OPPORTUNITY_TYPES) if t in OPPORTUNITY_TYPES]
        found: dict[str, list[Opportunity]] = {}
        if IDLE in requested:
            found[IDLE] = await self.scan_idle_properties(jurisdiction)
        if DISTRESSED in requested:
            found[DISTRESSED] = await self.analyze_corporate_distress(jurisdiction)
        
        combined = [opportunity for batch in found.values() for opportunity in batch]
        combined.sort(key=lambda o: o.distress_score, reverse=True)
        counts = {kind: len(batch) for kind, batch in found.items()}
        
        logger.info(f"Opportunity scan for {jurisdiction}: {counts}")
        return combined, counts
