"""
Unit Tests - Opportunity Scanner
Mapping of idle sites and distressed companies, and failure handling.
"""
from datetime import datetime
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock

from gridbazaar.core.opportunities.scanner import (
    OpportunityScanner,
    map_idle_site,
    map_distressed_company,
    parse_coordinates,
    parse_satellite_analysis,
    NO_SATELLITE_ANALYSIS,
)


@pytest.fixture
def idle_site():
    return SimpleNamespace(
        id=42,
        name="Old Smelter",
        address="1 Furnace Rd",
        city="Odessa",
        state="TX",
        zip_code="79761",
        coordinates={"lat": 31.84, "lng": -102.36},
        facility_type="Aluminum smelter",
        industry_type="Primary metals",
        business_status="closed",
        confidence_level=0.82,
        power_potential="high",
        validation_status="verified",
        estimated_free_mw=120.5,
        idle_score=87,
        site_metadata={
            "satellite_analysis": {"summary": "No vehicles in lot", "activity_level": "low"},
            "substation_distance_km": 1.2,
            "lot_size_acres": 40,
            "naics_code": "331313",
        },
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 2, 1),
        deleted_at=None,
    )


@pytest.fixture
def distressed_company():
    return SimpleNamespace(
        id=7,
        name="Grid Metals Inc",
        ticker="GMI",
        industry="Steel",
        sector="Materials",
        market_cap=1_500_000_000,
        financial_data={
            "financial_health_score": 30,
            "power_usage_estimate": 85,
            "distress_signals": ["going concern", "covenant breach"],
            "current_ratio": 0.6,
        },
        created_at=datetime(2024, 1, 1),
        updated_at=datetime(2024, 3, 1),
    )


class TestMapIdleSite:
    
    def test_maps_core_fields(self, idle_site):
        opportunity = map_idle_site(idle_site, "Texas")
        
        assert opportunity.id == "42"
        assert opportunity.type == "idle"
        assert opportunity.name == "Old Smelter"
        assert opportunity.location == "Odessa, Texas"
        assert opportunity.coordinates == {"lat": 31.84, "lng": -102.36}
        assert opportunity.estimated_power_mw == 120.5
        assert opportunity.distress_score == 87
        assert opportunity.sources == ["Satellite Imagery", "Industrial Database"]
        assert opportunity.status == "monitoring"
        assert opportunity.last_updated == "2024-02-01T00:00:00"
    
    def test_copies_details(self, idle_site):
        details = map_idle_site(idle_site, "Texas").opportunity_details
        
        assert details["facility_type"] == "Aluminum smelter"
        assert details["validation_status"] == "verified"
        assert details["substation_distance"] == 1.2
        assert details["lot_size"] == 40
        assert details["naics_code"] == "331313"
        assert details["zoning"] is None
    
    def test_defaults_for_sparse_row(self):
        row = {"id": 1, "created_at": datetime(2024, 5, 1)}
        
        opportunity = map_idle_site(row, "Ohio")
        
        assert opportunity.name == "Unknown Facility"
        assert opportunity.location == ", Ohio"
        assert opportunity.estimated_power_mw == 0
        assert opportunity.distress_score == 0
        assert opportunity.coordinates is None
        assert opportunity.ai_insights == NO_SATELLITE_ANALYSIS
        assert opportunity.last_updated == "2024-05-01T00:00:00"
    
    def test_satellite_narrative(self, idle_site):
        insights = map_idle_site(idle_site, "Texas").ai_insights
        
        assert insights == "No vehicles in lot. Activity level: low."


class TestMapDistressedCompany:
    
    def test_maps_core_fields(self, distressed_company):
        opportunity = map_distressed_company(distressed_company, "Ohio")
        
        assert opportunity.id == "7"
        assert opportunity.type == "distressed"
        assert opportunity.location == "Ohio"
        assert opportunity.coordinates is None
        assert opportunity.estimated_power_mw == 85
        assert opportunity.status == "active"
        assert opportunity.sources == ["SEC Filings", "Financial Data", "News Intelligence"]
        assert opportunity.ai_insights == (
            "Financial distress signals detected: going concern, covenant breach"
        )
    
    def test_distress_score_is_inverse_of_health(self, distressed_company):
        assert map_distressed_company(distressed_company, "Ohio").distress_score == 70
    
    def test_missing_health_is_fully_distressed(self):
        row = {"id": 1, "name": "Acme", "financial_data": {}}
        
        opportunity = map_distressed_company(row, "Ohio")
        
        assert opportunity.distress_score == 100
        assert opportunity.estimated_power_mw == 0
        assert opportunity.ai_insights == "Financial distress signals detected: "
    
    def test_non_numeric_market_cap(self, distressed_company):
        distressed_company.market_cap = "n/a"
        
        opportunity = map_distressed_company(distressed_company, "Texas")
        
        assert opportunity.opportunity_details["market_cap"] is None
    
    def test_copies_details(self, distressed_company):
        details = map_distressed_company(distressed_company, "Ohio").opportunity_details
        
        assert details["ticker"] == "GMI"
        assert details["market_cap"] == 1_500_000_000
        assert details["financial_health_score"] == 30
        assert details["current_ratio"] == 0.6
        assert details["debt_to_equity"] is None


class TestParsers:
    
    @pytest.mark.parametrize("raw,expected", [
        ({"lat": 1.5, "lng": 2.5}, {"lat": 1.5, "lng": 2.5}),
        ({"latitude": "1.5", "longitude": "2.5"}, {"lat": 1.5, "lng": 2.5}),
        ("POINT(-97.5 30.25)", {"lat": 30.25, "lng": -97.5}),
        ('{"lat": 3, "lng": 4}', {"lat": 3.0, "lng": 4.0}),
        ([-97.5, 30.25], {"lat": 30.25, "lng": -97.5}),
        (None, None),
        ("somewhere", None),
        ({"lat": 1}, None),
    ])
    def test_parse_coordinates(self, raw, expected):
        assert parse_coordinates(raw) == expected
    
    def test_parse_satellite_analysis_text(self):
        assert parse_satellite_analysis("Roof collapsed") == "Roof collapsed"
    
    def test_parse_satellite_analysis_empty(self):
        assert parse_satellite_analysis(None) == NO_SATELLITE_ANALYSIS
        assert parse_satellite_analysis({}) == NO_SATELLITE_ANALYSIS
    
    def test_parse_satellite_analysis_indicators(self):
        text = parse_satellite_analysis({"idle_probability": 0.9, "visual_indicators": ["rust", "weeds"]})
        
        assert text == "Idle probability: 90%. Indicators: rust, weeds."


class TestOpportunityScanner:
    
    @pytest.mark.asyncio
    async def test_scan_idle_properties(self, mock_db_session, scalars, idle_site):
        mock_db_session.execute.return_value = scalars([idle_site])
        
        opportunities = await OpportunityScanner(mock_db_session).scan_idle_properties("Texas")
        
        assert [o.id for o in opportunities] == ["42"]
    
    @pytest.mark.asyncio
    async def test_fetch_failure_returns_empty(self, mock_db_session):
        mock_db_session.execute.side_effect = RuntimeError("connection reset")
        scanner = OpportunityScanner(mock_db_session)
        
        assert await scanner.scan_idle_properties("Texas") == []
        assert await scanner.analyze_corporate_distress("Texas") == []
    
    @pytest.mark.asyncio
    async def test_bad_row_is_skipped(self, mock_db_session, scalars, distressed_company):
        broken = SimpleNamespace(id=1, name="Broken", financial_data="corrupt")
        mock_db_session.execute.return_value = scalars([broken, distressed_company])
        
        opportunities = await OpportunityScanner(mock_db_session).analyze_corporate_distress("Texas")
        
        assert [o.id for o in opportunities] == ["7"]
    
    @pytest.mark.asyncio
    async def test_non_numeric_values_keep_all_sites(self, mock_db_session, scalars, idle_site):
        odd_site = SimpleNamespace(
            **{**vars(idle_site), "id": 43, "idle_score": "unknown"},
        )
        odd_site.site_metadata = {"satellite_analysis": {"idle_probability": "high"}}
        mock_db_session.execute.return_value = scalars([odd_site, idle_site])
        
        opportunities = await OpportunityScanner(mock_db_session).scan_idle_properties("Texas")
        
        assert [o.id for o in opportunities] == ["43", "42"]
        assert opportunities[0].distress_score == 0
        assert opportunities[0].ai_insights == NO_SATELLITE_ANALYSIS
    
    @pytest.mark.asyncio
    async def test_scan_combines_and_orders(self, mock_db_session, scalars, idle_site, distressed_company):
        mock_db_session.execute.side_effect = [
            scalars([idle_site]),
            scalars([distressed_company]),
        ]
        
        opportunities, counts = await OpportunityScanner(mock_db_session).scan("Texas")
        
        assert counts == {"idle": 1, "distressed": 1}
        assert [o.distress_score for o in opportunities] == [87, 70]
    
    @pytest.mark.asyncio
    async def test_scan_only_requested_types(self, mock_db_session, scalars, distressed_company):
        mock_db_session.execute.return_value = scalars([distressed_company])
        
        opportunities, counts = await OpportunityScanner(mock_db_session).scan(
            "Texas", ["distressed", "bogus"]
        )
        
        assert counts == {"distressed": 1}
        assert mock_db_session.execute.await_count == 1
