"""
Opportunity Module

Idle industrial sites and distressed companies as acquisition opportunities.
"""
from gridbazaar.core.opportunities.scanner import (
    Opportunity,
    OpportunityScanner,
    map_idle_site,
    map_distressed_company,
)

__all__ = [
    "Opportunity",
    "OpportunityScanner",
    "map_idle_site",
    "map_distressed_company",
]
