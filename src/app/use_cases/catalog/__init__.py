"""Tier catalog use cases"""
from .list_tiers import ListTiers
from .seed_catalog import SeedTierCatalog
from .dtos import (
    StudentTierDTO,
    CommissionTierDTO,
    TierCatalogDTO,
    SeedTierCatalogResponseDTO,
)

__all__ = [
    "ListTiers",
    "SeedTierCatalog",
    "StudentTierDTO",
    "CommissionTierDTO",
    "TierCatalogDTO",
    "SeedTierCatalogResponseDTO",
]
