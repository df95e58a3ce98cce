"""Taxonomy lookups used while authoring a job: occupations, industries, locations."""

from .base import TaxonomyCandidate, TaxonomySource
from .esco import EscoOccupationSource
from .locations import LocationSource
from .vsic import VsicIndustrySource

__all__ = [
    "EscoOccupationSource",
    "LocationSource",
    "TaxonomyCandidate",
    "TaxonomySource",
    "VsicIndustrySource",
]
