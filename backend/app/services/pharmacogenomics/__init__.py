"""
Pharmacogenomics Service

Lookup-table driven decision engine for drug risk assessment.
Maps detected variants to a metabolizer phenotype and a clinical recommendation.
"""

from .models import (
    LookupTables,
    PhenotypeRule,
    Recommendation,
)
from .tables import load_lookup_tables
from .signature import generate_signature
from .confidence import RandomSource, draw_high_confidence
from .risk_engine import RiskEngine, create_risk_engine

__all__ = [
    # Models
    'LookupTables',
    'PhenotypeRule',
    'Recommendation',

    # Loader
    'load_lookup_tables',

    # Signature
    'generate_signature',

    # Confidence
    'RandomSource',
    'draw_high_confidence',

    # Risk Engine
    'RiskEngine',
    'create_risk_engine',
]
