"""
Confidence scores for rule-engine results.

Absence of data is graded with fixed scores; a matched CPIC rule gets a score
drawn from [0.90, 0.95) on every evaluation. The draw goes through a pluggable
random source so callers (and tests) can make it deterministic.
"""

import random
from typing import Callable

# Returns a float in [0.0, 1.0), like random.random
RandomSource = Callable[[], float]

# Drug has no gene mapping, or no rule table
STRUCTURAL_ABSENCE_CONFIDENCE = 0.1
# Gene mapped but no variant matched
NO_VARIANT_CONFIDENCE = 0.2
# Phenotype matched but no rule for it
PARTIAL_MATCH_CONFIDENCE = 0.7

HIGH_CONFIDENCE_FLOOR = 0.90
HIGH_CONFIDENCE_SPREAD = 0.05


def draw_high_confidence(random_source: RandomSource = random.random) -> float:
    """Uniform draw from [0.90, 0.95)."""
    return HIGH_CONFIDENCE_FLOOR + random_source() * HIGH_CONFIDENCE_SPREAD
