"""
Tiering engine: classify each school into one of three performance tiers.

Tiers are a derived projection keyed by school id. They are never written back
onto the School record; recompute them whenever the score table changes.
"""

import logging
from typing import Dict, List

from models import School, SchoolForAnalysis, Taxonomy, Tier
from models.utils import average

logger = logging.getLogger(__name__)

MIN_SCORES_FOR_TIERING = 5
LOW_TIER_AVERAGE = 2.2
EXCELLENT_TIER_AVERAGE = 3.2
CRITICAL_SCORE = 1.5
MAX_CRITICAL_FOR_EXCELLENT = 2


def classify(school: School, taxonomy: Taxonomy) -> Tier:
    """Tier for a single school. Sparse data defaults to the middle tier."""
    scores = school.scored_values(taxonomy.all_metric_keys)

    if len(scores) < MIN_SCORES_FOR_TIERING:
        return Tier.MEDIUM

    overall_average = average(scores)
    critical_count = len([s for s in scores if s <= CRITICAL_SCORE])

    if overall_average < LOW_TIER_AVERAGE:
        return Tier.LOW
    if overall_average > EXCELLENT_TIER_AVERAGE and critical_count < MAX_CRITICAL_FOR_EXCELLENT:
        return Tier.EXCELLENT
    return Tier.MEDIUM


def classify_schools(schools: List[School], taxonomy: Taxonomy) -> Dict[int, Tier]:
    """Map school id -> tier."""
    return {school.id: classify(school, taxonomy) for school in schools}


def to_analysis_set(schools: List[School], taxonomy: Taxonomy) -> List[SchoolForAnalysis]:
    """Pair every school with its tier, keeping input order."""
    tiers = classify_schools(schools, taxonomy)
    analysis_set = [SchoolForAnalysis(school=school, tier=tiers[school.id]) for school in schools]

    logger.debug(
        "Tiered %d schools: %s",
        len(analysis_set),
        {int(t): sum(1 for s in analysis_set if s.tier == t) for t in Tier}
    )
    return analysis_set


def partition_by_tier(analysis_set: List[SchoolForAnalysis]) -> Dict[Tier, List[SchoolForAnalysis]]:
    """Group schools by tier, input order kept within each group."""
    groups = {tier: [] for tier in Tier}
    for school in analysis_set:
        groups[school.tier].append(school)
    return groups
