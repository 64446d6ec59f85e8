"""
Per-school report cards and the school list view.

Report cards reuse the same scoring primitives as the district analysis and
are built on demand for one school at a time.
"""

import logging
from typing import Dict, List, Mapping, Optional

from models import (
    Challenge,
    ReportCard,
    SchoolForAnalysis,
    SchoolTableRow,
    Taxonomy
)
from models.utils import average

from .issues import challenge_text

logger = logging.getLogger(__name__)

STRENGTH_MIN_SCORE = 3.2
STRENGTHS_LIMIT = 6
CHALLENGE_MAX_SCORE = 3
# Sub-categories averaging at or above this emit no challenges at all.
CHALLENGE_SUBCATEGORY_CEILING = 3.5
UNSPECIFIED_SUPPORT_LEVEL = "unspecified"


def overall_average(item: SchoolForAnalysis, taxonomy: Taxonomy) -> float:
    return average(item.school.scored_values(taxonomy.all_metric_keys))


def build_strengths(item: SchoolForAnalysis, taxonomy: Taxonomy, limit: int = STRENGTHS_LIMIT) -> List[str]:
    """Highest-scoring metrics, rendered as '<sub-category>: <metric>'."""
    candidates = []
    for path in taxonomy.iter_metrics():
        score = item.school.score(path.metric.key)
        if score is not None and score >= STRENGTH_MIN_SCORE:
            candidates.append((score, f"{path.sub_category}: {path.metric.name}"))

    # sorted() is stable, ties stay in taxonomy order
    ranked = sorted(candidates, key=lambda c: c[0], reverse=True)
    return [text for _, text in ranked[:limit]]


def build_challenges(
    item: SchoolForAnalysis,
    taxonomy: Taxonomy,
    challenge_map: Mapping[str, str]
) -> List[Challenge]:
    challenges = []
    for sub in taxonomy.sub_categories:
        scored = [
            (metric, item.school.score(metric.key))
            for metric in sub.metrics
            if item.school.score(metric.key) is not None
        ]
        if not scored:
            continue

        if average(score for _, score in scored) >= CHALLENGE_SUBCATEGORY_CEILING:
            continue

        for metric, score in scored:
            if score <= CHALLENGE_MAX_SCORE:
                challenges.append(Challenge(
                    sub_category=sub.name,
                    text=challenge_text(metric.key, challenge_map, taxonomy)
                ))
    return challenges


def build_report_card(
    item: SchoolForAnalysis,
    taxonomy: Taxonomy,
    challenge_map: Optional[Mapping[str, str]] = None
) -> ReportCard:
    """Assemble the report card for one tiered school."""
    challenge_map = challenge_map or {}
    school = item.school

    domain_averages: Dict[str, float] = {}
    for category in taxonomy.categories:
        domain_averages[category.name] = average(school.scored_values(category.metric_keys))

    return ReportCard(
        school_id=school.id,
        school_name=school.name,
        principal_name=school.principal,
        student_count=school.students or 0,
        support_level=school.support_level.value if school.support_level else UNSPECIFIED_SUPPORT_LEVEL,
        overall_average=overall_average(item, taxonomy),
        performance_tier=item.tier,
        domain_averages=domain_averages,
        strengths=build_strengths(item, taxonomy),
        challenges=build_challenges(item, taxonomy, challenge_map),
        recommendations=[]
    )


def build_school_table(analysis_set: List[SchoolForAnalysis], taxonomy: Taxonomy) -> List[SchoolTableRow]:
    """Rows for the school list view, in table order."""
    return [
        SchoolTableRow(
            id=item.id,
            school_name=item.name,
            principal_name=item.school.principal,
            overall_average=overall_average(item, taxonomy),
            performance_tier=item.tier
        )
        for item in analysis_set
    ]
