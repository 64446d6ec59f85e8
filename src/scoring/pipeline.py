"""
District analysis pipeline.

Takes a snapshot of the score table, tiers every school and computes the
district-level aggregates in one pass. Each call returns a fresh result;
callers re-run it after every change to the table.
"""

import logging
from typing import Mapping, Optional

from models import DistrictAnalysis, ReportCard, ScoreTable, Taxonomy

from .aggregate import AggregateAnalyzer
from .report_card import build_report_card
from .tiering import partition_by_tier, to_analysis_set

logger = logging.getLogger(__name__)


def analyze_district(table: ScoreTable) -> DistrictAnalysis:
    """Tier the table's schools and compute summary, strengths and heat-map data."""
    taxonomy = table.taxonomy
    analysis_set = to_analysis_set(table.schools, taxonomy)
    analyzer = AggregateAnalyzer(taxonomy)

    groups = partition_by_tier(analysis_set)
    result = DistrictAnalysis(
        schools=analysis_set,
        summary=analyzer.summary(analysis_set),
        classification={int(tier): [s.id for s in members] for tier, members in groups.items()},
        domain_averages=analyzer.domain_averages(analysis_set),
        systemic_strengths=analyzer.systemic_strengths(analysis_set),
        heatmap=analyzer.heatmap(analysis_set)
    )

    logger.info(
        f"Analyzed {result.summary.total_schools} schools: "
        f"{result.summary.excellent_count} excellent, {result.summary.low_performance_count} low"
    )
    return result


def report_card_for(
    analysis: DistrictAnalysis,
    taxonomy: Taxonomy,
    school_id: int,
    challenge_map: Optional[Mapping[str, str]] = None
) -> Optional[ReportCard]:
    """Report card for one school of an analysis, None if the id is unknown."""
    item = analysis.find_school(school_id)
    if item is None:
        return None
    return build_report_card(item, taxonomy, challenge_map)
