"""
Scoring engine for school assessment analysis.

This package turns a normalised score table into tiers, district aggregates,
ranked systemic issues and per-school report cards.

Main components:
- tiering: three-tier performance classification
- aggregate: category / sub-category averages, strengths, summary, heat map
- issues: systemic issue identification and ranking
- report_card: per-school report cards and the school list view
- pipeline: one-call district analysis
"""

from .tiering import classify, classify_schools, to_analysis_set, partition_by_tier
from .aggregate import AggregateAnalyzer, metric_set_average, collect_scores
from .issues import (
    IssueIdentifier,
    identify_issues,
    resolve_candidate_issue_ids,
    sort_school_details,
    toggle_issue_selection,
    urgency_fraction,
    issue_severity,
    detail_severity
)
from .report_card import build_report_card, build_school_table
from .pipeline import analyze_district, report_card_for

__all__ = [
    # Tiering
    'classify',
    'classify_schools',
    'to_analysis_set',
    'partition_by_tier',

    # Aggregates
    'AggregateAnalyzer',
    'metric_set_average',
    'collect_scores',

    # Issues
    'IssueIdentifier',
    'identify_issues',
    'resolve_candidate_issue_ids',
    'sort_school_details',
    'toggle_issue_selection',
    'urgency_fraction',
    'issue_severity',
    'detail_severity',

    # Report cards
    'build_report_card',
    'build_school_table',

    # Pipeline
    'analyze_district',
    'report_card_for',
]
