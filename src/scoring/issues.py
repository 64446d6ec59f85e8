"""
Systemic issue identification.

Each candidate issue is bound to a set of metrics through the catalog. An issue
is scored by scope (share of schools with at least one low score on its
metrics) and severity (share of low scores among all scores on its metrics),
combined into a 0-100 urgency used for ranking.

Two threshold policies coexist on purpose:
- the issue-level severity bucket uses strict `>` on the urgency fraction
  (0.4 / 0.25 / 0.1);
- the per-school detail severity uses inclusive `>=` on the percentage of the
  issue's metrics that are low for that school (70 / 40).
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from catalog import IssueCatalog, IssueDefinition
from models import (
    DetailSeverity,
    Issue,
    IssueSeverity,
    SchoolForAnalysis,
    SchoolIssueDetail,
    Taxonomy,
    Tier
)
from models.utils import round_half_up

from .aggregate import metric_set_average

logger = logging.getLogger(__name__)

LOW_SCORE = 2
SCOPE_WEIGHT = 0.6
SEVERITY_WEIGHT = 0.4
MAX_SELECTED_ISSUES = 3


def urgency_fraction(scope_score: float, severity_score: float) -> float:
    """Weighted combination of scope and severity, in [0, 1]."""
    return SCOPE_WEIGHT * scope_score + SEVERITY_WEIGHT * severity_score


def issue_severity(fraction: float) -> IssueSeverity:
    """Issue-level bucket. Boundaries are exclusive: exactly 0.4 is HIGH."""
    if fraction > 0.4:
        return IssueSeverity.CRITICAL
    elif fraction > 0.25:
        return IssueSeverity.HIGH
    elif fraction > 0.1:
        return IssueSeverity.MEDIUM
    else:
        return IssueSeverity.LOW


def detail_severity(percentage: float) -> DetailSeverity:
    """Per-school bucket. Boundaries are inclusive: exactly 70 is CRITICAL."""
    if percentage >= 70:
        return DetailSeverity.CRITICAL
    elif percentage >= 40:
        return DetailSeverity.HIGH
    else:
        return DetailSeverity.MEDIUM


def challenge_text(metric_key: str, challenge_map: Mapping[str, str], taxonomy: Optional[Taxonomy] = None) -> str:
    """Human-readable challenge phrase for a metric, with a generated fallback."""
    text = challenge_map.get(metric_key)
    if text:
        return text
    name = taxonomy.metric_name(metric_key) if taxonomy is not None else metric_key
    return f'Low performance on metric: "{name}"'


def build_school_details(
    metric_keys: Sequence[str],
    schools: Iterable[SchoolForAnalysis],
    challenge_map: Mapping[str, str],
    taxonomy: Optional[Taxonomy] = None
) -> List[SchoolIssueDetail]:
    """Drill-down rows for schools with at least one low score on the issue's metrics."""
    if not metric_keys:
        return []

    details = []
    for item in schools:
        affected = [
            key for key in metric_keys
            if item.school.score(key) is not None and item.school.score(key) <= LOW_SCORE
        ]
        if not affected:
            continue

        percentage = len(affected) / len(metric_keys) * 100
        details.append(SchoolIssueDetail(
            school_id=item.id,
            school_name=item.name,
            performance_tier=item.tier,
            severity=detail_severity(percentage),
            affected_metrics=[challenge_text(key, challenge_map, taxonomy) for key in affected]
        ))
    return details


def score_issue(
    definition: IssueDefinition,
    metric_keys: Sequence[str],
    schools: List[SchoolForAnalysis],
    challenge_map: Mapping[str, str],
    taxonomy: Optional[Taxonomy] = None
) -> Optional[Issue]:
    """Score one candidate issue. Returns None when no school is affected."""
    total_low_scores = 0
    total_scores_count = 0
    affected_school_ids = set()

    for item in schools:
        for key in metric_keys:
            score = item.school.score(key)
            if score is None or score <= 0:
                continue
            total_scores_count += 1
            if score <= LOW_SCORE:
                total_low_scores += 1
                affected_school_ids.add(item.id)

    affected_schools_count = len(affected_school_ids)
    if affected_schools_count == 0:
        return None

    scope_score = affected_schools_count / len(schools)
    severity_score = total_low_scores / max(total_scores_count, 1)
    fraction = urgency_fraction(scope_score, severity_score)

    tier_sets = {tier: [s for s in schools if s.tier == tier] for tier in Tier}

    return Issue(
        id=definition.id,
        name=definition.title,
        description=definition.principal_goal,
        affected_schools=affected_schools_count,
        total_schools=len(schools),
        severity=issue_severity(fraction),
        category=definition.category,
        urgency=round_half_up(fraction * 100),
        school_details=build_school_details(metric_keys, schools, challenge_map, taxonomy),
        overall_average=metric_set_average(metric_keys, schools),
        tier1_average=metric_set_average(metric_keys, tier_sets[Tier.EXCELLENT]),
        tier2_average=metric_set_average(metric_keys, tier_sets[Tier.MEDIUM]),
        tier3_average=metric_set_average(metric_keys, tier_sets[Tier.LOW])
    )


def identify_issues(
    schools: List[SchoolForAnalysis],
    candidate_issue_ids: Set[str],
    issue_definitions: Sequence[IssueDefinition],
    metric_map: Mapping[str, Sequence[str]],
    challenge_map: Optional[Mapping[str, str]] = None,
    taxonomy: Optional[Taxonomy] = None
) -> List[Issue]:
    """
    Rank the candidate issues by urgency.

    Args:
        schools: Tiered schools to analyze
        candidate_issue_ids: Ids of the issues to consider
        issue_definitions: Catalog definitions; their order breaks urgency ties
        metric_map: Issue id -> metric keys
        challenge_map: Metric key -> challenge phrase for drill-down rows
        taxonomy: Used for metric display names in generated phrases

    Returns:
        Issues with at least one affected school, highest urgency first
    """
    if not schools:
        return []

    challenge_map = challenge_map or {}
    issues = []
    dropped = 0
    for definition in issue_definitions:
        if definition.id not in candidate_issue_ids:
            continue
        issue = score_issue(definition, list(metric_map.get(definition.id, [])), schools, challenge_map, taxonomy)
        if issue is None:
            dropped += 1
            continue
        issues.append(issue)

    logger.debug(f"Identified {len(issues)} issues ({dropped} candidates with no affected schools)")
    return sorted(issues, key=lambda i: i.urgency, reverse=True)


def resolve_candidate_issue_ids(focus_areas: Iterable[str], focus_area_map: Mapping[str, Sequence[str]]) -> Set[str]:
    """Issue ids reachable from the selected focus areas."""
    ids = set()
    for area in focus_areas:
        ids.update(focus_area_map.get(area, []))
    return ids


def sort_school_details(details: List[SchoolIssueDetail], by: str = "severity") -> List[SchoolIssueDetail]:
    """Order drill-down rows by severity or by number of affected metrics, descending."""
    if by == "severity":
        order = {DetailSeverity.CRITICAL: 3, DetailSeverity.HIGH: 2, DetailSeverity.MEDIUM: 1}
        return sorted(details, key=lambda d: order[d.severity], reverse=True)
    if by == "affected_count":
        return sorted(details, key=lambda d: len(d.affected_metrics), reverse=True)
    raise ValueError(f"Unknown sort key: {by}")


def toggle_issue_selection(selected: List[str], issue_id: str, limit: int = MAX_SELECTED_ISSUES) -> List[str]:
    """Deselect a selected issue, or select it while under the limit."""
    if issue_id in selected:
        return [i for i in selected if i != issue_id]
    if len(selected) < limit:
        return selected + [issue_id]
    return list(selected)


class IssueIdentifier:
    """Runs issue identification against a loaded catalog."""

    def __init__(self, catalog: IssueCatalog, taxonomy: Optional[Taxonomy] = None):
        self.catalog = catalog
        self.taxonomy = taxonomy

    def identify(self, schools: List[SchoolForAnalysis], candidate_issue_ids: Optional[Set[str]] = None) -> List[Issue]:
        """Rank issues; all catalog issues are candidates when none are given."""
        if candidate_issue_ids is None:
            candidate_issue_ids = {issue.id for issue in self.catalog.issues}
        return identify_issues(
            schools,
            candidate_issue_ids,
            self.catalog.issues,
            self.catalog.issue_metrics,
            self.catalog.metric_challenges,
            self.taxonomy
        )

    def identify_for_focus_areas(self, schools: List[SchoolForAnalysis], focus_areas: Iterable[str]) -> List[Issue]:
        candidate_ids = resolve_candidate_issue_ids(focus_areas, self.catalog.focus_areas)
        return self.identify(schools, candidate_ids)

    def issue_counts(self, issues: List[Issue]) -> Dict[str, int]:
        counts = {severity.value: 0 for severity in IssueSeverity}
        for issue in issues:
            counts[issue.severity.value] += 1
        return counts
