"""
Aggregate analysis across a set of schools.

Computes mapping-level statistics (category and sub-category averages,
systemic strengths, headline counts and heat-map data) over the whole score
table or a filtered subset such as one tier.
"""

import logging
from typing import Iterable, List, Sequence, Union

from models import (
    Category,
    DomainAverage,
    HeatmapCell,
    HeatmapRow,
    School,
    SchoolForAnalysis,
    SubCategory,
    SubCategoryAverage,
    Summary,
    Taxonomy,
    Tier
)
from models.utils import average, score_to_band, score_to_heat_band

logger = logging.getLogger(__name__)

SchoolLike = Union[School, SchoolForAnalysis]

SYSTEMIC_STRENGTHS_LIMIT = 5


def _school(item: SchoolLike) -> School:
    return item.school if isinstance(item, SchoolForAnalysis) else item


def collect_scores(metric_keys: Sequence[str], school_set: Iterable[SchoolLike]) -> List[int]:
    """Flatten every set, positive score of the given metrics across the set."""
    scores = []
    for item in school_set:
        scores.extend(_school(item).scored_values(list(metric_keys)))
    return scores


def metric_set_average(metric_keys: Sequence[str], school_set: Iterable[SchoolLike]) -> float:
    """Mean over all contributing scores; 0.0 means "no data", not a score of zero."""
    return average(collect_scores(metric_keys, school_set))


class AggregateAnalyzer:
    """Analyzes rubric averages across sets of schools."""

    def __init__(self, taxonomy: Taxonomy):
        self.taxonomy = taxonomy

    def category_average(self, category: Category, school_set: Iterable[SchoolLike]) -> float:
        return metric_set_average(category.metric_keys, school_set)

    def sub_category_average(self, sub_category: SubCategory, school_set: Iterable[SchoolLike]) -> float:
        return metric_set_average(sub_category.metric_keys, school_set)

    def sub_category_averages(self, school_set: Iterable[SchoolLike]) -> List[SubCategoryAverage]:
        """Average for every sub-category, in taxonomy order, including empty ones."""
        school_set = list(school_set)
        results = []
        for category in self.taxonomy.categories:
            for sub in category.sub_categories:
                scores = collect_scores(sub.metric_keys, school_set)
                results.append(SubCategoryAverage(
                    key=sub.key,
                    name=sub.name,
                    category=category.name,
                    average=average(scores),
                    score_count=len(scores)
                ))
        return results

    def systemic_strengths(
        self,
        school_set: Iterable[SchoolLike],
        limit: int = SYSTEMIC_STRENGTHS_LIMIT
    ) -> List[SubCategoryAverage]:
        """
        Top sub-categories by average score.

        Sub-categories with no contributing scores are dropped. The sort is
        stable, so ties keep taxonomy declaration order.
        """
        scored = [s for s in self.sub_category_averages(school_set) if s.score_count > 0]
        return sorted(scored, key=lambda s: s.average, reverse=True)[:limit]

    def domain_averages(self, school_set: Iterable[SchoolLike]) -> List[DomainAverage]:
        """Per-category average with its display band, in taxonomy order."""
        school_set = list(school_set)
        results = []
        for category in self.taxonomy.categories:
            value = self.category_average(category, school_set)
            results.append(DomainAverage(name=category.name, value=value, band=score_to_band(value)))
        return results

    def heatmap(self, school_set: Iterable[SchoolLike]) -> List[HeatmapRow]:
        """Sub-category averages grouped by category, each with its heat band."""
        school_set = list(school_set)
        rows = []
        for category in self.taxonomy.categories:
            cells = []
            for sub in category.sub_categories:
                value = self.sub_category_average(sub, school_set)
                cells.append(HeatmapCell(sub_category=sub.name, average=value, band=score_to_heat_band(value)))
            rows.append(HeatmapRow(category=category.name, cells=cells))
        return rows

    @staticmethod
    def summary(analysis_set: Iterable[SchoolForAnalysis]) -> Summary:
        """Headline counts. Unset student counts contribute 0."""
        analysis_set = list(analysis_set)
        return Summary(
            total_schools=len(analysis_set),
            total_students=sum(s.school.students or 0 for s in analysis_set),
            low_performance_count=len([s for s in analysis_set if s.tier == Tier.LOW]),
            excellent_count=len([s for s in analysis_set if s.tier == Tier.EXCELLENT])
        )
