"""
Core data models for the school insights system.

This package contains:
- The rubric taxonomy and its metric index
- Score table rows and boundary parsing
- Output schemas produced by the scoring engine
"""

from .taxonomy import Metric, SubCategory, Category, MetricPath, Taxonomy
from .school import School, ScoreTable, SupportLevel, parse_score, parse_students, parse_support_level
from .analysis_outputs import (
    Tier,
    IssueSeverity,
    DetailSeverity,
    IssueCategory,
    ScoreBand,
    HeatBand,
    SchoolForAnalysis,
    Summary,
    SubCategoryAverage,
    HeatmapCell,
    HeatmapRow,
    DomainAverage,
    SchoolIssueDetail,
    Issue,
    Challenge,
    ReportCard,
    SchoolTableRow,
    DistrictAnalysis
)
from . import utils

__all__ = [
    # Taxonomy
    "Metric",
    "SubCategory",
    "Category",
    "MetricPath",
    "Taxonomy",

    # Score table
    "School",
    "ScoreTable",
    "SupportLevel",
    "parse_score",
    "parse_students",
    "parse_support_level",

    # Analysis outputs
    "Tier",
    "IssueSeverity",
    "DetailSeverity",
    "IssueCategory",
    "ScoreBand",
    "HeatBand",
    "SchoolForAnalysis",
    "Summary",
    "SubCategoryAverage",
    "HeatmapCell",
    "HeatmapRow",
    "DomainAverage",
    "SchoolIssueDetail",
    "Issue",
    "Challenge",
    "ReportCard",
    "SchoolTableRow",
    "DistrictAnalysis",

    # Utilities
    "utils"
]
