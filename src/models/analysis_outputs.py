"""
Output schemas produced by the scoring engine.

These are plain, derived structures: recomputed on every analysis run and
never persisted. Presentation and export code consumes them as-is.
"""

from enum import Enum, IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .school import School


class Tier(IntEnum):
    """Performance tier (1 = excellent, 2 = medium, 3 = low)."""
    EXCELLENT = 1
    MEDIUM = 2
    LOW = 3


class IssueSeverity(str, Enum):
    """Issue-level severity bucket."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DetailSeverity(str, Enum):
    """Per-school severity within an issue."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class IssueCategory(str, Enum):
    """Category of a systemic issue definition."""
    PEDAGOGICAL = "pedagogical"
    ORGANIZATIONAL = "organizational"
    COMMUNITY = "community"
    STRATEGIC = "strategic"


class ScoreBand(str, Enum):
    """Display colour band for an average score."""
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


class HeatBand(str, Enum):
    """Heat-map band for a sub-category average."""
    EXCELLENT = "excellent"
    GOOD = "good"
    MEDIUM = "medium"
    HIGH_CHALLENGE = "high_challenge"
    CRITICAL_CHALLENGE = "critical_challenge"


class SchoolForAnalysis(BaseModel):
    """A school paired with its derived tier. The School record itself is untouched."""
    school: School
    tier: Tier

    @property
    def id(self) -> int:
        return self.school.id

    @property
    def name(self) -> str:
        return self.school.name


class Summary(BaseModel):
    """District-level headline counts."""
    total_schools: int = 0
    total_students: int = 0
    low_performance_count: int = 0
    excellent_count: int = 0


class SubCategoryAverage(BaseModel):
    """Average score of one sub-category across a school set."""
    key: str
    name: str
    category: str
    average: float
    score_count: int = 0


class HeatmapCell(BaseModel):
    sub_category: str
    average: float
    band: HeatBand


class HeatmapRow(BaseModel):
    category: str
    cells: List[HeatmapCell] = []


class DomainAverage(BaseModel):
    name: str
    value: float
    band: ScoreBand


class SchoolIssueDetail(BaseModel):
    """Drill-down row: how one school is affected by an issue."""
    school_id: int
    school_name: str
    performance_tier: Tier
    severity: DetailSeverity
    affected_metrics: List[str] = []


class Issue(BaseModel):
    """A ranked systemic issue."""
    id: str
    name: str
    description: str = ""
    affected_schools: int
    total_schools: int
    severity: IssueSeverity
    category: IssueCategory
    urgency: int = Field(..., ge=0, le=100)
    school_details: List[SchoolIssueDetail] = []
    overall_average: float = 0.0
    tier1_average: float = 0.0
    tier2_average: float = 0.0
    tier3_average: float = 0.0


class Challenge(BaseModel):
    sub_category: str
    text: str


class ReportCard(BaseModel):
    """Per-school snapshot built on demand."""
    school_id: int
    school_name: str
    principal_name: str = ""
    student_count: int = 0
    support_level: str = "unspecified"
    overall_average: float = 0.0
    performance_tier: Tier
    domain_averages: Dict[str, float] = {}
    strengths: List[str] = []
    challenges: List[Challenge] = []
    recommendations: List[str] = []


class SchoolTableRow(BaseModel):
    """Row of the school list view."""
    id: int
    school_name: str
    principal_name: str = ""
    overall_average: float = 0.0
    performance_tier: Tier


class DistrictAnalysis(BaseModel):
    """Result of one full analysis run over a score table snapshot."""
    schools: List[SchoolForAnalysis] = []
    summary: Summary = Summary()
    classification: Dict[int, List[int]] = {}  # tier -> school ids
    domain_averages: List[DomainAverage] = []
    systemic_strengths: List[SubCategoryAverage] = []
    heatmap: List[HeatmapRow] = []

    def schools_in_tier(self, tier: Tier) -> List[SchoolForAnalysis]:
        ids = set(self.classification.get(int(tier), []))
        return [s for s in self.schools if s.id in ids]

    def find_school(self, school_id: int) -> Optional[SchoolForAnalysis]:
        return next((s for s in self.schools if s.id == school_id), None)
