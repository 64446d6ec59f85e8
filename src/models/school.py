"""
Score table models: one School row per assessed school.

Raw input is normalised here, at the table boundary. Scoring code downstream
only ever sees scores in {1, 2, 3, 4} or None.
"""

import logging
import math
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, Field, field_validator

from .taxonomy import Taxonomy

logger = logging.getLogger(__name__)

MIN_SCORE = 1
MAX_SCORE = 4


class SupportLevel(str, Enum):
    """Level of support the school receives from the district."""
    FULL = "full"
    PARTIAL = "partial"
    LIMITED = "limited"
    NEW_PRINCIPALS = "new_principals"


def parse_score(raw: Any) -> Optional[int]:
    """
    Map raw cell input to a valid rubric score or None.

    Accepts ints, integral floats and numeric strings within 1-4. Everything
    else (empty cells, text, fractions, booleans, out-of-range values) is
    treated as "not assessed".
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
    elif isinstance(raw, (int, float)):
        value = float(raw)
    else:
        return None

    if not math.isfinite(value) or not value.is_integer():
        return None

    score = int(value)
    if score < MIN_SCORE or score > MAX_SCORE:
        return None
    return score


def parse_students(raw: Any) -> Optional[int]:
    """Map raw input to a non-negative student count or None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip().replace(",", "")
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return int(value)


def parse_support_level(raw: Any) -> Optional[SupportLevel]:
    """Map raw input to a SupportLevel; unknown values become None."""
    if raw is None:
        return None
    if isinstance(raw, SupportLevel):
        return raw
    text = str(raw).strip().lower().replace(" ", "_").replace("-", "_")
    if not text:
        return None
    try:
        return SupportLevel(text)
    except ValueError:
        logger.warning(f"Unknown support level '{raw}', leaving unset")
        return None


class School(BaseModel):
    """A row of the score table."""
    id: int = Field(..., gt=0)
    name: str = ""
    principal: str = ""
    students: Optional[int] = None
    support_level: Optional[SupportLevel] = None
    notes: str = ""
    scores: Dict[str, Optional[int]] = {}

    @field_validator('students', mode='before')
    @classmethod
    def validate_students(cls, v):
        return parse_students(v)

    @field_validator('support_level', mode='before')
    @classmethod
    def validate_support_level(cls, v):
        return parse_support_level(v)

    @field_validator('scores', mode='before')
    @classmethod
    def validate_scores(cls, v):
        if not v:
            return {}
        return {key: parse_score(raw) for key, raw in v.items()}

    def score(self, metric_key: str) -> Optional[int]:
        """Score for a metric key, None when unset or unknown."""
        return self.scores.get(metric_key)

    def scored_values(self, metric_keys: List[str]) -> List[int]:
        """Set scores for the given keys, in key order."""
        values = []
        for key in metric_keys:
            score = self.scores.get(key)
            if score is not None and score > 0:
                values.append(score)
        return values


class ScoreTable:
    """
    Ordered collection of School rows bound to a taxonomy.

    Every school held by the table carries a slot for every metric key of the
    taxonomy. Editing operations replace rows rather than mutating them, so
    snapshots handed to the scoring engine stay stable.
    """

    BASE_FIELDS = ("name", "principal", "students", "support_level", "notes")

    def __init__(self, taxonomy: Taxonomy, schools: Optional[List[School]] = None):
        self.taxonomy = taxonomy
        self._schools: List[School] = []
        for school in schools or []:
            self.append(school)

    def _with_all_slots(self, school: School) -> School:
        scores = {key: school.scores.get(key) for key in self.taxonomy.all_metric_keys}
        unknown = set(school.scores) - set(scores)
        if unknown:
            logger.warning(f"School {school.id} has scores for unknown metrics: {sorted(unknown)}")
        return school.model_copy(update={"scores": scores})

    def append(self, school: School) -> School:
        """Add an existing row, filling in missing score slots."""
        if any(s.id == school.id for s in self._schools):
            raise ValueError(f"Duplicate school id: {school.id}")
        stored = self._with_all_slots(school)
        self._schools.append(stored)
        return stored

    @property
    def schools(self) -> List[School]:
        """Snapshot of the current rows."""
        return list(self._schools)

    @property
    def next_id(self) -> int:
        return max((s.id for s in self._schools), default=0) + 1

    def __len__(self) -> int:
        return len(self._schools)

    def __iter__(self) -> Iterator[School]:
        return iter(list(self._schools))

    def get(self, school_id: int) -> Optional[School]:
        for school in self._schools:
            if school.id == school_id:
                return school
        return None

    def add_school(self, **fields) -> School:
        """Append a new row with the next free id and empty score slots."""
        return self.append(School(id=self.next_id, **fields))

    def remove_school(self, school_id: int) -> bool:
        """Remove a row by id. Returns True if a row was removed."""
        for i, school in enumerate(self._schools):
            if school.id == school_id:
                del self._schools[i]
                return True
        return False

    def update_field(self, school_id: int, field: str, value: Any) -> School:
        """
        Set one field of a row, parsing the raw value.

        `field` is either an administrative field or a metric key.
        """
        for i, school in enumerate(self._schools):
            if school.id != school_id:
                continue

            if field in self.BASE_FIELDS:
                data = school.model_dump()
                data[field] = value
                updated = School(**data)
            elif field in self.taxonomy:
                scores = dict(school.scores)
                scores[field] = parse_score(value)
                updated = school.model_copy(update={"scores": scores})
            else:
                raise ValueError(f"Unknown field: {field}")

            self._schools[i] = updated
            return updated

        raise KeyError(f"School {school_id} not found")
