"""
Issue catalog and taxonomy configuration loading.

The issue catalog is static configuration data: issue definitions, the
issue → metric-key mapping, metric → challenge phrases, and the focus area →
issue mapping used to pick candidate issues.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from models import IssueCategory, Taxonomy

logger = logging.getLogger(__name__)


class IssueDefinition(BaseModel):
    """A candidate systemic issue from the catalog."""
    id: str
    title: str
    principal_goal: str = ""
    category: IssueCategory

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not v or not v.strip():
            raise ValueError("Issue ID must be a non-empty string")
        return v.strip()


class IssueCatalog(BaseModel):
    """Issue definitions plus the mapping tables the engine resolves through."""
    issues: List[IssueDefinition] = []
    issue_metrics: Dict[str, List[str]] = {}
    metric_challenges: Dict[str, str] = {}
    focus_areas: Dict[str, List[str]] = {}

    @field_validator('issues')
    @classmethod
    def validate_unique_ids(cls, v):
        ids = set()
        for issue in v:
            if issue.id in ids:
                raise ValueError(f"Duplicate issue ID found: {issue.id}")
            ids.add(issue.id)
        return v

    def get_issue(self, issue_id: str) -> Optional[IssueDefinition]:
        for issue in self.issues:
            if issue.id == issue_id:
                return issue
        return None

    def metrics_for(self, issue_id: str) -> List[str]:
        return list(self.issue_metrics.get(issue_id, []))

    def unknown_metric_keys(self, taxonomy: Taxonomy) -> Dict[str, List[str]]:
        """Metric keys referenced by issues that the taxonomy does not define."""
        unknown = {}
        for issue_id, keys in self.issue_metrics.items():
            missing = [k for k in keys if k not in taxonomy]
            if missing:
                unknown[issue_id] = missing
        return unknown

    def get_statistics(self) -> Dict[str, Any]:
        categories = {}
        for issue in self.issues:
            categories[issue.category.value] = categories.get(issue.category.value, 0) + 1
        return {
            'total_issues': len(self.issues),
            'categories': categories,
            'mapped_metrics': sum(len(v) for v in self.issue_metrics.values()),
            'challenge_phrases': len(self.metric_challenges),
            'focus_areas': len(self.focus_areas)
        }


def _read_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error(f"Configuration file not found: {path}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {path}: {e}")
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        logger.error(f"Expected a mapping at the top of {path}")
        raise ValueError(f"Expected a mapping at the top of {path}")
    return data


def load_taxonomy(config_path: Union[str, Path]) -> Taxonomy:
    """Load the rubric taxonomy from a YAML file."""
    data = _read_yaml(config_path)
    try:
        taxonomy = Taxonomy(**data)
    except ValidationError as e:
        logger.error(f"Invalid taxonomy in {config_path}: {e}")
        raise ValueError(f"Invalid taxonomy in {config_path}: {e}") from e

    logger.info(f"Loaded taxonomy with {len(taxonomy.categories)} categories "
                f"and {len(taxonomy)} metrics from {config_path}")
    return taxonomy


def load_issue_catalog(config_path: Union[str, Path], taxonomy: Optional[Taxonomy] = None) -> IssueCatalog:
    """
    Load the issue catalog from a YAML file.

    When a taxonomy is given, metric keys the taxonomy does not know are
    reported as warnings; they stay in the mapping and simply never score.
    """
    data = _read_yaml(config_path)
    try:
        catalog = IssueCatalog(**data)
    except ValidationError as e:
        logger.error(f"Invalid issue catalog in {config_path}: {e}")
        raise ValueError(f"Invalid issue catalog in {config_path}: {e}") from e

    if taxonomy is not None:
        for issue_id, missing in catalog.unknown_metric_keys(taxonomy).items():
            logger.warning(f"Issue {issue_id} references unknown metrics: {missing}")

    logger.info(f"Loaded {len(catalog.issues)} issue definitions from {config_path}")
    return catalog
