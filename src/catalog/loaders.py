"""
Score Table and Catalog Loaders

This module provides high-level utilities for loading the bundled (or a
configured) taxonomy and issue catalog, and for ingesting a score table from
CSV into the normalised ScoreTable the scoring engine consumes.
"""

import logging
from importlib.resources import files
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from models import School, ScoreTable, Taxonomy

from .dataset import IssueCatalog, load_issue_catalog, load_taxonomy

logger = logging.getLogger(__name__)

BUNDLED_CONFIG_DIR = Path(str(files("catalog") / "configs"))

BASE_COLUMN_ALIASES = {
    "id": "id",
    "school id": "id",
    "school name": "name",
    "school_name": "name",
    "name": "name",
    "principal": "principal",
    "principal name": "principal",
    "principal_name": "principal",
    "students": "students",
    "student count": "students",
    "student_count": "students",
    "support level": "support_level",
    "support_level": "support_level",
    "notes": "notes",
}


class CatalogLoader:
    """High-level interface for loading the taxonomy and issue catalog."""

    def __init__(self,
                 taxonomy_path: Union[str, Path, None] = None,
                 issue_catalog_path: Union[str, Path, None] = None,
                 base_dir: Union[str, Path, None] = None):
        """
        Initialize the catalog loader.

        Args:
            taxonomy_path: Path to the taxonomy YAML file
            issue_catalog_path: Path to the issue catalog YAML file
            base_dir: Directory holding a configs/ folder to use instead of the bundled one
        """
        # Bundled catalogs ship inside this package
        config_dir = BUNDLED_CONFIG_DIR if base_dir is None else Path(base_dir) / "configs"

        if taxonomy_path is None:
            taxonomy_path = config_dir / "taxonomy.yaml"
        if issue_catalog_path is None:
            issue_catalog_path = config_dir / "issue_catalog.yaml"

        self.taxonomy_path = Path(taxonomy_path)
        self.issue_catalog_path = Path(issue_catalog_path)

        self._taxonomy = None
        self._catalog = None

    @property
    def taxonomy(self) -> Taxonomy:
        """Get the taxonomy, loading it if necessary."""
        if self._taxonomy is None:
            self._taxonomy = load_taxonomy(self.taxonomy_path)
        return self._taxonomy

    @property
    def catalog(self) -> IssueCatalog:
        """Get the issue catalog, loading it if necessary."""
        if self._catalog is None:
            self._catalog = load_issue_catalog(self.issue_catalog_path, taxonomy=self.taxonomy)
        return self._catalog

    def reload(self):
        """Force reload of both files on next access."""
        self._taxonomy = None
        self._catalog = None

    def load_score_table(self, csv_path: Union[str, Path]) -> ScoreTable:
        return load_score_table_csv(csv_path, self.taxonomy)


def resolve_columns(columns: List[str], taxonomy: Taxonomy) -> Dict[str, str]:
    """
    Map CSV headers to School fields or metric keys.

    Metric columns may be named by key or by full path label
    ("<category> - <sub-category> - <metric>"). Unrecognised headers are
    left out of the mapping.
    """
    labels = {path.label.strip().lower(): path.metric.key for path in taxonomy.iter_metrics()}
    mapping = {}
    for column in columns:
        header = str(column).strip()
        lowered = header.lower()
        if header in taxonomy:
            mapping[column] = header
        elif lowered in BASE_COLUMN_ALIASES:
            mapping[column] = BASE_COLUMN_ALIASES[lowered]
        elif lowered in labels:
            mapping[column] = labels[lowered]
        else:
            logger.warning(f"Ignoring unrecognised column: {header}")
    return mapping


def _parse_id(raw: str) -> Optional[int]:
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value > 0 else None


def load_score_table_csv(csv_path: Union[str, Path], taxonomy: Taxonomy) -> ScoreTable:
    """Load a score table from CSV. Rows without a school name are skipped."""
    csv_path = Path(csv_path)
    if not csv_path.exists():
        logger.error(f"Score table file not found: {csv_path}")
        raise FileNotFoundError(f"Score table file not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    mapping = resolve_columns(list(df.columns), taxonomy)

    table = ScoreTable(taxonomy)
    used_ids = set()
    for row_num, record in enumerate(df.to_dict(orient="records"), 2):
        fields = {"scores": {}}
        raw_id = None
        for column, target in mapping.items():
            value = record.get(column, "")
            if target == "id":
                raw_id = value
            elif target in ScoreTable.BASE_FIELDS:
                fields[target] = value
            else:
                fields["scores"][target] = value

        if not str(fields.get("name", "")).strip():
            logger.warning(f"Skipping row {row_num}: missing school name")
            continue

        school_id = _parse_id(raw_id) if raw_id is not None else None
        if school_id is None or school_id in used_ids:
            school_id = max(used_ids, default=0) + 1
        used_ids.add(school_id)

        fields["name"] = str(fields["name"]).strip()
        table.append(School(id=school_id, **fields))

    logger.info(f"Loaded {len(table)} schools from {csv_path}")
    return table


# Convenience functions for common operations
def get_default_loader() -> CatalogLoader:
    """Get a CatalogLoader with the bundled configuration files."""
    return CatalogLoader()


def load_default_taxonomy() -> Taxonomy:
    return get_default_loader().taxonomy
