"""
Catalog and ingestion for the school insights system.

Main components:
- IssueDefinition / IssueCatalog: static issue configuration and mapping tables
- CatalogLoader: lazy loading of the taxonomy and issue catalog from YAML
- load_score_table_csv: CSV ingestion into a normalised ScoreTable
"""

from .dataset import IssueDefinition, IssueCatalog, load_taxonomy, load_issue_catalog
from .loaders import (
    BUNDLED_CONFIG_DIR,
    CatalogLoader,
    get_default_loader,
    load_default_taxonomy,
    load_score_table_csv,
    resolve_columns
)

__all__ = [
    # Core classes
    'IssueDefinition',
    'IssueCatalog',
    'CatalogLoader',

    # Loading functions
    'load_taxonomy',
    'load_issue_catalog',
    'get_default_loader',
    'load_default_taxonomy',
    'load_score_table_csv',
    'resolve_columns',

    # Bundled data
    'BUNDLED_CONFIG_DIR',
]
