"""
Assessment rubric taxonomy: Category → SubCategory → Metric.

The taxonomy is loaded once and treated as immutable. On construction it builds
an index from metric key to its full path so that label lookups never walk the
tree.
"""

from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator


class Metric(BaseModel):
    """Leaf rubric item, scored 1-4 per school."""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str


class SubCategory(BaseModel):
    """Ordered group of metrics."""
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    metrics: List[Metric]

    @field_validator('metrics')
    @classmethod
    def validate_metrics(cls, v):
        if not v:
            raise ValueError("Sub-category must contain at least one metric")
        return v

    @property
    def metric_keys(self) -> List[str]:
        return [m.key for m in self.metrics]


class Category(BaseModel):
    """Top-level rubric domain."""
    model_config = ConfigDict(frozen=True)

    name: str
    sub_categories: List[SubCategory]

    @field_validator('sub_categories')
    @classmethod
    def validate_sub_categories(cls, v):
        if not v:
            raise ValueError("Category must contain at least one sub-category")
        return v

    @property
    def metric_keys(self) -> List[str]:
        return [key for sub in self.sub_categories for key in sub.metric_keys]


class MetricPath(BaseModel):
    """Full location of a metric inside the taxonomy."""
    model_config = ConfigDict(frozen=True)

    category: str
    sub_category: str
    sub_category_key: str
    metric: Metric

    @property
    def label(self) -> str:
        """Display label used for column headers, e.g. 'Pedagogy - Planning - Lesson plans'."""
        return f"{self.category} - {self.sub_category} - {self.metric.name}"


class Taxonomy(BaseModel):
    """Ordered sequence of categories with a precomputed metric index."""
    model_config = ConfigDict(frozen=True)

    categories: List[Category]

    _index: Dict[str, MetricPath] = PrivateAttr(default_factory=dict)

    @field_validator('categories')
    @classmethod
    def validate_unique_metric_keys(cls, v):
        seen = set()
        for category in v:
            for key in category.metric_keys:
                if key in seen:
                    raise ValueError(f"Duplicate metric key in taxonomy: {key}")
                seen.add(key)
        return v

    def model_post_init(self, __context) -> None:
        index = {}
        for category in self.categories:
            for sub in category.sub_categories:
                for metric in sub.metrics:
                    index[metric.key] = MetricPath(
                        category=category.name,
                        sub_category=sub.name,
                        sub_category_key=sub.key,
                        metric=metric
                    )
        self._index = index

    @property
    def all_metric_keys(self) -> List[str]:
        """Every metric key in declaration order."""
        return list(self._index.keys())

    @property
    def sub_categories(self) -> List[SubCategory]:
        return [sub for category in self.categories for sub in category.sub_categories]

    def iter_metrics(self) -> Iterator[MetricPath]:
        """Yield metric paths in declaration order."""
        return iter(self._index.values())

    def get_path(self, metric_key: str) -> Optional[MetricPath]:
        return self._index.get(metric_key)

    def metric_name(self, metric_key: str) -> str:
        """Display name of a metric, falling back to the key itself."""
        path = self._index.get(metric_key)
        return path.metric.name if path else metric_key

    def __contains__(self, metric_key: object) -> bool:
        return metric_key in self._index

    def __len__(self) -> int:
        return len(self._index)
