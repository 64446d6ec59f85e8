"""
Tests for the three-tier performance classification.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from models import Category, Metric, School, SubCategory, Taxonomy, Tier
from scoring import classify, classify_schools, partition_by_tier, to_analysis_set

KEYS = ["m1", "m2", "m3", "m4", "m5", "m6"]


@pytest.fixture
def taxonomy():
    return Taxonomy(categories=[
        Category(name="Pedagogy", sub_categories=[
            SubCategory(key="a", name="A", metrics=[Metric(key=k, name=k.upper()) for k in KEYS[:3]]),
        ]),
        Category(name="Climate", sub_categories=[
            SubCategory(key="b", name="B", metrics=[Metric(key=k, name=k.upper()) for k in KEYS[3:]]),
        ]),
    ])


def make_school(school_id, values):
    return School(id=school_id, name=f"School {school_id}", scores=dict(zip(KEYS, values)))


class TestClassify:
    """Test tier rules for a single school."""

    def test_insufficient_data_defaults_to_medium(self, taxonomy):
        assert classify(make_school(1, [4, 4]), taxonomy) == Tier.MEDIUM
        assert classify(make_school(1, [1, 1, 1, 1]), taxonomy) == Tier.MEDIUM
        assert classify(make_school(1, []), taxonomy) == Tier.MEDIUM

    def test_low_average_is_low_tier(self, taxonomy):
        # mean 1.5
        assert classify(make_school(1, [1, 1, 1, 1, 1, 4]), taxonomy) == Tier.LOW

    def test_high_average_is_excellent(self, taxonomy):
        assert classify(make_school(1, [4, 4, 4, 3, 3]), taxonomy) == Tier.EXCELLENT

    def test_one_critical_score_still_excellent(self, taxonomy):
        # mean 3.5, one score of 1
        assert classify(make_school(1, [4, 4, 4, 4, 4, 1]), taxonomy) == Tier.EXCELLENT

    def test_two_critical_scores_block_excellent(self):
        keys = [f"k{i}" for i in range(10)]
        wide = Taxonomy(categories=[
            Category(name="All", sub_categories=[
                SubCategory(key="all", name="All", metrics=[Metric(key=k, name=k) for k in keys]),
            ]),
        ])
        # mean 3.4 with two scores of 1
        school = School(id=1, name="X", scores=dict(zip(keys, [4] * 8 + [1, 1])))
        assert classify(school, wide) == Tier.MEDIUM

    @pytest.mark.parametrize("values", [
        [3, 3, 3, 3, 3],          # 3.0
        [4, 3, 3, 3, 3],          # 3.2 is not above 3.2
        [2, 2, 3, 2, 2, 2],       # 2.1666 is below 2.2
    ])
    def test_boundaries(self, taxonomy, values):
        expected = Tier.LOW if sum(values) / len(values) < 2.2 else Tier.MEDIUM
        assert classify(make_school(1, values), taxonomy) == expected

    def test_unset_scores_are_ignored(self, taxonomy):
        school = make_school(1, [4, None, 4, 4, 4, 4])
        assert classify(school, taxonomy) == Tier.EXCELLENT

    def test_scores_outside_taxonomy_are_ignored(self, taxonomy):
        school = School(id=1, name="X", scores={"m1": 4, "other": 4, "another": 4, "third": 4, "fourth": 4})
        assert classify(school, taxonomy) == Tier.MEDIUM


class TestAnalysisSet:
    """Test the tier projection over many schools."""

    @pytest.fixture
    def schools(self):
        return [
            make_school(1, [4, 4, 4, 4, 4, 4]),
            make_school(2, [1, 1, 2, 1, 2, 1]),
            make_school(3, [3, 3, 3, 3, 3, 3]),
            make_school(4, [4, 4, 4, 4, 4, 3]),
        ]

    def test_classify_schools(self, schools, taxonomy):
        assert classify_schools(schools, taxonomy) == {
            1: Tier.EXCELLENT, 2: Tier.LOW, 3: Tier.MEDIUM, 4: Tier.EXCELLENT
        }

    def test_to_analysis_set_keeps_order(self, schools, taxonomy):
        analysis_set = to_analysis_set(schools, taxonomy)
        assert [s.id for s in analysis_set] == [1, 2, 3, 4]
        assert analysis_set[1].tier == Tier.LOW
        assert analysis_set[0].school is schools[0]

    def test_tier_not_written_to_school(self, schools, taxonomy):
        to_analysis_set(schools, taxonomy)
        assert not hasattr(schools[0], "tier")

    def test_partition_by_tier(self, schools, taxonomy):
        groups = partition_by_tier(to_analysis_set(schools, taxonomy))
        assert [s.id for s in groups[Tier.EXCELLENT]] == [1, 4]
        assert [s.id for s in groups[Tier.MEDIUM]] == [3]
        assert [s.id for s in groups[Tier.LOW]] == [2]

    def test_empty_input(self, taxonomy):
        assert to_analysis_set([], taxonomy) == []
        assert partition_by_tier([]) == {Tier.EXCELLENT: [], Tier.MEDIUM: [], Tier.LOW: []}
