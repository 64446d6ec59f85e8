"""
End-to-end tests for the district analysis pipeline.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from catalog import get_default_loader
from models import Category, Metric, ScoreTable, SubCategory, Taxonomy, Tier
from scoring import IssueIdentifier, analyze_district, report_card_for

SAMPLE_CSV = Path(__file__).parent.parent / "data" / "sample_schools.csv"


@pytest.fixture
def taxonomy():
    return Taxonomy(categories=[
        Category(name="Pedagogy", sub_categories=[
            SubCategory(key="core", name="Core", metrics=[
                Metric(key=f"m{i}", name=f"Metric {i}") for i in range(1, 6)
            ]),
        ]),
    ])


@pytest.fixture
def table(taxonomy):
    table = ScoreTable(taxonomy)
    table.add_school(name="Excellent", students=100, scores={f"m{i}": 4 for i in range(1, 6)})
    table.add_school(name="Struggling", students=200, scores={f"m{i}": 1 for i in range(1, 6)})
    table.add_school(name="Sparse", scores={"m1": 4})
    return table


class TestAnalyzeDistrict:

    def test_classification_and_summary(self, table):
        analysis = analyze_district(table)
        assert analysis.classification == {1: [1], 2: [3], 3: [2]}
        assert [s.id for s in analysis.schools_in_tier(Tier.LOW)] == [2]
        assert analysis.summary.total_schools == 3
        assert analysis.summary.total_students == 300
        assert analysis.summary.excellent_count == 1
        assert analysis.summary.low_performance_count == 1

    def test_aggregates(self, table):
        analysis = analyze_district(table)
        # five 4s, five 1s and one more 4
        assert analysis.domain_averages[0].value == pytest.approx(29 / 11)
        assert [s.key for s in analysis.systemic_strengths] == ["core"]
        assert analysis.heatmap[0].cells[0].sub_category == "Core"

    def test_fresh_result_after_edit(self, table):
        before = analyze_district(table)
        table.update_field(3, "m2", 4)
        table.update_field(3, "m3", 4)
        table.update_field(3, "m4", 4)
        table.update_field(3, "m5", 4)
        after = analyze_district(table)
        assert before.find_school(3).tier == Tier.MEDIUM
        assert after.find_school(3).tier == Tier.EXCELLENT

    def test_empty_table(self, taxonomy):
        analysis = analyze_district(ScoreTable(taxonomy))
        assert analysis.schools == []
        assert analysis.summary.total_schools == 0
        assert analysis.systemic_strengths == []
        assert analysis.domain_averages[0].value == 0.0

    def test_json_serialisable(self, table):
        data = analyze_district(table).model_dump(mode="json")
        assert data["summary"]["total_schools"] == 3


class TestReportCardFor:

    def test_found(self, table, taxonomy):
        card = report_card_for(analyze_district(table), taxonomy, 2)
        assert card.school_name == "Struggling"
        assert card.performance_tier == Tier.LOW
        assert len(card.challenges) == 5

    def test_unknown_id(self, table, taxonomy):
        assert report_card_for(analyze_district(table), taxonomy, 42) is None


def test_sample_district_end_to_end():
    """Bundled catalogs and sample data run through every stage."""
    loader = get_default_loader()
    table = loader.load_score_table(SAMPLE_CSV)
    analysis = analyze_district(table)

    assert analysis.classification == {1: [1, 5], 2: [2, 4, 6], 3: [3]}

    issues = IssueIdentifier(loader.catalog, loader.taxonomy).identify(analysis.schools)
    assert issues
    assert [i.urgency for i in issues] == sorted((i.urgency for i in issues), reverse=True)
    assert all(i.affected_schools > 0 for i in issues)

    card = report_card_for(analysis, loader.taxonomy, 1, loader.catalog.metric_challenges)
    assert card.performance_tier == Tier.EXCELLENT
    assert len(card.strengths) == 6
