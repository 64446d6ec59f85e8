"""
Tests for the school-insights command-line interface.

Runs every command against the bundled catalogs and sample score table.
"""

import pytest
import sys
from pathlib import Path

from typer.testing import CliRunner

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from catalog import get_default_loader, load_score_table_csv
from school_insights import __version__
from school_insights.cli import app

SAMPLE_CSV = Path(__file__).parent.parent / "data" / "sample_schools.csv"

runner = CliRunner()


@pytest.fixture
def sample_csv():
    return str(SAMPLE_CSV)


class TestBasicCommands:

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_analyze(self, sample_csv):
        result = runner.invoke(app, ["analyze", sample_csv])
        assert result.exit_code == 0
        assert "District Summary" in result.stdout
        assert "Oak Hill Elementary" in result.stdout

    def test_analyze_json(self, sample_csv):
        result = runner.invoke(app, ["analyze", sample_csv, "--json"])
        assert result.exit_code == 0
        assert '"classification"' in result.stdout
        assert '"systemic_strengths"' in result.stdout

    def test_missing_csv(self, tmp_path):
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.csv")])
        assert result.exit_code == 1
        assert "Failed to load data" in result.stdout


class TestBracketedNames:
    """Names from the score table are printed literally, never as rich markup."""

    @pytest.fixture
    def bracketed_csv(self, tmp_path):
        csv_path = tmp_path / "schools.csv"
        csv_path.write_text(
            "School Name,Principal,literacy_achievement,math_achievement,sense_of_safety\n"
            "Alon [east],Dana [bold],2,1,4\n"
            "Ort [/east],Yossi,4,4,3\n",
            encoding="utf-8"
        )
        return str(csv_path)

    def test_analyze(self, bracketed_csv):
        result = runner.invoke(app, ["analyze", bracketed_csv])
        assert result.exit_code == 0
        assert "Alon [east]" in result.stdout
        assert "Ort [/east]" in result.stdout
        assert "Dana [bold]" in result.stdout

    def test_report_card(self, bracketed_csv):
        result = runner.invoke(app, ["report-card", bracketed_csv, "2"])
        assert result.exit_code == 0
        assert "Ort [/east]" in result.stdout

        result = runner.invoke(app, ["report-card", bracketed_csv, "1"])
        assert result.exit_code == 0
        assert "Alon [east]" in result.stdout
        assert "Dana [bold]" in result.stdout

    def test_issue_details(self, bracketed_csv):
        result = runner.invoke(app, ["issues", bracketed_csv, "-i", "core_achievement_gaps", "--details"])
        assert result.exit_code == 0
        assert "Alon [east]" in result.stdout


class TestIssuesCommand:

    def test_focus_area_with_details_and_export(self, sample_csv, tmp_path):
        output = tmp_path / "issues.csv"
        result = runner.invoke(app, [
            "issues", sample_csv,
            "--focus-area", "teaching_and_learning",
            "--details",
            "--output", str(output)
        ])
        assert result.exit_code == 0
        assert "Systemic Issues" in result.stdout
        assert "Northgate High" in result.stdout
        assert output.exists()

    def test_all_issues_by_default(self, sample_csv):
        result = runner.invoke(app, ["issues", sample_csv])
        assert result.exit_code == 0
        assert "Severity counts" in result.stdout

    def test_unknown_focus_area(self, sample_csv):
        result = runner.invoke(app, ["issues", sample_csv, "-f", "astronomy"])
        assert result.exit_code == 0
        assert "No relevant issues" in result.stdout

    def test_invalid_sort_key(self, sample_csv):
        result = runner.invoke(app, ["issues", sample_csv, "-i", "core_achievement_gaps",
                                     "--details", "--sort-by", "alphabetical"])
        assert result.exit_code == 1
        assert "Unknown sort key" in result.stdout


class TestReportCardCommand:

    def test_report_card_with_html(self, sample_csv, tmp_path):
        html_path = tmp_path / "card.html"
        result = runner.invoke(app, ["report-card", sample_csv, "3", "--html", str(html_path)])
        assert result.exit_code == 0
        assert "Northgate High" in result.stdout
        assert "Challenges" in result.stdout
        assert "Northgate High" in html_path.read_text(encoding="utf-8")

    def test_unknown_school(self, sample_csv):
        result = runner.invoke(app, ["report-card", sample_csv, "99"])
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestExportCommands:

    def test_heatmap(self, sample_csv, tmp_path):
        output = tmp_path / "heatmap.html"
        result = runner.invoke(app, ["heatmap", sample_csv, "-o", str(output)])
        assert result.exit_code == 0
        assert "<h3>Pedagogy and Instruction</h3>" in output.read_text(encoding="utf-8")

    def test_export_table_round_trips(self, sample_csv, tmp_path):
        output = tmp_path / "table.csv"
        result = runner.invoke(app, ["export-table", sample_csv, "-o", str(output)])
        assert result.exit_code == 0

        taxonomy = get_default_loader().taxonomy
        original = load_score_table_csv(SAMPLE_CSV, taxonomy)
        exported = load_score_table_csv(output, taxonomy)
        assert [s.scores for s in exported] == [s.scores for s in original]
