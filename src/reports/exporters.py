"""
Export writers for analysis results.

Presentation-side collaborators: they take the plain structures produced by
the scoring engine and write CSV or static HTML. Nothing here affects scores.
"""

import csv
import html
import logging
from pathlib import Path
from string import Template
from typing import Dict, List, Union

import pandas as pd

from models import HeatBand, HeatmapRow, Issue, ReportCard, ScoreTable, Tier

logger = logging.getLogger(__name__)

BASE_HEADERS = ["School Name", "Principal", "Students", "Support Level"]
NOTES_HEADER = "Notes"

HEAT_COLORS: Dict[HeatBand, str] = {
    HeatBand.EXCELLENT: "#14532d",
    HeatBand.GOOD: "#16a34a",
    HeatBand.MEDIUM: "#facc15",
    HeatBand.HIGH_CHALLENGE: "#fb923c",
    HeatBand.CRITICAL_CHALLENGE: "#ef4444",
}

TIER_LABELS: Dict[Tier, str] = {
    Tier.EXCELLENT: "Excellent performance",
    Tier.MEDIUM: "Medium performance",
    Tier.LOW: "Low performance",
}

PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>$title</title>
    <style>
        body { font-family: sans-serif; background: #f3f4f6; padding: 2rem; }
        .page { max-width: 72rem; margin: 0 auto; background: #fff; padding: 2rem; border-radius: 0.5rem; }
        .grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 0.75rem; }
        .tile { padding: 0.75rem; border-radius: 0.5rem; color: #fff; }
        .tile .value { font-size: 1.5rem; font-weight: 900; }
        table { border-collapse: collapse; width: 100%; }
        td, th { border: 1px solid #e5e7eb; padding: 0.4rem; text-align: left; }
    </style>
</head>
<body>
<div class="page">
    <h1>$title</h1>
    <p>$subtitle</p>
$body
</div>
</body>
</html>
""")

HEATMAP_CATEGORY_TEMPLATE = Template("""    <section>
        <h3>$category</h3>
        <div class="grid">
$tiles
        </div>
    </section>""")

HEATMAP_TILE_TEMPLATE = Template("""            <div class="tile" style="background-color: $color;">
                <div>$name</div>
                <div class="value">$average</div>
            </div>""")


def _write_text(content: str, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    return path


def score_table_frame(table: ScoreTable) -> pd.DataFrame:
    """Raw table as a DataFrame with display headers; unset values are empty strings."""
    paths = list(table.taxonomy.iter_metrics())
    headers = BASE_HEADERS + [p.label for p in paths] + [NOTES_HEADER]

    rows = []
    for school in table:
        row = [
            school.name,
            school.principal,
            "" if school.students is None else str(school.students),
            school.support_level.value if school.support_level else "",
        ]
        for path in paths:
            score = school.score(path.metric.key)
            row.append("" if score is None else str(score))
        row.append(school.notes)
        rows.append(row)

    return pd.DataFrame(rows, columns=headers)


def export_score_table_csv(table: ScoreTable, path: Union[str, Path]) -> Path:
    """Write the raw score table as a BOM-prefixed, fully quoted CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    score_table_frame(table).to_csv(path, index=False, quoting=csv.QUOTE_ALL, encoding="utf-8-sig")
    logger.info(f"Exported {len(table)} schools to {path}")
    return path


def issues_frame(issues: List[Issue]) -> pd.DataFrame:
    records = []
    for issue in issues:
        records.append({
            "Issue ID": issue.id,
            "Issue": issue.name,
            "Category": issue.category.value,
            "Severity": issue.severity.value,
            "Urgency": issue.urgency,
            "Affected Schools": issue.affected_schools,
            "Total Schools": issue.total_schools,
            "Overall Average": round(issue.overall_average, 2),
            "Tier 1 Average": round(issue.tier1_average, 2),
            "Tier 2 Average": round(issue.tier2_average, 2),
            "Tier 3 Average": round(issue.tier3_average, 2),
        })
    return pd.DataFrame(records, columns=[
        "Issue ID", "Issue", "Category", "Severity", "Urgency", "Affected Schools",
        "Total Schools", "Overall Average", "Tier 1 Average", "Tier 2 Average", "Tier 3 Average"
    ])


def export_issues_csv(issues: List[Issue], path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    issues_frame(issues).to_csv(path, index=False, encoding="utf-8-sig")
    logger.info(f"Exported {len(issues)} issues to {path}")
    return path


def render_heatmap_html(heatmap: List[HeatmapRow], title: str = "District Heat Map") -> str:
    """Static HTML page: one block per category, one coloured tile per sub-category."""
    sections = []
    for row in heatmap:
        tiles = "\n".join(
            HEATMAP_TILE_TEMPLATE.substitute(
                color=HEAT_COLORS[cell.band],
                name=html.escape(cell.sub_category),
                average=f"{cell.average:.2f}"
            )
            for cell in row.cells
        )
        sections.append(HEATMAP_CATEGORY_TEMPLATE.substitute(category=html.escape(row.category), tiles=tiles))

    return PAGE_TEMPLATE.substitute(
        title=html.escape(title),
        subtitle="Average scores across all assessment areas",
        body="\n".join(sections)
    )


def export_heatmap_html(heatmap: List[HeatmapRow], path: Union[str, Path], title: str = "District Heat Map") -> Path:
    path = _write_text(render_heatmap_html(heatmap, title), path)
    logger.info(f"Exported heat map to {path}")
    return path


def render_report_card_html(card: ReportCard) -> str:
    domain_rows = "\n".join(
        f"        <tr><td>{html.escape(name)}</td><td>{value:.2f}</td></tr>"
        for name, value in card.domain_averages.items()
    )
    strengths = "\n".join(f"        <li>{html.escape(s)}</li>" for s in card.strengths) or "        <li>None</li>"
    challenges = "\n".join(
        f"        <li><strong>{html.escape(c.sub_category)}</strong>: {html.escape(c.text)}</li>"
        for c in card.challenges
    ) or "        <li>None</li>"

    body = "\n".join([
        "    <table>",
        f"        <tr><th>Principal</th><td>{html.escape(card.principal_name or '-')}</td></tr>",
        f"        <tr><th>Students</th><td>{card.student_count}</td></tr>",
        f"        <tr><th>Support level</th><td>{html.escape(card.support_level)}</td></tr>",
        f"        <tr><th>Overall average</th><td>{card.overall_average:.2f}</td></tr>",
        f"        <tr><th>Performance tier</th><td>{TIER_LABELS[card.performance_tier]}</td></tr>",
        "    </table>",
        "    <h2>Domain averages</h2>",
        "    <table>",
        domain_rows,
        "    </table>",
        "    <h2>Strengths</h2>",
        "    <ul>",
        strengths,
        "    </ul>",
        "    <h2>Challenges</h2>",
        "    <ul>",
        challenges,
        "    </ul>",
    ])

    return PAGE_TEMPLATE.substitute(
        title=html.escape(f"Report card: {card.school_name}"),
        subtitle="School assessment report card",
        body=body
    )


def export_report_card_html(card: ReportCard, path: Union[str, Path]) -> Path:
    path = _write_text(render_report_card_html(card), path)
    logger.info(f"Exported report card for school {card.school_id} to {path}")
    return path
