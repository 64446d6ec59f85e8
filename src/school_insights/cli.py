"""Command-line interface for school insights."""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from catalog import CatalogLoader, IssueCatalog
from models import IssueSeverity, ScoreBand, ScoreTable, Tier
from reports import (
    export_heatmap_html,
    export_issues_csv,
    export_report_card_html,
    export_score_table_csv
)
from scoring import (
    IssueIdentifier,
    analyze_district,
    report_card_for,
    resolve_candidate_issue_ids,
    sort_school_details
)

from .config import settings

app = typer.Typer(
    name="school-insights",
    help="School Insights - School assessment scoring and systemic issue analysis",
    add_completion=False,
)

console = Console()
logger = logging.getLogger(__name__)

TIER_STYLES = {
    Tier.EXCELLENT: ("Excellent performance", "green"),
    Tier.MEDIUM: ("Medium performance", "yellow"),
    Tier.LOW: ("Low performance", "red"),
}

SEVERITY_STYLES = {
    IssueSeverity.CRITICAL: "bold red",
    IssueSeverity.HIGH: "red",
    IssueSeverity.MEDIUM: "yellow",
    IssueSeverity.LOW: "green",
}

BAND_STYLES = {
    ScoreBand.GREEN: "green",
    ScoreBand.YELLOW: "yellow",
    ScoreBand.ORANGE: "dark_orange",
    ScoreBand.RED: "red",
}


def _configure_logging():
    level = "DEBUG" if settings.app.debug else settings.app.log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logger.debug(f"Using taxonomy {settings.data.taxonomy_path} and catalog {settings.data.issue_catalog_path}")


def _loader() -> CatalogLoader:
    return CatalogLoader(
        taxonomy_path=settings.data.taxonomy_path,
        issue_catalog_path=settings.data.issue_catalog_path
    )


def _load_table(loader: CatalogLoader, csv_path: Path) -> ScoreTable:
    try:
        return loader.load_score_table(csv_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]❌ Failed to load data: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _load_catalog(loader: CatalogLoader) -> IssueCatalog:
    try:
        return loader.catalog
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]❌ Failed to load issue catalog: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


@app.callback()
def main_callback():
    _configure_logging()


@app.command()
def version():
    """Show version information."""
    from school_insights import __version__

    console.print(Panel.fit(
        f"[bold blue]School Insights[/bold blue]\n"
        f"Version: [green]{__version__}[/green]",
        title="Version Info"
    ))


@app.command()
def analyze(
    csv_path: Path = typer.Argument(..., help="Score table CSV"),
    as_json: bool = typer.Option(False, "--json", help="Print the full analysis as JSON")
):
    """Tier every school and print the district summary."""
    loader = _loader()
    table = _load_table(loader, csv_path)
    analysis = analyze_district(table)

    if as_json:
        console.print_json(analysis.model_dump_json())
        return

    summary = analysis.summary
    console.print(Panel.fit(
        f"Schools: [bold]{summary.total_schools}[/bold]   "
        f"Students: [bold]{summary.total_students:,}[/bold]   "
        f"Low performance: [red]{summary.low_performance_count}[/red]   "
        f"Excellent: [green]{summary.excellent_count}[/green]",
        title="District Summary"
    ))

    for tier in Tier:
        label, color = TIER_STYLES[tier]
        members = analysis.schools_in_tier(tier)
        table_view = Table(title=f"[{color}]{label}[/{color}] ({len(members)})", show_lines=False)
        table_view.add_column("ID", justify="right")
        table_view.add_column("School")
        table_view.add_column("Principal")
        for item in members:
            table_view.add_row(str(item.id), escape(item.name), escape(item.school.principal or "-"))
        console.print(table_view)

    if analysis.systemic_strengths:
        strengths = Table(title="Systemic Strengths")
        strengths.add_column("Sub-category")
        strengths.add_column("Average", justify="right")
        for strength in analysis.systemic_strengths:
            strengths.add_row(escape(strength.name), f"{strength.average:.2f}")
        console.print(strengths)

    domains = Table(title="Domain Averages")
    domains.add_column("Domain")
    domains.add_column("Average", justify="right")
    for domain in analysis.domain_averages:
        style = BAND_STYLES[domain.band]
        domains.add_row(escape(domain.name), f"[{style}]{domain.value:.2f}[/{style}]")
    console.print(domains)


@app.command()
def issues(
    csv_path: Path = typer.Argument(..., help="Score table CSV"),
    focus_area: List[str] = typer.Option([], "--focus-area", "-f", help="Focus area selecting candidate issues"),
    issue_id: List[str] = typer.Option([], "--issue", "-i", help="Explicit candidate issue id"),
    details: bool = typer.Option(False, "--details", help="Show per-school drill-down"),
    sort_by: str = typer.Option("severity", "--sort-by", help="Drill-down order: severity or affected_count"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write ranked issues to CSV")
):
    """Identify and rank systemic issues."""
    loader = _loader()
    table = _load_table(loader, csv_path)
    analysis = analyze_district(table)

    catalog = _load_catalog(loader)
    identifier = IssueIdentifier(catalog, loader.taxonomy)

    if focus_area or issue_id:
        candidates = set(issue_id) | resolve_candidate_issue_ids(focus_area, catalog.focus_areas)
        ranked = identifier.identify(analysis.schools, candidates)
    else:
        ranked = identifier.identify(analysis.schools)

    if not ranked:
        console.print("[yellow]No relevant issues identified for the selected focus areas.[/yellow]")
        return

    view = Table(title=f"Systemic Issues ({len(ranked)})")
    view.add_column("Urgency", justify="right")
    view.add_column("Severity")
    view.add_column("Issue")
    view.add_column("Category")
    view.add_column("Affected", justify="right")
    view.add_column("Avg", justify="right")
    view.add_column("T1/T2/T3", justify="right")
    for issue in ranked:
        style = SEVERITY_STYLES[issue.severity]
        view.add_row(
            str(issue.urgency),
            f"[{style}]{issue.severity.value}[/{style}]",
            escape(issue.name),
            issue.category.value,
            f"{issue.affected_schools}/{issue.total_schools}",
            f"{issue.overall_average:.2f}",
            f"{issue.tier1_average:.2f}/{issue.tier2_average:.2f}/{issue.tier3_average:.2f}"
        )
    console.print(view)
    console.print(f"Severity counts: {identifier.issue_counts(ranked)}")

    if details:
        try:
            for issue in ranked:
                console.print(f"\n[bold]{escape(issue.name)}[/bold]")
                for detail in sort_school_details(issue.school_details, by=sort_by):
                    console.print(escape(
                        f"  [{detail.severity.value}] {detail.school_name} "
                        f"(tier {int(detail.performance_tier)}): {len(detail.affected_metrics)} challenges"
                    ))
                    for text in detail.affected_metrics:
                        console.print(f"    - {escape(text)}")
        except ValueError as e:
            console.print(f"[red]❌ {escape(str(e))}[/red]")
            raise typer.Exit(code=1)

    if output:
        path = export_issues_csv(ranked, output)
        console.print(f"[green]✅ Issues written to {path}[/green]")


@app.command("report-card")
def report_card(
    csv_path: Path = typer.Argument(..., help="Score table CSV"),
    school_id: int = typer.Argument(..., help="School ID"),
    html_path: Optional[Path] = typer.Option(None, "--html", help="Write the report card as HTML")
):
    """Print the report card of one school."""
    loader = _loader()
    table = _load_table(loader, csv_path)
    analysis = analyze_district(table)

    card = report_card_for(analysis, loader.taxonomy, school_id, _load_catalog(loader).metric_challenges)
    if card is None:
        console.print(f"[red]❌ School {school_id} not found[/red]")
        raise typer.Exit(code=1)

    label, color = TIER_STYLES[card.performance_tier]
    console.print(Panel.fit(
        f"[bold]{escape(card.school_name)}[/bold]\n"
        f"Principal: {escape(card.principal_name or '-')}   Students: {card.student_count}   "
        f"Support: {card.support_level}\n"
        f"Overall average: [bold]{card.overall_average:.2f}[/bold]   [{color}]{label}[/{color}]",
        title="Report Card"
    ))

    domains = Table(title="Domain Averages")
    domains.add_column("Domain")
    domains.add_column("Average", justify="right")
    for name, value in card.domain_averages.items():
        domains.add_row(escape(name), f"{value:.2f}")
    console.print(domains)

    console.print("[bold green]Strengths[/bold green]")
    for strength in card.strengths or ["None"]:
        console.print(escape(f"  • {strength}"))
    console.print("[bold red]Challenges[/bold red]")
    for challenge in card.challenges:
        console.print(escape(f"  • {challenge.sub_category}: {challenge.text}"))
    if not card.challenges:
        console.print("  • None")

    if html_path:
        path = export_report_card_html(card, html_path)
        console.print(f"[green]✅ Report card written to {path}[/green]")


@app.command()
def heatmap(
    csv_path: Path = typer.Argument(..., help="Score table CSV"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="HTML output path")
):
    """Write the district heat map as static HTML."""
    loader = _loader()
    table = _load_table(loader, csv_path)
    analysis = analyze_district(table)

    path = export_heatmap_html(analysis.heatmap, output or settings.data.output_dir / "heatmap.html")
    console.print(f"[green]✅ Heat map written to {path}[/green]")


@app.command("export-table")
def export_table(
    csv_path: Path = typer.Argument(..., help="Score table CSV"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV output path")
):
    """Re-export the normalised score table."""
    loader = _loader()
    table = _load_table(loader, csv_path)

    path = export_score_table_csv(table, output or settings.data.output_dir / "score_table.csv")
    console.print(f"[green]✅ Score table written to {path}[/green]")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
