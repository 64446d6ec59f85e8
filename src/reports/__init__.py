"""Export writers (CSV and static HTML) for analysis results."""

from .exporters import (
    score_table_frame,
    export_score_table_csv,
    issues_frame,
    export_issues_csv,
    render_heatmap_html,
    export_heatmap_html,
    render_report_card_html,
    export_report_card_html
)

__all__ = [
    'score_table_frame',
    'export_score_table_csv',
    'issues_frame',
    'export_issues_csv',
    'render_heatmap_html',
    'export_heatmap_html',
    'render_report_card_html',
    'export_report_card_html',
]
