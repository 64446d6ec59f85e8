"""
School Insights

Scoring and issue-identification engine for per-school assessment data:
performance tiering, systemic issue ranking and per-school report cards.
"""

__version__ = "0.1.0"
