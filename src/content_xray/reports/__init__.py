"""Reports, recommendations and summaries."""

from .models import Effort, Priority, Recommendation, Report
from .recommendations import RULES, filter_issues, generate_recommendations
from .summary import generate_report, generate_summary

__all__ = [
    "Effort",
    "Priority",
    "RULES",
    "Recommendation",
    "Report",
    "filter_issues",
    "generate_recommendations",
    "generate_report",
    "generate_summary",
]
