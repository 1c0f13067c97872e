"""Turn issue counts into prioritized, actionable recommendations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..analysis.models import AnalysisResult, Issue, IssueCategory, Severity
from .models import PRIORITY_ORDER, Effort, Priority, Recommendation


@dataclass(frozen=True)
class RecommendationRule:
    category: IssueCategory
    priority: Priority
    title: str
    description: str  # formatted with {count}
    impact: str
    effort: Effort


RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        IssueCategory.SECURITY,
        Priority.HIGH,
        "Fix Security Vulnerabilities",
        "{count} items have overly permissive security settings that could expose "
        "content to unauthorized users.",
        "Prevents unauthorized access and potential data breaches",
        Effort.MEDIUM,
    ),
    RecommendationRule(
        IssueCategory.BROKEN_LINK,
        Priority.HIGH,
        "Repair Broken Links",
        "{count} broken references found. These cause errors for visitors and hurt SEO.",
        "Improves user experience and search rankings",
        Effort.MEDIUM,
    ),
    RecommendationRule(
        IssueCategory.LARGE_MEDIA,
        Priority.HIGH,
        "Optimize Large Media Files",
        "{count} media files exceed recommended size limits, slowing page loads.",
        "Faster page loads, better Core Web Vitals",
        Effort.LOW,
    ),
    RecommendationRule(
        IssueCategory.DEEP_NESTING,
        Priority.MEDIUM,
        "Flatten Content Structure",
        "{count} items are nested too deeply, slowing down the content editor.",
        "Improved content editor performance",
        Effort.HIGH,
    ),
    RecommendationRule(
        IssueCategory.ORPHAN,
        Priority.MEDIUM,
        "Clean Up Orphaned Items",
        "{count} items have missing parents or names out of step with their paths.",
        "Cleaner content tree, easier maintenance",
        Effort.LOW,
    ),
    RecommendationRule(
        IssueCategory.STALE_CONTENT,
        Priority.MEDIUM,
        "Review Stale Content",
        "{count} items haven't been updated in over a year and may be outdated.",
        "More accurate, trustworthy content",
        Effort.MEDIUM,
    ),
    RecommendationRule(
        IssueCategory.CIRCULAR_REFERENCE,
        Priority.MEDIUM,
        "Break Circular References",
        "{count} reference cycles found between content items.",
        "Predictable rendering and safer publishing",
        Effort.MEDIUM,
    ),
    RecommendationRule(
        IssueCategory.UNUSED_TEMPLATE,
        Priority.LOW,
        "Remove Unused Templates",
        "{count} templates have no content items using them.",
        "Simpler template structure, easier maintenance",
        Effort.LOW,
    ),
    RecommendationRule(
        IssueCategory.UNUSED_RENDERING,
        Priority.LOW,
        "Remove Unused Renderings",
        "{count} renderings are not used on any pages.",
        "Cleaner rendering options for content editors",
        Effort.LOW,
    ),
    RecommendationRule(
        IssueCategory.EMPTY_CONTAINER,
        Priority.LOW,
        "Clean Up Empty Folders",
        "{count} folders have no child items.",
        "Cleaner content tree",
        Effort.LOW,
    ),
    RecommendationRule(
        IssueCategory.DUPLICATE,
        Priority.LOW,
        "Review Duplicate Items",
        "{count} potential duplicate groups found with same name and template.",
        "Avoid content confusion",
        Effort.MEDIUM,
    ),
    RecommendationRule(
        IssueCategory.INVALID_FIELD,
        Priority.LOW,
        "Fix Invalid Field Values",
        "{count} field values do not match their declared type.",
        "Fewer rendering errors and cleaner data",
        Effort.LOW,
    ),
)


def generate_recommendations(analysis: AnalysisResult) -> list[Recommendation]:
    """One recommendation per rule whose category has issues, high priority first."""
    counts = analysis.stats.issues_by_category
    recommendations = [
        Recommendation(
            priority=rule.priority,
            title=rule.title,
            description=rule.description.format(count=counts.get(rule.category.value, 0)),
            impact=rule.impact,
            effort=rule.effort,
            affected_items=counts.get(rule.category.value, 0),
        )
        for rule in RULES
        if counts.get(rule.category.value, 0) > 0
    ]
    # sorted() is stable, so rule order is kept within a priority
    return sorted(recommendations, key=lambda r: PRIORITY_ORDER[r.priority])


def filter_issues(
    issues: list[Issue],
    category: Optional[Union[IssueCategory, str]] = None,
    severity: Optional[Union[Severity, str]] = None,
) -> list[Issue]:
    """Issues matching the category and severity (None matches anything).

    Raises:
        ValueError: If a filter value is not a known category or severity
    """
    wanted_category = IssueCategory(category) if category else None
    wanted_severity = Severity(severity) if severity else None
    return [
        issue
        for issue in issues
        if (wanted_category is None or issue.category is wanted_category)
        and (wanted_severity is None or issue.severity is wanted_severity)
    ]
