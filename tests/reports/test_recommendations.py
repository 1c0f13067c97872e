"""Tests for recommendations, issue filtering and the markdown summary."""

from datetime import datetime, timezone

import pytest

from content_xray.analysis import AnalysisResult, AnalysisStats, Issue, IssueCategory, Severity, analyze_scan
from content_xray.reports import (
    RULES,
    Priority,
    filter_issues,
    generate_recommendations,
    generate_report,
    generate_summary,
)


def analysis_with(counts):
    stats = AnalysisStats(issues_by_category={c.value: 0 for c in IssueCategory})
    stats.issues_by_category.update(counts)
    return AnalysisResult(
        scan_id="t",
        analyzed_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        health_score=90,
        health_grade="A",
        stats=stats,
    )


class TestRecommendations:
    def test_one_rule_per_category(self):
        assert {rule.category for rule in RULES} == set(IssueCategory)

    def test_no_issues_no_recommendations(self):
        assert generate_recommendations(analysis_with({})) == []

    def test_sorted_high_to_low(self):
        recs = generate_recommendations(
            analysis_with({"duplicate": 2, "orphan": 1, "security": 3, "large-media": 1})
        )
        assert [r.priority for r in recs] == [Priority.HIGH, Priority.HIGH, Priority.MEDIUM, Priority.LOW]
        assert recs[0].title == "Fix Security Vulnerabilities"
        assert recs[1].title == "Optimize Large Media Files"

    def test_counts_fill_description(self):
        (rec,) = generate_recommendations(analysis_with({"broken-link": 4}))
        assert rec.affected_items == 4
        assert rec.description.startswith("4 broken references found")

    def test_sample_scan_recommendations(self, sample_scan):
        recs = generate_recommendations(analyze_scan(sample_scan))
        assert [r.title for r in recs] == [
            "Fix Security Vulnerabilities",
            "Repair Broken Links",
            "Optimize Large Media Files",
            "Remove Unused Templates",
            "Remove Unused Renderings",
            "Clean Up Empty Folders",
        ]


class TestFilterIssues:
    issues = [
        Issue(Severity.CRITICAL, IssueCategory.SECURITY, "a", "d"),
        Issue(Severity.WARNING, IssueCategory.SECURITY, "b", "d"),
        Issue(Severity.WARNING, IssueCategory.BROKEN_LINK, "c", "d"),
    ]

    def test_no_filters(self):
        assert filter_issues(self.issues) == self.issues

    def test_by_category_string(self):
        assert [i.title for i in filter_issues(self.issues, category="security")] == ["a", "b"]

    def test_by_category_and_severity(self):
        found = filter_issues(self.issues, category=IssueCategory.SECURITY, severity="warning")
        assert [i.title for i in found] == ["b"]

    def test_unknown_value_rejected(self):
        with pytest.raises(ValueError):
            filter_issues(self.issues, category="spam")


class TestSummary:
    def test_summary_sections(self, sample_scan):
        report = generate_report(
            analyze_scan(sample_scan),
            source_name="sample",
            instance_url="https://cms.example.com",
            scan_duration=1.25,
        )
        summary = generate_summary(report)

        assert summary.startswith("# Content X-Ray Report")
        assert "**Source:** sample" in summary
        assert "**Instance:** https://cms.example.com" in summary
        assert "**Duration:** 1.2s" in summary or "**Duration:** 1.3s" in summary
        assert "## Health Score: 95/100 (A)" in summary
        assert "- Total Items: 7" in summary
        assert "- Critical: 1" in summary
        assert "- Warning: 2" in summary
        assert "- Info: 3" in summary
        assert "- [HIGH] **Fix Security Vulnerabilities** - 1 items" in summary

    def test_top_five_recommendations_only(self, sample_scan):
        summary = generate_summary(generate_report(analyze_scan(sample_scan)))
        assert summary.count("- [") == 5
        assert "Clean Up Empty Folders" not in summary

    def test_summary_is_deterministic(self, sample_scan):
        report = generate_report(analyze_scan(sample_scan), source_name="sample")
        assert generate_summary(report) == generate_summary(report)

    def test_report_copies_issues(self, sample_scan):
        analysis = analyze_scan(sample_scan)
        report = generate_report(analysis)
        report.issues.clear()
        assert len(analysis.issues) == 6

    def test_no_instance_line_without_url(self):
        report = generate_report(analysis_with({}))
        summary = generate_summary(report)
        assert "**Instance:**" not in summary
        assert "### Top Recommendations" not in summary
        assert "**Source:** unknown" in summary
