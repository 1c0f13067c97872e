"""Tests for XRayService: scan lifecycle, queries and error mapping."""

import asyncio

import pytest

from content_xray.config import ScanConfig, XRaySettings
from content_xray.exceptions import (
    ErrorCode,
    ScanNotFoundError,
    ScanNotReadyError,
    UnknownSourceError,
)
from content_xray.scanning.models import ScanStatus
from content_xray.service import NO_SCAN_YET, XRayService
from content_xray.source import InMemoryContentSource


class GarbageSource(InMemoryContentSource):
    async def list_children(self, path, page):
        return [None]


@pytest.fixture
def service(make_sample_source):
    settings = XRaySettings(scan=ScanConfig(request_delay_ms=0, tier=2))
    return XRayService([make_sample_source()], settings)


def complete_scan(service, source_name="sample", **overrides):
    async def run():
        started = await service.start_scan(source_name, **overrides)
        await service.wait_for_scan(started["scan_id"])
        return started["scan_id"]

    return asyncio.run(run())


class TestSources:
    def test_sources_from_iterable_keyed_by_name(self, service):
        assert service.source_names == ["sample"]

    def test_sources_from_mapping(self, make_sample_source):
        service = XRayService({"prod": make_sample_source()})
        assert service.source_names == ["prod"]

    def test_register_source(self, service):
        service.register_source(InMemoryContentSource(name="extra"))
        assert service.source_names == ["extra", "sample"]

    def test_unknown_source(self, service):
        with pytest.raises(UnknownSourceError) as exc_info:
            asyncio.run(service.start_scan("nope"))
        assert exc_info.value.available == ["sample"]


class TestScanLifecycle:
    def test_start_returns_scanning_immediately(self, service):
        async def run():
            started = await service.start_scan("sample")
            status = service.get_status(started["scan_id"])
            await service.wait_for_scan(started["scan_id"])
            return started, status

        started, status = asyncio.run(run())
        assert started["status"] == "scanning"
        assert started["scan_id"].startswith("xray-")
        assert status["status"] == "scanning"

    def test_completed_scan_status(self, service):
        scan_id = complete_scan(service)
        status = service.get_status(scan_id)

        assert status["status"] == "complete"
        assert status["progress"].items_scanned == 7
        assert status["progress"].errors == []

    def test_overrides_apply_to_one_scan(self, service):
        scan_id = complete_scan(service, tier=1, max_items=3)
        status = service.get_status(scan_id)
        assert status["progress"].items_scanned == 3
        assert service.settings.scan.max_items == 50000

    def test_report_before_completion_not_ready(self, service):
        async def run():
            started = await service.start_scan("sample")
            try:
                with pytest.raises(ScanNotReadyError) as exc_info:
                    service.get_report(started["scan_id"])
                return exc_info.value
            finally:
                await service.wait_for_scan(started["scan_id"])

        error = asyncio.run(run())
        assert error.status == "scanning"

    def test_unknown_scan_id(self, service):
        with pytest.raises(ScanNotFoundError):
            service.get_status("xray-0-missing")
        with pytest.raises(ScanNotFoundError):
            service.get_report("xray-0-missing")

    def test_abort_running_scan(self, make_sample_source):
        settings = XRaySettings(scan=ScanConfig(request_delay_ms=1, tier=2))
        service = XRayService([make_sample_source()], settings)

        async def run():
            started = await service.start_scan("sample")
            await asyncio.sleep(0)
            accepted = service.abort_scan(started["scan_id"])
            result = await service.wait_for_scan(started["scan_id"])
            return accepted, result

        accepted, result = asyncio.run(run())
        assert accepted is True
        assert result.status is ScanStatus.COMPLETE
        assert result.aborted
        assert service.abort_scan(result.scan_id) is False

    def test_failed_scan_reports_not_ready(self, service):
        service.register_source(GarbageSource(name="garbage"))
        scan_id = complete_scan(service, "garbage")

        assert service.get_status(scan_id)["status"] == "failed"
        with pytest.raises(ScanNotReadyError) as exc_info:
            service.get_report(scan_id)
        assert exc_info.value.status == "failed"

    def test_cancelled_task_marks_scan_failed(self, service):
        async def run():
            started = await service.start_scan("sample")
            service._scans[started["scan_id"]].task.cancel()
            return await service.wait_for_scan(started["scan_id"])

        result = asyncio.run(run())
        assert result.status is ScanStatus.FAILED
        assert result.progress.errors[-1].code is ErrorCode.XR400

    def test_list_and_forget(self, service):
        scan_id = complete_scan(service)
        listed = service.list_scans()
        assert [s["scan_id"] for s in listed] == [scan_id]
        assert listed[0]["items"] == 7

        service.forget_scan(scan_id)
        assert service.list_scans() == []
        with pytest.raises(ScanNotFoundError):
            service.get_status(scan_id)


class TestQueries:
    def test_report(self, service):
        scan_id = complete_scan(service)
        report = service.get_report(scan_id)

        assert report.scan_id == scan_id
        assert report.health_score == 95
        assert report.source_name == "sample"
        assert report.instance_url == "https://cms.example.com"
        assert len(report.issues) == 6
        assert report.recommendations[0].title == "Fix Security Vulnerabilities"

    def test_report_filters_do_not_touch_cached_analysis(self, service):
        scan_id = complete_scan(service)
        filtered = service.get_report(scan_id, category="security")
        assert [i.category.value for i in filtered.issues] == ["security"]
        # Stats and score still describe the whole scan
        assert filtered.stats.issues_by_severity["info"] == 3

        by_severity = service.get_report(scan_id, severity="info")
        assert len(by_severity.issues) == 3
        assert len(service.get_report(scan_id).issues) == 6

    def test_report_is_idempotent(self, service):
        scan_id = complete_scan(service)
        first = service.get_report(scan_id)
        second = service.get_report(scan_id)
        assert [(i.id, i.title) for i in first.issues] == [(i.id, i.title) for i in second.issues]
        assert first.health_score == second.health_score
        assert first.recommendations == second.recommendations

    def test_analysis_is_cached(self, service):
        scan_id = complete_scan(service)
        assert service.get_analysis(scan_id) is service.get_analysis(scan_id)

    def test_graph(self, service, site):
        scan_id = complete_scan(service)
        graph = service.get_graph(scan_id)
        assert graph.stats.node_count == 17

        items_only = service.get_graph(scan_id, node_types=["item"], max_nodes=5)
        assert items_only.stats.node_count == 5

        centered = service.get_graph(scan_id, center_on=site.article)
        assert centered.node(site.article) is not None

    def test_quick_health_without_scan(self, service):
        assert service.get_quick_health("sample") == NO_SCAN_YET

    def test_quick_health_after_scan(self, service):
        complete_scan(service)
        health = service.get_quick_health("sample")

        assert health["score"] == 95
        assert health["critical_issues"] == 1
        assert health["top_issue"] == "Overly permissive: article-1"
        assert health["last_scan_at"]

    def test_quick_health_unknown_source(self, service):
        with pytest.raises(UnknownSourceError):
            service.get_quick_health("nope")
