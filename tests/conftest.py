"""Shared test fixtures for Content X-Ray: fake content trees and scan runners."""

import asyncio
import json
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

import pytest

from content_xray.config import ScanConfig
from content_xray.scanning.models import ScanResult
from content_xray.scanning.orchestrator import ScanOrchestrator
from content_xray.source import (
    DeepItem,
    InMemoryContentSource,
    SourceField,
    SourceItem,
    SourceMedia,
    SourcePageRendering,
    SourceRendering,
    SourceTemplate,
)

MB = 1024 * 1024

# Entity numbering used by the sample site
HOME, ABOUT, NEWS, ARTICLE, EMPTY, DATA, PROMO = 1, 2, 3, 4, 5, 6, 7
T_PAGE, T_FOLDER, T_BASE, T_UNUSED, T_PROMO = 100, 101, 102, 103, 104
M_LOGO, M_VIDEO = 200, 201
R_HERO, R_FOOTER = 300, 301
MISSING = 999


def make_guid(n: int) -> str:
    """Deterministic upper-case GUID for test entity ``n``."""
    return f"{n:08X}-0000-4000-8000-{n:012X}"


def make_braced(value) -> str:
    """Braced GUID text for an entity number or a GUID string."""
    text = make_guid(value) if isinstance(value, int) else value
    return "{" + text + "}"


@dataclass(frozen=True)
class SampleSite:
    """GUIDs of the sample site's entities."""

    home: str = make_guid(HOME)
    about: str = make_guid(ABOUT)
    news: str = make_guid(NEWS)
    article: str = make_guid(ARTICLE)
    empty: str = make_guid(EMPTY)
    data: str = make_guid(DATA)
    promo: str = make_guid(PROMO)
    t_page: str = make_guid(T_PAGE)
    t_folder: str = make_guid(T_FOLDER)
    t_base: str = make_guid(T_BASE)
    t_unused: str = make_guid(T_UNUSED)
    t_promo: str = make_guid(T_PROMO)
    m_logo: str = make_guid(M_LOGO)
    m_video: str = make_guid(M_VIDEO)
    r_hero: str = make_guid(R_HERO)
    r_footer: str = make_guid(R_FOOTER)
    missing: str = make_guid(MISSING)


def _item(n, path, template, template_name, **kwargs):
    return SourceItem(
        id=make_guid(n),
        name=path.rsplit("/", 1)[-1],
        path=path,
        template_id=make_guid(template),
        template_name=template_name,
        **kwargs,
    )


def build_sample_source() -> InMemoryContentSource:
    """A small site exercising most detectors.

    /content/home              Content Page (deep: links, hero rendering)
    /content/home/about        Content Page (deep: media reference)
    /content/home/news         Folder
    /content/home/news/article-1  Content Page (deep: Everyone write access)
    /content/home/empty        Folder without children
    /content/data              Folder
    /content/data/promo        Promo (rendering data source)
    """
    items = [
        _item(HOME, "/content/home", T_PAGE, "Content Page"),
        _item(ABOUT, "/content/home/about", T_PAGE, "Content Page"),
        _item(NEWS, "/content/home/news", T_FOLDER, "Folder"),
        _item(ARTICLE, "/content/home/news/article-1", T_PAGE, "Content Page"),
        _item(EMPTY, "/content/home/empty", T_FOLDER, "Folder"),
        _item(DATA, "/content/data", T_FOLDER, "Folder"),
        _item(PROMO, "/content/data/promo", T_PROMO, "Promo"),
    ]
    templates = [
        SourceTemplate(make_guid(T_PAGE), "Content Page", "/templates/content-page", [make_guid(T_BASE)]),
        SourceTemplate(make_guid(T_FOLDER), "Folder", "/templates/folder"),
        SourceTemplate(make_guid(T_BASE), "Base Page", "/templates/base-page"),
        SourceTemplate(make_guid(T_UNUSED), "Legacy Widget", "/templates/legacy-widget"),
        SourceTemplate(make_guid(T_PROMO), "Promo", "/templates/promo"),
    ]
    media = [
        SourceMedia(make_guid(M_LOGO), "logo", "/media/logo", size=20_000, extension="png"),
        SourceMedia(make_guid(M_VIDEO), "intro", "/media/intro", size=6 * MB, extension="mp4"),
    ]
    renderings = [
        SourceRendering(make_guid(R_HERO), "Hero", "/renderings/hero"),
        SourceRendering(make_guid(R_FOOTER), "Old Footer", "/renderings/old-footer"),
    ]
    deep = {
        make_guid(HOME): DeepItem(
            fields=[
                SourceField("Title", "Welcome", "Single-Line Text"),
                SourceField("Related", f"{make_braced(ABOUT)}|{make_braced(MISSING)}", "Multilist"),
            ],
            page_renderings=[
                SourcePageRendering("u1", make_guid(R_HERO), "main", make_guid(PROMO)),
            ],
        ),
        make_guid(ABOUT): DeepItem(
            fields=[SourceField("Image", f'<image mediaid="{make_braced(M_LOGO)}" />', "Image")],
        ),
        make_guid(ARTICLE): DeepItem(
            fields=[SourceField("Body", "<p>News</p>", "Rich Text")],
            security="ar|Everyone|pe|:write|",
        ),
    }
    return InMemoryContentSource(
        items=items,
        templates=templates,
        media=media,
        renderings=renderings,
        deep=deep,
        name="sample",
        base_url="https://cms.example.com",
    )


def scan_sync(source, **config) -> ScanResult:
    """Run a scan to completion with no request pacing."""
    config.setdefault("request_delay_ms", 0)
    orchestrator = ScanOrchestrator(source, ScanConfig(**config))
    return asyncio.run(orchestrator.scan())


def _sample_document() -> dict:
    source = build_sample_source()
    return {
        "name": source.name,
        "base_url": source.base_url,
        "items": [asdict(item) for children in source._children.values() for item in children],
        "templates": [asdict(t) for t in source._templates],
        "media": [asdict(m) for m in source._media],
        "renderings": [asdict(r) for r in source._renderings],
        "deep": {
            item_id: {
                "fields": [asdict(f) for f in deep.fields],
                "renderings": [asdict(r) for r in deep.page_renderings],
                "security": deep.security,
            }
            for item_id, deep in source._deep.items()
        },
    }


@pytest.fixture
def guid():
    return make_guid


@pytest.fixture
def braced():
    return make_braced


@pytest.fixture
def site():
    return SampleSite()


@pytest.fixture
def now():
    """Fixed "now" for stale-content checks."""
    return datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_sample_source():
    """Factory for fresh copies of the sample site."""
    return build_sample_source


@pytest.fixture
def sample_source():
    return build_sample_source()


@pytest.fixture
def run_scan():
    return scan_sync


@pytest.fixture
def sample_scan():
    """Tier 2 scan of the sample site."""
    return scan_sync(build_sample_source(), tier=2)


@pytest.fixture
def flat_source():
    """Factory for a flat tree of ``count`` pages under /content."""

    def build(count: int, name: str = "flat") -> InMemoryContentSource:
        items = [
            SourceItem(
                id=make_guid(10_000 + i),
                name=f"page-{i}",
                path=f"/content/page-{i}",
                template_id=make_guid(T_PAGE),
                template_name="Content Page",
            )
            for i in range(count)
        ]
        return InMemoryContentSource(items=items, name=name)

    return build


@pytest.fixture
def sample_document():
    """The sample site as a JSON export document."""
    return _sample_document()


@pytest.fixture
def sample_json(tmp_path):
    """Path to the sample site written as a JSON export."""
    path = tmp_path / "sample.json"
    path.write_text(json.dumps(_sample_document()), encoding="utf-8")
    return path
