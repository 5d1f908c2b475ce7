"""Tests for burrow.plugins.pagination."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import pytest
from conftest import write

from burrow._errors import CircularDependencyError, ConfigError
from burrow.compiler.target import CompileTarget
from burrow.hooks import BEFORE_COLLECT
from burrow.plugins.pagination import Paginator
from burrow.server.devserver import DevServer
from burrow.site import Site

SiteFactory = Callable[..., Site]

PAGE_HANDLER = """\
def params(previous, site):
    return site.paginator.params("posts", "blog/posts", per_page=2)
"""


@pytest.fixture
def blog(routes: Path) -> Path:
    for name in ("a", "b", "c"):
        write(routes, f"blog/posts/{name}.md", name)
    write(routes, "blog/posts/cover.png", "png")
    write(routes, "blog/page/#[page]/#param.py", PAGE_HANDLER)
    write(routes, "blog/page/#[page]/index.html", "page {{ page }}")
    return routes


@pytest.fixture
def site(make_site: SiteFactory, blog: Path) -> Site:
    return make_site(plugins=("pagination",))


def paginator(site: Site) -> Paginator:
    assert site.paginator is not None
    return site.paginator


def names(routes: list) -> list[str]:  # type: ignore[type-arg]
    return [r.source_path.stem for r in routes]


class TestPaginatedRoutes:
    def test_handler_expands_pages(self, site: Site) -> None:
        paths = [r.route_path for r in site.collect()]
        assert "/blog/page/1/index.html" in paths
        assert "/blog/page/2/index.html" in paths
        assert "/blog/page/3/index.html" not in paths

    def test_page_contents(self, site: Site) -> None:
        site.collect()
        assert names(paginator(site).page("posts", 1)) == ["c", "b"]
        assert names(paginator(site).page("posts", "2")) == ["a"]
        assert paginator(site).pages("posts") == 2

    def test_only_documents_counted(self, site: Site) -> None:
        site.collect()
        every = paginator(site).page("posts", 1) + paginator(site).page("posts", 2)
        assert all(r.is_document for r in every)

    def test_page_past_end_is_empty(self, site: Site) -> None:
        site.collect()
        assert paginator(site).page("posts", 9) == []

    def test_build_writes_pages(self, site: Site, project: Path) -> None:
        site.build()
        assert (project / "build/blog/page/1/index.html").read_text() == "page 1"
        assert (project / "build/blog/page/2/index.html").read_text() == "page 2"

    def test_new_collection_sees_new_posts(self, site: Site, blog: Path) -> None:
        site.collect()
        write(blog, "blog/posts/d.md", "d")
        write(blog, "blog/posts/e.md", "e")

        paths = [r.route_path for r in site.collect()]

        assert "/blog/page/3/index.html" in paths
        assert names(paginator(site).page("posts", 1)) == ["e", "d"]

    def test_direct_recollect_is_circular(self, make_site: SiteFactory, routes: Path) -> None:
        write(routes, "posts/a.md", "a")
        write(routes, "list/#[n]/#param.py", "def params(previous, site):\n    site.collect()\n    return ['1']\n")
        write(routes, "list/#[n]/index.md", "x")

        with pytest.raises(CircularDependencyError):
            make_site(plugins=("pagination",)).collect()


class TestParams:
    def test_at_least_one_page(self, make_site: SiteFactory, routes: Path) -> None:
        (routes / "empty").mkdir()
        site = make_site(plugins=("pagination",))
        assert paginator(site).params("none", "empty") == ["1"]
        assert paginator(site).page("none", 1) == []
        assert paginator(site).pages("none") == 1

    def test_filter_and_order(self, site: Site) -> None:
        pages = paginator(site).params(
            "odd", "blog/posts", per_page=5,
            filter_by=lambda r: r.source_path.stem != "b",
            order_by=lambda r: r.source_path.stem,
        )
        assert pages == ["1"]
        assert names(paginator(site).page("odd", 1)) == ["a", "c"]

    def test_absolute_base_dir(self, site: Site, blog: Path) -> None:
        assert paginator(site).params("abs", blog / "blog/posts", per_page=1) == ["1", "2", "3"]

    def test_cached_per_key(self, site: Site, blog: Path) -> None:
        paginator(site).params("posts", "blog/posts", per_page=2)
        write(blog, "blog/posts/z.md", "z")
        # Same key: cached until the next collection starts
        assert paginator(site).params("posts", "blog/posts", per_page=2) == ["1", "2"]
        paginator(site).invalidate()
        assert paginator(site).params("posts", "blog/posts", per_page=2) == ["1", "2"]
        assert names(paginator(site).page("posts", 1)) == ["z", "c"]

    def test_invalid_per_page(self, site: Site) -> None:
        with pytest.raises(ConfigError, match="per_page"):
            paginator(site).params("posts", "blog/posts", per_page=0)

    def test_missing_base_dir(self, site: Site) -> None:
        with pytest.raises(ConfigError, match="does not exist"):
            paginator(site).params("posts", "blog/nowhere")

    def test_unknown_key(self, site: Site) -> None:
        with pytest.raises(ConfigError, match="Unknown pagination key"):
            paginator(site).page("never", 1)
        with pytest.raises(ConfigError, match="Unknown pagination key"):
            paginator(site).pages("never")


# ---------------------------------------------------------------------------
# Refreshes while pages are served
# ---------------------------------------------------------------------------


class TestConcurrentRefresh:
    def test_page_rendered_during_refresh(self, site: Site) -> None:
        def render_listing(target: CompileTarget) -> str:
            posts = paginator(site).page("posts", target.params["page"])
            return ",".join(post.source_path.stem for post in posts)

        site.add_compiler(".html", render_listing)
        server = DevServer(site)
        server.start()
        assert server.respond("/blog/page/1/").body.startswith(b"c,b")

        statuses: list[int] = []

        def serve_page(route_dir: Path) -> Path:
            statuses.append(server.respond("/blog/page/1/").status)
            return route_dir

        site.hooks.subscribe(BEFORE_COLLECT, serve_page)

        # Unknown path: the server collects again before answering 404
        assert server.respond("/favicon.ico").status == 404

        assert statuses
        assert set(statuses) == {200}
        assert server.respond("/blog/page/1/").body.startswith(b"c,b")

    def test_lookups_not_blocked_while_collecting(self, site: Site) -> None:
        finished: list[bool] = []

        def look_up_from_other_thread(route_dir: Path) -> Path:
            def look_up() -> None:
                try:
                    paginator(site).pages("posts")
                except ConfigError:
                    pass
                finished.append(True)

            worker = threading.Thread(target=look_up, daemon=True)
            worker.start()
            worker.join(timeout=2)
            finished.append(not worker.is_alive())
            return route_dir

        site.hooks.subscribe(BEFORE_COLLECT, look_up_from_other_thread)

        paginator(site).params("posts", "blog/posts", per_page=2)

        assert finished
        assert all(finished)
