"""Tests for the templates and markdown plugins on their real engines."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import handler_source, write

from burrow.config import BurrowConfig
from burrow.plugins.markdown import MarkdownPlugin
from burrow.plugins.templates import TemplatePlugin
from burrow.site import Site


def build_site(project: Path, *plugins: object) -> Site:
    return Site(BurrowConfig(root=project), plugins=plugins)


class TestMarkdownPlugin:
    def test_registers_md(self, project: Path) -> None:
        pytest.importorskip("patitas")
        site = build_site(project, MarkdownPlugin())
        assert site.compilers.extensions == (".md",)

    def test_renders_html(self, project: Path, routes: Path) -> None:
        pytest.importorskip("patitas")
        write(routes, "index.md", "# Title\n\nSome *text*.\n")

        build_site(project, MarkdownPlugin()).build()

        html = (project / "build/index.html").read_text()
        assert "<h1" in html
        assert "Title" in html
        assert "<em>text</em>" in html

    def test_extra_extensions(self, project: Path) -> None:
        pytest.importorskip("patitas")
        site = build_site(project, MarkdownPlugin(extensions=(".md", ".markdown")))
        assert site.compilers.extensions == (".md", ".markdown")


class TestTemplatePlugin:
    def test_params_and_layouts(self, project: Path, routes: Path) -> None:
        pytest.importorskip("kida")
        write(routes, "#layout.html", "<main>{{ content }}</main>")
        write(routes, "blog/#[slug]/#param.py", handler_source(["first"]))
        write(routes, "blog/#[slug]/index.html", "<h1>{{ slug }}</h1><p>{{ params.slug }}</p>")

        build_site(project, TemplatePlugin()).build()

        html = (project / "build/blog/first/index.html").read_text()
        assert html == "<main><h1>first</h1><p>first</p></main>"

    def test_route_in_context(self, project: Path, routes: Path) -> None:
        pytest.importorskip("kida")
        write(routes, "about.html", "{{ route.route_path }}")

        build_site(project, TemplatePlugin()).build()

        assert (project / "build/about/index.html").read_text() == "/about/index.html"

    def test_markdown_inside_template_layout(self, project: Path, routes: Path) -> None:
        pytest.importorskip("kida")
        pytest.importorskip("patitas")
        write(routes, "#layout.html", "<body>{{ content }}</body>")
        write(routes, "post.md", "hello")

        build_site(project, TemplatePlugin(), MarkdownPlugin()).build()

        html = (project / "build/post/index.html").read_text()
        assert html.startswith("<body><p>hello</p>")
        assert html.endswith("</body>")

    def test_loops_over_paginated_routes(self, project: Path, routes: Path) -> None:
        pytest.importorskip("kida")
        write(routes, "posts/one.html", "one")
        write(routes, "posts/two.html", "two")
        write(
            routes, "list/#[page]/#param.py",
            "def params(previous, site):\n"
            "    return site.paginator.params('posts', 'posts', per_page=10)\n",
        )
        write(
            routes, "list/#[page]/index.html",
            "{% for post in site.paginator.page('posts', page) %}[{{ post.route_path }}]{% end %}",
        )

        build_site(project, TemplatePlugin(), "pagination").build()

        html = (project / "build/list/1/index.html").read_text()
        assert html == "[/posts/two/index.html][/posts/one/index.html]"
