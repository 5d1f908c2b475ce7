"""Tests for burrow.compiler: the compiler registry and layout composition."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import html_compiler, md_compiler, write

from burrow._errors import CompileError, ConfigError
from burrow.compiler.compiler import Compiler, DocumentCompilers, normalize_extension
from burrow.compiler.target import CompileTarget
from burrow.hooks import AFTER_COMPILE, BEFORE_COMPILE, HookRegistry
from burrow.routing.route import Route


@pytest.fixture
def hooks() -> HookRegistry:
    return HookRegistry()


@pytest.fixture
def compilers() -> DocumentCompilers:
    registry = DocumentCompilers()
    registry.register(".html", html_compiler)
    registry.register(".md", md_compiler)
    return registry


@pytest.fixture
def compiler(compilers: DocumentCompilers, hooks: HookRegistry) -> Compiler:
    return Compiler(compilers, hooks)


def document(source: Path, *layouts: Path, **params: str) -> Route:
    return Route(
        route_path="/doc/index.html",
        source_path=source,
        is_document=True,
        parameters=params,
        layouts=layouts,
    )


# ---------------------------------------------------------------------------
# DocumentCompilers
# ---------------------------------------------------------------------------


class TestNormalizeExtension:
    def test_adds_leading_dot(self) -> None:
        assert normalize_extension("md") == ".md"

    def test_lowercases(self) -> None:
        assert normalize_extension(".HTML") == ".html"

    def test_keeps_compound_extension(self) -> None:
        assert normalize_extension("blade.php") == ".blade.php"

    @pytest.mark.parametrize("bad", ["", ".", "  "])
    def test_rejects_empty(self, bad: str) -> None:
        with pytest.raises(ConfigError, match="Invalid document extension"):
            normalize_extension(bad)


class TestDocumentCompilers:
    def test_registration_order(self, compilers: DocumentCompilers) -> None:
        assert compilers.extensions == (".html", ".md")
        assert len(compilers) == 2
        assert ".md" in compilers
        assert ".txt" not in compilers

    def test_reregister_replaces(self, compilers: DocumentCompilers) -> None:
        compilers.register("md", html_compiler)
        assert compilers.get(".md") is html_compiler
        assert compilers.extensions == (".html", ".md")

    def test_rejects_non_callable(self) -> None:
        with pytest.raises(ConfigError, match="must be callable"):
            DocumentCompilers().register(".md", "nope")  # type: ignore[arg-type]

    def test_rejects_wrong_arity(self) -> None:
        def two(target, extra):  # type: ignore[no-untyped-def]
            return ""

        with pytest.raises(ConfigError, match="exactly one positional"):
            DocumentCompilers().register(".md", two)

    def test_rejects_zero_arguments(self) -> None:
        with pytest.raises(ConfigError):
            DocumentCompilers().register(".md", lambda: "")

    def test_match_longest_suffix(self) -> None:
        registry = DocumentCompilers()
        registry.register(".php", md_compiler)
        registry.register(".blade.php", md_compiler)
        assert registry.match("page.blade.php") == ".blade.php"
        assert registry.match("page.php") == ".php"

    def test_match_is_case_insensitive(self, compilers: DocumentCompilers) -> None:
        assert compilers.match("README.MD") == ".md"

    def test_match_needs_a_stem(self, compilers: DocumentCompilers) -> None:
        assert compilers.match(".md") is None

    def test_match_unknown(self, compilers: DocumentCompilers) -> None:
        assert compilers.match("app.js") is None


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class TestCompile:
    def test_source_only(self, compiler: Compiler, tmp_path: Path) -> None:
        source = write(tmp_path, "post.md", "hello\n")
        assert compiler.compile(document(source)) == "<p>hello</p>"

    def test_layout_chain_innermost_first(self, compiler: Compiler, tmp_path: Path) -> None:
        source = write(tmp_path, "blog/post.md", "hi")
        inner = write(tmp_path, "blog/#layout.html", "<article>{{ content }}</article>")
        outer = write(tmp_path, "#layout.html", "<body>{{ content }}</body>")

        html = compiler.compile(document(source, inner, outer))

        assert html == "<body><article><p>hi</p></article></body>"

    def test_params_reach_every_step(self, compiler: Compiler, tmp_path: Path) -> None:
        source = write(tmp_path, "page.html", "slug={{ slug }}")
        layout = write(tmp_path, "#layout.html", "[{{ slug }}] {{ content }}")

        html = compiler.compile(document(source, layout, slug="hello"))

        assert html == "[hello] slug=hello"

    def test_content_empty_for_source(self, compilers: DocumentCompilers, hooks: HookRegistry, tmp_path: Path) -> None:
        seen: list[tuple[bool, str]] = []

        def record(target: CompileTarget) -> str:
            seen.append((target.is_layout, target.content))
            return "out"

        compilers.register(".txt", record)
        source = write(tmp_path, "a.txt", "x")
        layout = write(tmp_path, "#layout.txt", "y")

        Compiler(compilers, hooks).compile(document(source, layout))

        assert seen == [(False, ""), (True, "out")]

    def test_static_route_rejected(self, compiler: Compiler, tmp_path: Path) -> None:
        route = Route(route_path="/app.js", source_path=write(tmp_path, "app.js"))
        with pytest.raises(ValueError, match="not a document"):
            compiler.compile(route)

    def test_layout_without_compiler_passes_text(self, compiler: Compiler, tmp_path: Path) -> None:
        source = write(tmp_path, "post.md", "hi")
        layout = write(tmp_path, "#layout.txt", "raw layout")
        assert compiler.compile(document(source, layout)) == "raw layout"


class TestCompileErrors:
    def test_missing_file(self, compiler: Compiler, tmp_path: Path) -> None:
        with pytest.raises(CompileError, match="Cannot read"):
            compiler.compile(document(tmp_path / "gone.md"))

    def test_compiler_exception_wrapped(self, compilers: DocumentCompilers, hooks: HookRegistry, tmp_path: Path) -> None:
        def boom(target: CompileTarget) -> str:
            raise RuntimeError("kaboom")

        compilers.register(".md", boom)
        source = write(tmp_path, "post.md", "x")

        with pytest.raises(CompileError, match="kaboom") as exc_info:
            Compiler(compilers, hooks).compile(document(source))
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_burrow_errors_propagate_unchanged(self, compilers: DocumentCompilers, hooks: HookRegistry, tmp_path: Path) -> None:
        def strict(target: CompileTarget) -> str:
            raise ConfigError("bad front matter")

        compilers.register(".md", strict)
        source = write(tmp_path, "post.md", "x")

        with pytest.raises(ConfigError, match="bad front matter"):
            Compiler(compilers, hooks).compile(document(source))

    def test_non_str_result(self, compilers: DocumentCompilers, hooks: HookRegistry, tmp_path: Path) -> None:
        compilers.register(".md", lambda target: b"bytes")
        source = write(tmp_path, "post.md", "x")

        with pytest.raises(CompileError, match="returned bytes instead of str"):
            Compiler(compilers, hooks).compile(document(source))


class TestCompileHooks:
    def test_before_compile_rewrites_text(self, compiler: Compiler, hooks: HookRegistry, tmp_path: Path) -> None:
        hooks.subscribe(BEFORE_COMPILE, lambda target: target.with_text(target.text.upper()))
        source = write(tmp_path, "post.md", "shout")

        assert compiler.compile(document(source)) == "<p>SHOUT</p>"

    def test_after_compile_runs_per_step(self, compiler: Compiler, hooks: HookRegistry, tmp_path: Path) -> None:
        hooks.subscribe(AFTER_COMPILE, lambda text: text + "!")
        source = write(tmp_path, "post.md", "a")
        layout = write(tmp_path, "#layout.html", "<{{ content }}>")

        assert compiler.compile(document(source, layout)) == "<<p>a</p>!>!"
