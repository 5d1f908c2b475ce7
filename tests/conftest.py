"""Shared test fixtures for burrow."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from burrow.compiler.target import CompileTarget
from burrow.config import BurrowConfig
from burrow.site import Site


def write(root: Path, relative: str, text: str = "") -> Path:
    """Write *text* to ``root/relative``, creating parent directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def handler_source(values: list[str]) -> str:
    """Source of a ``#param.py`` returning *values*."""
    return f"def params(previous):\n    return {values!r}\n"


def html_compiler(target: CompileTarget) -> str:
    """Tiny stand-in for a template engine: ``{{ content }}`` and ``{{ <param> }}``."""
    output = target.text.replace("{{ content }}", target.content)
    for name, value in target.params.items():
        output = output.replace("{{ " + name + " }}", value)
    return output


def md_compiler(target: CompileTarget) -> str:
    """Tiny stand-in for a Markdown renderer."""
    return f"<p>{target.text.strip()}</p>"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project root with a ``routes/`` directory."""
    root = tmp_path / "project"
    (root / "routes").mkdir(parents=True)
    return root


@pytest.fixture
def routes(project: Path) -> Path:
    """The project's route directory."""
    return project / "routes"


@pytest.fixture
def make_site(project: Path) -> Callable[..., Site]:
    """Factory for a Site with the stand-in ``.html`` and ``.md`` compilers.

    Keyword arguments override BurrowConfig fields.  No plugins are
    registered unless passed explicitly.
    """

    def factory(*, plugins: tuple[object, ...] = (), **overrides: object) -> Site:
        config = BurrowConfig(root=project, **overrides)  # type: ignore[arg-type]
        site = Site(config, plugins=plugins)
        site.add_compiler(".html", html_compiler)
        site.add_compiler(".md", md_compiler)
        return site

    return factory
