"""Markdown documents via patitas.

Registers ``.md`` as a document extension.  The rendered HTML of a
Markdown source becomes the ``content`` of its innermost layout.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from burrow.compiler.target import CompileTarget
    from burrow.site import Site


class MarkdownPlugin:
    """Compile ``.md`` files to HTML with patitas."""

    name = "markdown"

    def __init__(self, extensions: tuple[str, ...] = (".md",), plugins: tuple[str, ...] = ("table",)) -> None:
        self.extensions = extensions
        self.plugins = plugins

    def register(self, site: Site) -> None:
        from patitas import Markdown

        renderer = Markdown(plugins=list(self.plugins))

        def compile_markdown(target: CompileTarget) -> str:
            return renderer(target.text)

        for extension in self.extensions:
            site.add_compiler(extension, compile_markdown)
