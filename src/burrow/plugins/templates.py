"""HTML templates and layouts via kida.

Registers ``.html`` as a document extension.  Every ``.html`` source and
``#layout.html`` is rendered as a kida template with::

    content   output of the previous compile step ("" for sources)
    params    the route's parameter bindings
    route     the Route being built
    extras    route metadata (e.g. front_matter)
    site      the Site
    <name>    each parameter by name, e.g. {{ slug }}

Templates may include or extend files from the route directory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from burrow.compiler.target import CompileTarget
    from burrow.site import Site


class TemplatePlugin:
    """Render ``.html`` files as kida templates."""

    name = "templates"

    def __init__(self, extensions: tuple[str, ...] = (".html",), *, autoescape: bool = False) -> None:
        self.extensions = extensions
        self.autoescape = autoescape

    def register(self, site: Site) -> None:
        from kida import Environment, FileSystemLoader

        env = Environment(
            loader=FileSystemLoader(str(site.config.routes_path)),
            autoescape=self.autoescape,
        )

        def compile_template(target: CompileTarget) -> str:
            context: dict[str, Any] = dict(target.params)
            context.update(
                content=target.content,
                params=dict(target.params),
                route=target.route,
                extras=dict(target.route.extras),
                site=site,
            )
            return env.from_string(target.text).render(**context)

        for extension in self.extensions:
            site.add_compiler(extension, compile_template)
