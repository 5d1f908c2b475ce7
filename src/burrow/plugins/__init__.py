"""Bundled plugins.

A plugin is any object with a ``name`` and a ``register(site)`` method.
Presets are addressed by name in ``burrow.yaml``::

    plugins: [templates, markdown, frontmatter, pagination]

``templates`` and ``markdown`` import their engines lazily, so the core
works without them installed.
"""

from burrow.plugins.frontmatter import FrontMatterPlugin, split_front_matter
from burrow.plugins.markdown import MarkdownPlugin
from burrow.plugins.pagination import PaginationPlugin, Paginator
from burrow.plugins.templates import TemplatePlugin

__all__ = [
    "FrontMatterPlugin",
    "MarkdownPlugin",
    "PaginationPlugin",
    "Paginator",
    "TemplatePlugin",
    "split_front_matter",
]
