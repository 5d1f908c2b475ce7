"""YAML front matter for documents.

A document may open with a YAML block::

    ---
    title: Hello
    tags: [intro]
    ---
    # Body starts here

After collection the parsed mapping is attached to each document route as
``route.extras["front_matter"]``.  The block is stripped from the text
before compiling and, in case a compiler passed it through, from the
output after compiling.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import yaml

from burrow._errors import ConfigError
from burrow.hooks import AFTER_COLLECT, AFTER_COMPILE, BEFORE_COMPILE

if TYPE_CHECKING:
    from burrow.compiler.target import CompileTarget
    from burrow.routing.route import Route
    from burrow.site import Site

FRONT_MATTER_RE = re.compile(r"\A---\r?\n(.*?)\r?\n---\r?\n", re.DOTALL)


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Return ``(front_matter, body)``.  Text without a block yields ``{}``.

    Raises:
        ConfigError: If the block is not valid YAML or not a mapping.

    """
    match = FRONT_MATTER_RE.match(text)
    if match is None:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        msg = f"Invalid front matter: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Front matter must be a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return data, text[match.end():]


def strip_front_matter(text: str) -> str:
    return FRONT_MATTER_RE.sub("", text, count=1)


class FrontMatterPlugin:
    """Parse front matter into route extras and strip it from output."""

    name = "frontmatter"

    def register(self, site: Site) -> None:
        site.hooks.subscribe(AFTER_COLLECT, _attach_front_matter)
        site.hooks.subscribe(BEFORE_COMPILE, _strip_before_compile)
        site.hooks.subscribe(AFTER_COMPILE, strip_front_matter)


def _attach_front_matter(routes: list[Route]) -> list[Route]:
    attached: list[Route] = []
    for route in routes:
        if route.is_document:
            try:
                text = route.source_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                msg = f"Cannot read front matter of {route.source_path}: {exc}"
                raise ConfigError(msg) from exc
            try:
                front_matter, _ = split_front_matter(text)
            except ConfigError as exc:
                msg = f"{route.source_path}: {exc}"
                raise ConfigError(msg) from exc
            route = route.with_extras(front_matter=front_matter)
        attached.append(route)
    return attached


def _strip_before_compile(target: CompileTarget) -> CompileTarget:
    return target.with_text(strip_front_matter(target.text))
