"""Compile target: the input bundle handed to a document compiler."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from burrow.routing.route import Route


@dataclass(frozen=True, slots=True)
class CompileTarget:
    """One step of a document's compile chain.

    The first target of a route is its source file with empty ``content``;
    each layout target after it carries the previous step's output in
    ``content``.

    Attributes:
        path: File being compiled (source or layout).
        text: Raw file content.  ``BEFORE_COMPILE`` listeners may rewrite it.
        route: The route being compiled.
        params: The route's parameter bindings.
        content: Rendered output of the previous step.

    """

    path: Path
    text: str
    route: Route
    params: Mapping[str, str]
    content: str = ""

    @property
    def is_layout(self) -> bool:
        """True for every step after the route's own source file."""
        return self.path != self.route.source_path

    def with_text(self, text: str) -> CompileTarget:
        return replace(self, text=text)

    def with_content(self, content: str) -> CompileTarget:
        return replace(self, content=content)
