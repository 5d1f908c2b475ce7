"""Route value record.

A ``Route`` is one output produced by the collector: either a static asset
copied byte for byte, or a document compiled through its layout chain.
Routes are immutable; hooks that want to annotate a route return a new one
via :meth:`Route.with_extras`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class Route:
    """A single resolved output route.

    Attributes:
        route_path: Output path from the build root, e.g.
            ``/blog/hello/index.html``.
        source_path: Absolute path of the originating file.
        is_document: True when the route is compiled rather than copied.
        parameters: Dynamic segment bindings in nesting order.  Empty for
            routes without ``#[name]`` segments.
        layouts: Layout files wrapping the document, innermost first.
        extras: Free-form metadata attached by hooks and plugins.

    """

    route_path: str
    source_path: Path
    is_document: bool = False
    parameters: Mapping[str, str] = field(default_factory=dict)
    layouts: tuple[Path, ...] = ()
    extras: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the mappings so a shared Route can't be edited through them
        if not isinstance(self.parameters, MappingProxyType):
            object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        if not isinstance(self.extras, MappingProxyType):
            object.__setattr__(self, "extras", MappingProxyType(dict(self.extras)))
        if not isinstance(self.layouts, tuple):
            object.__setattr__(self, "layouts", tuple(self.layouts))

    @property
    def compile_targets(self) -> tuple[Path, ...]:
        """Files compiled for this route: the source, then each layout."""
        return (self.source_path, *self.layouts)

    def with_extras(self, **values: Any) -> Route:
        """Return a copy with *values* merged into ``extras``."""
        return replace(self, extras={**self.extras, **values})

    def __copy__(self) -> Route:
        # Immutable: a shallow copy is the route itself
        return self
