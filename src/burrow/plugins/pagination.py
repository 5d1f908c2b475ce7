"""Pagination over document routes.

Registers ``site.paginator``.  A ``#param.py`` handler uses it to turn a
directory of documents into page numbers, and the page template asks for
the routes on its page::

    # routes/blog/page/#[page]/#param.py
    def params(previous, site):
        return site.paginator.params("posts", "blog/posts", per_page=10)

    {# routes/blog/page/#[page]/index.html #}
    {% for post in site.paginator.page("posts", page) %} ... {% end %}

Collecting the routes from inside a handler re-enters that handler; the
paginator collects with ``ignore_circular_dependency=True`` so the
re-entrant branch resolves to nothing instead of failing.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from burrow._errors import ConfigError
from burrow.hooks import BEFORE_COLLECT

if TYPE_CHECKING:
    from burrow.routing.route import Route
    from burrow.site import Site


class Paginator:
    """Chunks document routes under a directory into numbered pages.

    Page lists are cached per key.  When a collection of the site starts
    they are marked stale, not dropped: :meth:`page` keeps serving the old
    lists until :meth:`params` has rebuilt that key, and the new lists then
    replace the old ones in one step.  Pages rendered on other threads
    during a refresh always find their key.

    """

    def __init__(self, site: Site) -> None:
        self._site = site
        self._chunks: dict[str, list[list[Route]]] = {}
        self._stale: set[str] = set()
        self._routes: list[Route] | None = None
        # Depth of the collects this paginator started, per thread
        self._local = threading.local()
        # Never held while collecting: the collector has its own lock
        self._lock = threading.Lock()

    def params(
        self,
        key: str,
        base_dir: str | Path,
        per_page: int = 20,
        filter_by: Callable[[Route], bool] | None = None,
        order_by: Callable[[Route], Any] | None = None,
    ) -> list[str]:
        """Page numbers ``"1"``, ``"2"``, ... for the documents in *base_dir*.

        Always returns at least ``["1"]``.  *base_dir* is relative to the
        route directory unless absolute.  *order_by* is a sort key; the
        default orders by route path, descending.

        Raises:
            ConfigError: If *per_page* is not positive or *base_dir* does
                not exist.

        """
        if per_page < 1:
            msg = f"per_page must be a positive integer, got {per_page}"
            raise ConfigError(msg)
        with self._lock:
            chunks = self._chunks.get(key)
            fresh = chunks is not None and key not in self._stale
        if not fresh:
            base = self._base_path(base_dir)
            chunks = _chunk(self._all_routes(), base, per_page, filter_by, order_by)
            with self._lock:
                self._chunks[key] = chunks
                self._stale.discard(key)
        return [str(n) for n in range(1, max(len(chunks), 1) + 1)]

    def page(self, key: str, number: int | str) -> list[Route]:
        """Document routes on page *number* (1-based) of *key*.

        Pages past the end are empty.

        Raises:
            ConfigError: If *key* was never registered through :meth:`params`.

        """
        chunks = self._lookup(key)
        index = max(int(number), 1) - 1
        return list(chunks[index]) if index < len(chunks) else []

    def pages(self, key: str) -> int:
        """Number of pages for *key* (at least 1)."""
        return max(len(self._lookup(key)), 1)

    def invalidate(self) -> None:
        """Mark every cached key stale and forget the collected routes."""
        with self._lock:
            self._stale.update(self._chunks)
            self._routes = None

    def _lookup(self, key: str) -> list[list[Route]]:
        with self._lock:
            chunks = self._chunks.get(key)
        if chunks is None:
            msg = f"Unknown pagination key {key!r}; call paginator.params({key!r}, ...) first"
            raise ConfigError(msg)
        return chunks

    def _on_collect(self, route_dir: Path) -> Path:
        # Only collections started elsewhere make the cache stale
        if not getattr(self._local, "depth", 0):
            self.invalidate()
        return route_dir

    def _base_path(self, base_dir: str | Path) -> Path:
        base = Path(base_dir)
        if not base.is_absolute():
            base = self._site.config.routes_path / base
        if not base.is_dir():
            msg = f"Pagination base directory does not exist: {base}"
            raise ConfigError(msg)
        return base.resolve()

    def _all_routes(self) -> list[Route]:
        with self._lock:
            routes = self._routes
        if routes is not None:
            return routes
        self._local.depth = getattr(self._local, "depth", 0) + 1
        try:
            routes = self._site.collect(ignore_circular_dependency=True)
        finally:
            self._local.depth -= 1
        with self._lock:
            self._routes = routes
        return routes


def _chunk(
    routes: list[Route],
    base: Path,
    per_page: int,
    filter_by: Callable[[Route], bool] | None,
    order_by: Callable[[Route], Any] | None,
) -> list[list[Route]]:
    documents = [
        route for route in routes
        if route.is_document and route.source_path.is_relative_to(base)
    ]
    if filter_by is not None:
        documents = [route for route in documents if filter_by(route)]
    if order_by is None:
        documents.sort(key=lambda route: route.route_path, reverse=True)
    else:
        documents.sort(key=order_by)
    return [documents[i:i + per_page] for i in range(0, len(documents), per_page)]


class PaginationPlugin:
    """Attach a :class:`Paginator` to the site as ``site.paginator``."""

    name = "pagination"

    def register(self, site: Site) -> None:
        paginator = Paginator(site)
        site.paginator = paginator
        site.hooks.subscribe(BEFORE_COLLECT, paginator._on_collect)
