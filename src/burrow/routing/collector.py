"""Route collector: resolve a route directory into a flat list of routes.

Every regular file under the route directory yields one or more routes::

    routes/about.md                  -> /about/index.html      (document)
    routes/index.html                -> /index.html            (document)
    routes/assets/app.js             -> /assets/app.js         (static)
    routes/blog/#[slug]/index.md     -> /blog/hello/index.html, ...

Files whose name starts with ``#`` are never routes: ``#layout<ext>``
wraps documents in its directory and below, and ``#param.py`` supplies the
values of the ``#[name]`` directory it sits in::

    routes/blog/#[slug]/#param.py    -> values for the #[slug] segment

A handler defines ``params(previous)`` (or ``params(previous, site)``) and
returns the values for its segment given the bindings of the segments
above it.  Handlers may call ``site.collect()`` themselves; results are
memoized per handler and bindings for the duration of the outermost
``collect()``, and a handler that re-enters itself with the same bindings
is reported as a circular dependency.
"""

from __future__ import annotations

import hashlib
import importlib.util
import inspect
import json
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Any

from burrow._errors import (
    BurrowError,
    CircularDependencyError,
    ConfigError,
    DuplicateRouteError,
)
from burrow.hooks import AFTER_COLLECT, BEFORE_COLLECT
from burrow.routing.route import Route

if TYPE_CHECKING:
    from burrow.compiler.compiler import DocumentCompilers
    from burrow.hooks import HookRegistry

# Name of the per-directory parameter handler file
HANDLER_FILENAME = "#param.py"

# Stem of layout files; the extension picks the compiler
LAYOUT_STEM = "#layout"

# Prefix marking files that are never routes themselves
_RESERVED_PREFIX = "#"

_SKIP_DIRS: frozenset[str] = frozenset({"__pycache__"})


# ---------------------------------------------------------------------------
# Resolution session
# ---------------------------------------------------------------------------


class ResolutionSession:
    """State shared by one outermost ``collect()`` and its nested calls.

    Attributes:
        memo: Handler results keyed by :meth:`key`.
        in_progress: Keys whose handler is currently running.
        modules: Handler modules loaded during this session, by path.

    """

    __slots__ = ("_ignore_flags", "in_progress", "memo", "modules")

    def __init__(self) -> None:
        self.memo: dict[str, tuple[str, ...]] = {}
        self.in_progress: set[str] = set()
        self.modules: dict[Path, ModuleType] = {}
        self._ignore_flags: list[bool] = []

    @staticmethod
    def key(handler_path: Path, previous: Mapping[str, str]) -> str:
        """Stable digest of a handler path and its incoming bindings."""
        payload = json.dumps([str(handler_path), [list(item) for item in previous.items()]])
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    @property
    def depth(self) -> int:
        """Number of ``collect()`` calls currently active."""
        return len(self._ignore_flags)

    @property
    def ignore_cycles(self) -> bool:
        """True when any active ``collect()`` asked to ignore cycles."""
        return any(self._ignore_flags)

    def enter(self, ignore_circular_dependency: bool) -> None:
        self._ignore_flags.append(ignore_circular_dependency)

    def leave(self) -> None:
        self._ignore_flags.pop()


# ---------------------------------------------------------------------------
# Collector
# ---------------------------------------------------------------------------


class RouteCollector:
    """Scans a route directory and expands dynamic segments.

    Args:
        compilers: Registry deciding which files are documents and which
            layout extensions exist.
        hooks: Registry receiving ``BEFORE_COLLECT`` and ``AFTER_COLLECT``.
        context: Object passed to two-argument handlers (the owning Site).

    """

    def __init__(
        self,
        compilers: DocumentCompilers,
        hooks: HookRegistry,
        *,
        context: object | None = None,
    ) -> None:
        self._compilers = compilers
        self._hooks = hooks
        self.context = context
        # Re-entrant: handlers call back into collect() on the same thread
        self._lock = threading.RLock()
        self._session: ResolutionSession | None = None

    def collect(
        self,
        route_dir: Path,
        ignore_circular_dependency: bool = False,
    ) -> list[Route]:
        """Resolve *route_dir* into routes, in traversal order.

        Raises:
            ConfigError: If the directory is missing, a handler is missing
                or malformed, or a parameter name repeats in one path.
            DuplicateRouteError: If two sources produce the same route path.
            CircularDependencyError: If a handler re-enters itself with the
                same bindings and no active call ignores cycles.

        """
        with self._lock:
            outermost = self._session is None
            if outermost:
                self._session = ResolutionSession()
            session = self._session
            session.enter(ignore_circular_dependency)
            try:
                return self._collect(Path(route_dir), session)
            finally:
                session.leave()
                if outermost:
                    self._session = None

    def _collect(self, route_dir: Path, session: ResolutionSession) -> list[Route]:
        route_dir = self._hooks.dispatch(BEFORE_COLLECT, route_dir)
        if not isinstance(route_dir, Path) or not route_dir.is_dir():
            msg = f"Route directory does not exist: {route_dir}"
            raise ConfigError(msg)
        route_dir = route_dir.resolve()

        routes: list[Route] = []
        seen: dict[str, Path] = {}

        for source in _iter_sources(route_dir):
            for route in self._routes_for(source, route_dir, session):
                if route.route_path in seen:
                    msg = (
                        f"Duplicate route path {route.route_path!r}: "
                        f"defined in {seen[route.route_path]} and {source}"
                    )
                    raise DuplicateRouteError(msg)
                seen[route.route_path] = source
                routes.append(route)

        return self._hooks.dispatch(AFTER_COLLECT, routes)

    def _routes_for(
        self,
        source: Path,
        route_dir: Path,
        session: ResolutionSession,
    ) -> list[Route]:
        segments = list(source.relative_to(route_dir).parts)
        extension = self._compilers.match(source.name)
        if extension is None:
            # Static files are copied as-is: no expansion, no layouts
            return [Route(route_path="/" + "/".join(segments), source_path=source)]

        segments[-1] = segments[-1][: -len(extension)]
        parameters = _parameter_positions(segments, source)
        layouts = self._layouts_for(source, route_dir)

        routes: list[Route] = []
        for bindings in self._expand(segments, parameters, route_dir, session):
            resolved = list(segments)
            for index, name in parameters:
                resolved[index] = bindings[name]
            routes.append(Route(
                route_path=_document_path(resolved),
                source_path=source,
                is_document=True,
                parameters=bindings,
                layouts=layouts,
            ))
        return routes

    def _expand(
        self,
        segments: list[str],
        parameters: list[tuple[int, str]],
        route_dir: Path,
        session: ResolutionSession,
    ) -> list[dict[str, str]]:
        """Cross product of handler values, outermost segment first."""
        bindings: list[dict[str, str]] = [{}]
        for index, name in parameters:
            # The handler sits inside the directory of its own segment
            handler = route_dir.joinpath(*segments[: index + 1], HANDLER_FILENAME)
            expanded: list[dict[str, str]] = []
            for previous in bindings:
                for value in self._resolve(handler, previous, session):
                    expanded.append({**previous, name: value})
            bindings = expanded
        return bindings

    def _layouts_for(self, source: Path, route_dir: Path) -> tuple[Path, ...]:
        """Layout files from the source's directory up to *route_dir*."""
        extensions = self._compilers.extensions
        layouts: list[Path] = []
        directory = source.parent
        while True:
            for ext in extensions:
                candidate = directory / f"{LAYOUT_STEM}{ext}"
                if candidate.is_file():
                    layouts.append(candidate)
                    break
            if directory == route_dir or directory == directory.parent:
                break
            directory = directory.parent
        return tuple(layouts)

    # -- handlers --

    def _resolve(
        self,
        handler: Path,
        previous: dict[str, str],
        session: ResolutionSession,
    ) -> tuple[str, ...]:
        key = session.key(handler, previous)
        cached = session.memo.get(key)
        if cached is not None:
            return cached

        if key in session.in_progress:
            if session.ignore_cycles:
                return ()
            msg = (
                f"Circular dependency: {handler} was re-entered with the same "
                f"parameters {dict(previous)!r} while still resolving them. "
                f"Pass ignore_circular_dependency=True to the nested collect()."
            )
            raise CircularDependencyError(msg)

        session.in_progress.add(key)
        try:
            values = self._call_handler(handler, previous, session)
        finally:
            session.in_progress.discard(key)

        session.memo[key] = values
        return values

    def _call_handler(
        self,
        handler: Path,
        previous: dict[str, str],
        session: ResolutionSession,
    ) -> tuple[str, ...]:
        module = session.modules.get(handler)
        if module is None:
            module = _load_handler(handler)
            session.modules[handler] = module

        params = getattr(module, "params", None)
        if params is None or not callable(params):
            msg = f"Parameter handler {handler} must define a callable 'params(previous)'"
            raise ConfigError(msg)

        try:
            if _accepts_context(params):
                result = params(dict(previous), self.context)
            else:
                result = params(dict(previous))
        except BurrowError:
            raise
        except Exception as exc:
            msg = f"Parameter handler {handler} failed: {exc}"
            raise ConfigError(msg) from exc

        return _validate_values(result, handler)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _iter_sources(route_dir: Path) -> Iterator[Path]:
    """Regular files under *route_dir* that produce routes, sorted."""
    for path in sorted(route_dir.rglob("*")):
        if not path.is_file():
            continue
        if path.name.startswith(_RESERVED_PREFIX):
            continue
        if _SKIP_DIRS.intersection(path.relative_to(route_dir).parts):
            continue
        yield path


def _parameter_name(segment: str) -> str | None:
    """``"#[slug]"`` -> ``"slug"``; any other segment -> None."""
    if segment.startswith("#[") and segment.endswith("]") and len(segment) > 3:
        return segment[2:-1]
    return None


def _parameter_positions(segments: list[str], source: Path) -> list[tuple[int, str]]:
    """Ordered ``(segment index, name)`` pairs of the dynamic segments."""
    positions: list[tuple[int, str]] = []
    seen: set[str] = set()
    for index, segment in enumerate(segments):
        name = _parameter_name(segment)
        if name is None:
            continue
        if name in seen:
            msg = f"Route parameter name #[{name}] from {source} is already in use"
            raise ConfigError(msg)
        seen.add(name)
        positions.append((index, name))
    return positions


def _document_path(segments: list[str]) -> str:
    """``["blog", "post"]`` -> ``/blog/post/index.html``."""
    path = "/" + "/".join(segments)
    if segments[-1] == "index":
        return path + ".html"
    return path + "/index.html"


def _load_handler(handler: Path) -> ModuleType:
    """Import a handler file as a fresh module without touching ``sys.path``."""
    if not handler.is_file():
        msg = f"Missing parameter handler: {handler}"
        raise ConfigError(msg)

    digest = hashlib.sha1(str(handler).encode("utf-8"), usedforsecurity=False).hexdigest()
    module_name = f"burrow_handlers.h{digest[:16]}"
    spec = importlib.util.spec_from_file_location(module_name, handler)
    if spec is None or spec.loader is None:
        msg = f"Cannot load parameter handler: {handler}"
        raise ConfigError(msg)

    try:
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"Failed to load parameter handler {handler}: {exc}"
        raise ConfigError(msg) from exc

    return module


def _accepts_context(func: Any) -> bool:
    """True if *func* can be called with ``(previous, context)``."""
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    try:
        sig.bind(None, None)
    except TypeError:
        return False
    return True


def _validate_values(result: object, handler: Path) -> tuple[str, ...]:
    """Check a handler result is an ordered collection of path-safe strings."""
    if isinstance(result, (str, bytes, Mapping, set, frozenset)) or not isinstance(
        result, (list, tuple, Iterator)
    ):
        msg = (
            f"Parameter handler {handler} must return a list of strings, "
            f"got {type(result).__name__}"
        )
        raise ConfigError(msg)

    values = tuple(result)
    for value in values:
        if not isinstance(value, str) or not value:
            msg = f"Parameter handler {handler} returned an invalid value {value!r}: expected a non-empty str"
            raise ConfigError(msg)
        if "/" in value:
            msg = f"Parameter handler {handler} returned {value!r}: values may not contain '/'"
            raise ConfigError(msg)
    return values
