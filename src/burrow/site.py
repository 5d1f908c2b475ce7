"""Site: the object tying configuration, hooks, plugins and the pipeline.

A ``Site`` owns one instance of every pipeline stage::

    hooks      HookRegistry        extension points shared by all stages
    compilers  DocumentCompilers   extension -> compiler callable
    collector  RouteCollector      route dir -> list[Route]
    compiler   Compiler            document Route -> text
    writer     Writer              text / files -> build dir

Plugins register compilers and hook listeners on it.  Parameter handlers
receive the site as their second argument, so they can collect routes
themselves (pagination, cross-references).
"""

from __future__ import annotations

import importlib
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from burrow._errors import ConfigError
from burrow.compiler.compiler import Compiler, DocumentCompilers
from burrow.hooks import HookRegistry
from burrow.observability.events import RouteBuilt, RoutesCollected, now_ns
from burrow.observability.log import EventLog
from burrow.routing.collector import RouteCollector
from burrow.writer import Writer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from burrow._types import DocumentCompiler
    from burrow.config import BurrowConfig
    from burrow.plugins.pagination import Paginator
    from burrow.routing.route import Route

# Short names accepted in place of ``module:attr`` plugin references
PLUGIN_PRESETS: dict[str, str] = {
    "frontmatter": "burrow.plugins.frontmatter:FrontMatterPlugin",
    "markdown": "burrow.plugins.markdown:MarkdownPlugin",
    "pagination": "burrow.plugins.pagination:PaginationPlugin",
    "templates": "burrow.plugins.templates:TemplatePlugin",
}


@dataclass(frozen=True, slots=True)
class BuiltFile:
    """Record of a single file produced by a build.

    Attributes:
        route_path: Route the file belongs to.
        output_path: Absolute path of the written file.
        kind: ``"document"`` when compiled, ``"static"`` when copied.
        size_bytes: Size of the output file in bytes.
        duration_ms: Time taken to produce this file.

    """

    route_path: str
    output_path: Path
    kind: Literal["document", "static"]
    size_bytes: int
    duration_ms: float


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Aggregate result of a full build.

    Attributes:
        files: All files written, in route order.
        documents: Number of compiled documents.
        assets: Number of copied static files.
        duration_ms: Total wall-clock time for the build.
        output_dir: Absolute path to the build directory.

    """

    files: tuple[BuiltFile, ...]
    documents: int
    assets: int
    duration_ms: float
    output_dir: Path


class Site:
    """A burrow project: configuration plus its pipeline.

    Args:
        config: Resolved configuration.
        hooks: Registry to use; a fresh one by default.
        plugins: Plugins to register.  Defaults to ``config.plugins``.
        log: Event log receiving build events; a fresh one by default.

    """

    def __init__(
        self,
        config: BurrowConfig,
        *,
        hooks: HookRegistry | None = None,
        plugins: Iterable[object] | None = None,
        log: EventLog | None = None,
    ) -> None:
        self.config = config
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.log = log if log is not None else EventLog()
        self.compilers = DocumentCompilers()
        self.collector = RouteCollector(self.compilers, self.hooks, context=self)
        self.compiler = Compiler(self.compilers, self.hooks)
        self.writer = Writer(config.build_path, self.hooks)
        # Set by the pagination plugin
        self.paginator: Paginator | None = None
        self._plugins: dict[str, object] = {}

        for plugin in config.plugins if plugins is None else plugins:
            self.add_plugin(plugin)

    # -- registration --

    def add_compiler(self, extension: str, compiler: DocumentCompiler) -> Site:
        """Register a document compiler for *extension*."""
        self.compilers.register(extension, compiler)
        return self

    def add_plugin(self, plugin: object) -> Site:
        """Register a plugin object, preset name, or ``module:attr`` reference.

        Raises:
            ConfigError: If the plugin cannot be resolved, is registered
                twice, or its dependencies are not installed.

        """
        instance = _resolve_plugin(plugin)
        name = str(getattr(instance, "name", type(instance).__name__))
        if name in self._plugins:
            msg = f"Plugin {name!r} is already registered"
            raise ConfigError(msg)
        try:
            instance.register(self)  # type: ignore[attr-defined]
        except ImportError as exc:
            msg = (
                f"Plugin {name!r} needs a library that is not installed ({exc.name or exc}). "
                f"Install the matching extra, e.g. 'pip install burrow[{name}]'."
            )
            raise ConfigError(msg) from exc
        self._plugins[name] = instance
        return self

    @property
    def plugins(self) -> tuple[str, ...]:
        """Names of registered plugins, in registration order."""
        return tuple(self._plugins)

    # -- pipeline --

    def collect(self, ignore_circular_dependency: bool = False) -> list[Route]:
        """Resolve the route directory.  See :meth:`RouteCollector.collect`."""
        start = time.perf_counter()
        routes = self.collector.collect(self.config.routes_path, ignore_circular_dependency)
        self.log.append(RoutesCollected(
            route_dir=str(self.config.routes_path),
            route_count=len(routes),
            document_count=sum(1 for r in routes if r.is_document),
            duration_ms=(time.perf_counter() - start) * 1000,
            timestamp_ns=now_ns(),
        ))
        return routes

    def build(self) -> BuildResult:
        """Collect, clear the build directory, and write every route.

        Raises:
            ConfigError: If no routes are found or the build directory
                overlaps the project.
            CompileError: If a document fails to compile.
            WriteError: If output cannot be written.

        """
        start = time.perf_counter()
        routes = self.collect()
        if not routes:
            msg = f"No routes found in {self.config.routes_path}"
            raise ConfigError(msg)

        self._check_build_path()
        self.writer.clear()

        files = tuple(self.build_route(route) for route in routes)
        documents = sum(1 for f in files if f.kind == "document")

        return BuildResult(
            files=files,
            documents=documents,
            assets=len(files) - documents,
            duration_ms=(time.perf_counter() - start) * 1000,
            output_dir=self.writer.build_path,
        )

    def build_route(self, route: Route) -> BuiltFile:
        """Compile and write a document, or copy a static file."""
        start = time.perf_counter()
        if route.is_document:
            output = self.writer.write(route.route_path, self.compiler.compile(route))
        else:
            output = self.writer.copy(route.route_path, route.source_path)
        elapsed = (time.perf_counter() - start) * 1000
        kind: Literal["document", "static"] = "document" if route.is_document else "static"

        self.log.append(RouteBuilt(
            route_path=route.route_path,
            kind=kind,
            source=str(route.source_path),
            target=str(output),
            duration_ms=elapsed,
            timestamp_ns=now_ns(),
        ))
        return BuiltFile(
            route_path=route.route_path,
            output_path=output,
            kind=kind,
            size_bytes=output.stat().st_size,
            duration_ms=elapsed,
        )

    def _check_build_path(self) -> None:
        """Refuse build directories that would wipe or feed the sources."""
        build = self.writer.build_path.resolve()
        routes = self.config.routes_path.resolve()
        for protected in (self.config.root, routes):
            if build == protected or build in protected.parents:
                msg = f"Build directory {build} would overwrite {protected}"
                raise ConfigError(msg)
        if routes in build.parents:
            msg = f"Build directory {build} must not live inside the route directory {routes}"
            raise ConfigError(msg)


def _resolve_plugin(plugin: object) -> Any:
    """Turn a preset name or ``module:attr`` string into a plugin instance."""
    if not isinstance(plugin, str):
        instance = plugin
    else:
        reference = PLUGIN_PRESETS.get(plugin, plugin)
        module_name, sep, attr = reference.partition(":")
        if not sep or not module_name or not attr:
            msg = (
                f"Unknown plugin {plugin!r}. Use one of {sorted(PLUGIN_PRESETS)} "
                f"or a 'module:attr' reference."
            )
            raise ConfigError(msg)
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            msg = f"Cannot import plugin module {module_name!r}: {exc}"
            raise ConfigError(msg) from exc
        target = getattr(module, attr, None)
        if target is None:
            msg = f"Plugin module {module_name!r} has no attribute {attr!r}"
            raise ConfigError(msg)
        instance = target() if isinstance(target, type) else target

    if not callable(getattr(instance, "register", None)):
        msg = f"Plugin {instance!r} must define register(site)"
        raise ConfigError(msg)
    return instance
