"""Document compilers and layout composition.

``DocumentCompilers`` maps file extensions to callables turning a
``CompileTarget`` into text.  ``Compiler`` runs a document route through
its chain: the source file first, then each layout from innermost to
outermost, feeding every step's output into the next step as ``content``.

    routes/#layout.html        <- outermost, runs last
    routes/blog/#layout.html   <- wraps the post
    routes/blog/post.md        <- compiled first
"""

from __future__ import annotations

import inspect
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from burrow._errors import BurrowError, CompileError, ConfigError
from burrow.compiler.target import CompileTarget
from burrow.hooks import AFTER_COMPILE, BEFORE_COMPILE

if TYPE_CHECKING:
    from burrow._types import DocumentCompiler
    from burrow.hooks import HookRegistry
    from burrow.routing.route import Route


def normalize_extension(extension: str) -> str:
    """``"MD"`` -> ``".md"``, ``".blade.php"`` -> ``".blade.php"``."""
    extension = extension.strip().lower()
    if not extension.lstrip("."):
        msg = f"Invalid document extension: {extension!r}"
        raise ConfigError(msg)
    return extension if extension.startswith(".") else "." + extension


class DocumentCompilers:
    """Ordered registry of document compilers keyed by extension.

    Registration order is preserved; it decides which ``#layout<ext>`` file
    wins when a directory holds several.

    """

    def __init__(self) -> None:
        self._compilers: dict[str, DocumentCompiler] = {}
        self._lock = threading.Lock()

    def register(self, extension: str, compiler: DocumentCompiler) -> None:
        """Register *compiler* for *extension*, replacing any previous one.

        Raises:
            ConfigError: If *compiler* is not a callable taking exactly one
                positional argument.

        """
        ext = normalize_extension(extension)
        _validate_compiler(compiler, ext)
        with self._lock:
            self._compilers[ext] = compiler

    def get(self, extension: str) -> DocumentCompiler | None:
        with self._lock:
            return self._compilers.get(extension)

    @property
    def extensions(self) -> tuple[str, ...]:
        """Registered extensions in registration order."""
        with self._lock:
            return tuple(self._compilers)

    def match(self, name: str) -> str | None:
        """Return the longest registered extension *name* ends with.

        The name must have something before the extension: a bare
        ``.md`` file is not a document.

        """
        lowered = name.lower()
        best: str | None = None
        for ext in self.extensions:
            if len(lowered) > len(ext) and lowered.endswith(ext):
                if best is None or len(ext) > len(best):
                    best = ext
        return best

    def __contains__(self, extension: object) -> bool:
        return isinstance(extension, str) and extension in self.extensions

    def __len__(self) -> int:
        return len(self.extensions)


def _validate_compiler(compiler: object, extension: str) -> None:
    """Raise ConfigError unless *compiler* can be called with one argument."""
    if not callable(compiler):
        msg = f"Compiler for {extension!r} must be callable, got {type(compiler).__name__}"
        raise ConfigError(msg)
    try:
        sig = inspect.signature(compiler)
    except (TypeError, ValueError):
        # Some builtins expose no signature; trust them
        return
    try:
        sig.bind(None)
    except TypeError as exc:
        msg = (
            f"Compiler for {extension!r} must accept exactly one positional "
            f"argument (the CompileTarget): {exc}"
        )
        raise ConfigError(msg) from exc


class Compiler:
    """Compiles document routes through their layout chains."""

    def __init__(self, compilers: DocumentCompilers, hooks: HookRegistry) -> None:
        self._compilers = compilers
        self._hooks = hooks

    def compile(self, route: Route) -> str:
        """Render *route* through its source file and layouts.

        Raises:
            ValueError: If *route* is not a document.
            CompileError: If a file cannot be read or a compiler fails.

        """
        if not route.is_document:
            msg = f"Route {route.route_path} is not a document and cannot be compiled"
            raise ValueError(msg)

        content = ""
        for path in route.compile_targets:
            target = CompileTarget(
                path=path,
                text=_read_text(path),
                route=route,
                params=route.parameters,
                content=content,
            )
            target = self._hooks.dispatch(BEFORE_COMPILE, target)
            rendered = self._run(target)
            content = self._hooks.dispatch(AFTER_COMPILE, rendered)
        return content

    def _run(self, target: CompileTarget) -> str:
        ext = self._compilers.match(target.path.name)
        if ext is None:
            # No compiler for this file type: pass its text through
            return target.text
        compiler = self._compilers.get(ext)
        if compiler is None:
            return target.text
        try:
            result = compiler(target)
        except BurrowError:
            raise
        except Exception as exc:
            msg = f"Failed to compile {target.path}: {exc}"
            raise CompileError(msg) from exc
        if not isinstance(result, str):
            msg = (
                f"Compiler for {ext!r} returned {type(result).__name__} "
                f"instead of str while compiling {target.path}"
            )
            raise CompileError(msg)
        return result


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise CompileError(msg) from exc
