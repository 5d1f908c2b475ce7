"""Writer: the only component that touches the build directory.

Every write and copy is announced on a hook first, so listeners can
redirect the destination or rewrite the content::

    BEFORE_WRITE   WriteTarget(destination, content)
    BEFORE_COPY    CopyTarget(destination, source)
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from burrow._errors import WriteError
from burrow.hooks import BEFORE_COPY, BEFORE_WRITE

if TYPE_CHECKING:
    from burrow.hooks import HookRegistry


@dataclass(frozen=True, slots=True)
class WriteTarget:
    """A pending text write.

    Attributes:
        destination: Absolute output file path.
        content: Text to write (UTF-8).

    """

    destination: Path
    content: str

    def with_content(self, content: str) -> WriteTarget:
        return replace(self, content=content)


@dataclass(frozen=True, slots=True)
class CopyTarget:
    """A pending byte-for-byte copy.

    Attributes:
        destination: Absolute output file path.
        source: File to copy from.

    """

    destination: Path
    source: Path


class Writer:
    """Writes build output below *build_path*.

    Args:
        build_path: Output root.  Route paths map beneath it.
        hooks: Registry receiving ``BEFORE_WRITE`` and ``BEFORE_COPY``.

    """

    def __init__(self, build_path: Path, hooks: HookRegistry) -> None:
        self.build_path = build_path
        self._hooks = hooks

    def destination(self, route_path: str) -> Path:
        """``/blog/index.html`` -> ``<build_path>/blog/index.html``."""
        return self.build_path / route_path.lstrip("/")

    def clear(self) -> None:
        """Remove everything under the build directory and recreate it empty.

        Raises:
            WriteError: If the build path is a file or cannot be removed.

        """
        if self.build_path.exists() and not self.build_path.is_dir():
            msg = f"Build path {self.build_path} exists and is not a directory"
            raise WriteError(msg)
        try:
            if self.build_path.exists():
                shutil.rmtree(self.build_path)
            self.build_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot clear build directory {self.build_path}: {exc}"
            raise WriteError(msg) from exc

    def write(self, route_path: str, content: str) -> Path:
        """Write *content* for *route_path* and return the final destination.

        Raises:
            WriteError: If the file or its parent directories cannot be created.

        """
        target = WriteTarget(destination=self.destination(route_path), content=content)
        target = self._hooks.dispatch(BEFORE_WRITE, target)
        try:
            target.destination.parent.mkdir(parents=True, exist_ok=True)
            target.destination.write_text(target.content, encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {target.destination}: {exc}"
            raise WriteError(msg) from exc
        return target.destination

    def copy(self, route_path: str, source: Path) -> Path:
        """Copy *source* to *route_path* and return the final destination.

        Raises:
            WriteError: If the source cannot be read or the copy fails.

        """
        target = CopyTarget(destination=self.destination(route_path), source=source)
        target = self._hooks.dispatch(BEFORE_COPY, target)
        try:
            target.destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(target.source, target.destination)
        except OSError as exc:
            msg = f"Cannot copy {target.source} to {target.destination}: {exc}"
            raise WriteError(msg) from exc
        return target.destination
