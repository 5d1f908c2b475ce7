"""File watcher for ``burrow build --watch``.

Groups filesystem changes under the project root into batches and tells
the caller which batches need a rebuild:

- Route file changed (documents, statics, layouts, handlers) -> rebuild
- Config file changed -> reload config, then rebuild
- Anything else, including the build output itself -> ignored
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

from burrow.config_loader import CONFIG_FILENAMES

if TYPE_CHECKING:
    from collections.abc import Iterator

    from burrow.config import BurrowConfig


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.
        category: What kind of file changed.

    """

    path: Path
    kind: Literal["created", "modified", "deleted"]
    category: Literal["route", "config"]


_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def categorize_change(path: Path, config: BurrowConfig) -> Literal["route", "config"] | None:
    """Determine the category of a changed file based on its location.

    Returns None if the change should not trigger a rebuild.

    """
    try:
        rel = path.relative_to(config.root)
    except ValueError:
        return None

    parts = rel.parts
    if not parts:
        return None

    if path == config.build_path or config.build_path in path.parents:
        return None

    if len(parts) == 1 and parts[0] in CONFIG_FILENAMES:
        return "config"

    if path.is_relative_to(config.routes_path):
        if "__pycache__" in parts:
            return None
        return "route"

    return None


class BuildWatcher:
    """Yields batches of relevant changes until stopped.

    Uses watchfiles for efficient filesystem monitoring.  ``stop()`` may be
    called from another thread or a signal handler.

    """

    def __init__(self, config: BurrowConfig) -> None:
        self._config = config
        self._stop_event = threading.Event()

    @property
    def config(self) -> BurrowConfig:
        return self._config

    def reconfigure(self, config: BurrowConfig) -> None:
        """Use *config* to categorize later changes (after a config edit)."""
        self._config = config

    def stop(self) -> None:
        self._stop_event.set()

    def batches(self) -> Iterator[tuple[ChangeEvent, ...]]:
        """Blocking iterator of non-empty change batches."""
        from watchfiles import watch

        for raw_changes in watch(
            self._config.root,
            stop_event=self._stop_event,
            debounce=300,
            step=100,
        ):
            events: list[ChangeEvent] = []
            for change_type, path_str in sorted(raw_changes, key=lambda c: c[1]):
                path = Path(path_str)
                category = categorize_change(path, self._config)
                if category is None:
                    continue
                kind = _CHANGE_KIND_MAP.get(change_type, "modified")
                events.append(ChangeEvent(path=path, kind=kind, category=category))
            if events:
                yield tuple(events)
