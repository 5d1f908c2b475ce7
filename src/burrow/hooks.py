"""Hook pipeline: named, typed extension points.

A ``Hook`` is a tagged channel carrying one payload type.  Listeners are
registered on a ``HookRegistry`` and folded over the payload in
registration order: each listener receives the previous listener's
return value and returns the next one.

Every listener is handed its own shallow copy of the running payload, so a
listener that mutates a list or record in place cannot leak that mutation
to other listeners except through its return value.

Built-in channels::

    BEFORE_COLLECT   Path -> Path                     route dir, before scanning
    AFTER_COLLECT    list[Route] -> list[Route]       the collected route set
    BEFORE_COMPILE   CompileTarget -> CompileTarget   one compile step
    AFTER_COMPILE    str -> str                       one compiled rendering
    BEFORE_WRITE     WriteTarget -> WriteTarget       destination + content
    BEFORE_COPY      CopyTarget -> CopyTarget         destination + source
"""

from __future__ import annotations

import copy
import threading
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from burrow._types import Listener
    from burrow.compiler.target import CompileTarget
    from burrow.routing.route import Route
    from burrow.writer import CopyTarget, WriteTarget


class Hook[T, U]:
    """A named extension point accepting ``T`` and producing ``U``.

    Hooks compare by identity, so two channels with the same name are
    still distinct.

    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Hook({self.name!r})"


BEFORE_COLLECT: Hook[Path, Path] = Hook("before_collect")
AFTER_COLLECT: Hook[list[Route], list[Route]] = Hook("after_collect")
BEFORE_COMPILE: Hook[CompileTarget, CompileTarget] = Hook("before_compile")
AFTER_COMPILE: Hook[str, str] = Hook("after_compile")
BEFORE_WRITE: Hook[WriteTarget, WriteTarget] = Hook("before_write")
BEFORE_COPY: Hook[CopyTarget, CopyTarget] = Hook("before_copy")


class HookRegistry:
    """Ordered listener lists per hook, with fold dispatch.

    Thread-safe: the listener map is protected by a lock.  Dispatch works
    on a snapshot, so listeners may subscribe or unsubscribe while a
    dispatch is in flight without affecting it.

    """

    def __init__(self) -> None:
        self._listeners: dict[Hook[Any, Any], dict[str, Listener]] = {}
        self._owners: dict[str, Hook[Any, Any]] = {}
        self._lock = threading.Lock()

    def subscribe[T, U](self, hook: Hook[T, U], listener: Callable[[T], U]) -> str:
        """Register *listener* on *hook* and return its subscription id.

        Subscribing the same callable twice registers it twice.

        """
        if not callable(listener):
            msg = f"Listener for {hook!r} must be callable, got {type(listener).__name__}"
            raise TypeError(msg)
        subscription_id = uuid.uuid4().hex
        with self._lock:
            self._listeners.setdefault(hook, {})[subscription_id] = listener
            self._owners[subscription_id] = hook
        return subscription_id

    def on[T, U](self, hook: Hook[T, U]) -> Callable[[Callable[[T], U]], Callable[[T], U]]:
        """Decorator form of :meth:`subscribe`."""

        def decorator(listener: Callable[[T], U]) -> Callable[[T], U]:
            self.subscribe(hook, listener)
            return listener

        return decorator

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a listener.  Returns False if the id is unknown."""
        with self._lock:
            hook = self._owners.pop(subscription_id, None)
            if hook is None:
                return False
            listeners = self._listeners[hook]
            del listeners[subscription_id]
            if not listeners:
                del self._listeners[hook]
            return True

    def listeners(self, hook: Hook[Any, Any]) -> tuple[Listener, ...]:
        """Snapshot of the listeners registered on *hook*, in order."""
        with self._lock:
            return tuple(self._listeners.get(hook, {}).values())

    def dispatch[T, U](self, hook: Hook[T, U], value: T) -> U:
        """Fold *value* through every listener of *hook*.

        Returns *value* unchanged when nothing is subscribed.

        """
        result: Any = value
        for listener in self.listeners(hook):
            result = listener(copy.copy(result))
        return result
