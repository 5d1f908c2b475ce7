"""Shared type definitions for burrow."""

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from burrow.compiler.target import CompileTarget

# Turns one compile target into rendered text
type DocumentCompiler = Callable[[CompileTarget], str]

# Hook listener: receives a payload copy, returns the next payload
type Listener = Callable[[Any], Any]
