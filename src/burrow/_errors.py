"""Burrow error hierarchy.

All burrow-specific errors inherit from BurrowError for easy catching.
"""


class BurrowError(Exception):
    """Base error for all burrow operations."""


class ConfigError(BurrowError):
    """Invalid configuration, route tree, or parameter handler."""


class DuplicateRouteError(ConfigError):
    """Two source files resolved to the same route path."""


class CircularDependencyError(ConfigError):
    """A parameter handler re-entered itself with the same parameters."""


class CompileError(BurrowError):
    """A document could not be read or compiled."""


class WriteError(BurrowError):
    """Build output could not be written, copied, or cleared."""
