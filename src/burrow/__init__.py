"""Burrow: build a site from a directory of routes.

Every file under ``routes/`` becomes an output route.  Documents are
compiled through document compilers and wrapped in ``#layout`` files;
static files are copied.  Directories named ``#[name]`` are expanded into
one route per value returned by their ``#param.py`` handler.

Quick start::

    import burrow

    burrow.build("my-site/")      # Write every route to my-site/build
    burrow.dev("my-site/")        # Build on request, reload on change

Layout::

    my-site/
      burrow.yaml
      routes/
        #layout.html
        index.md
        assets/app.js
        blog/#[slug]/#param.py
        blog/#[slug]/index.md

"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from burrow.config import BurrowConfig
    from burrow.routing.route import Route
    from burrow.site import Site

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "BurrowConfig",
    "Route",
    "Site",
    "__version__",
    "build",
    "dev",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import burrow`` fast while providing a clean top-level API.
    """
    if name == "BurrowConfig":
        from burrow.config import BurrowConfig

        return BurrowConfig

    if name == "Site":
        from burrow.site import Site

        return Site

    if name == "Route":
        from burrow.routing.route import Route

        return Route

    if name == "build":
        from burrow.app import build

        return build

    if name == "dev":
        from burrow.app import dev

        return dev

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
