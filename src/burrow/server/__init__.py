"""Dev server: on-demand builds and live reload.

``DevServer`` holds the request and reload logic and has no web framework
dependency.  ``burrow.server.app`` wires it to chirp and pounce.
"""

from burrow.server.devserver import DevResponse, DevServer, ReloadConnection, dev_build_path
from burrow.server.hmr import inject_reload_script

__all__ = [
    "DevResponse",
    "DevServer",
    "ReloadConnection",
    "dev_build_path",
    "inject_reload_script",
]
