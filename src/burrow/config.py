"""Burrow configuration.

BurrowConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class BurrowConfig:
    """Configuration for a Burrow site.

    Attributes:
        root: Path to the project root (contains routes/ and burrow.yaml).
              Always resolved to an absolute path on construction.
        routes_dir: Directory holding route files, relative to root.
        build_dir: Output directory for builds.  Relative paths resolve
            against root.
        host: Bind address for the dev server.
        port: Bind port for the dev server.
        plugins: Plugin names or ``module:attr`` references registered on
            the site, in order.
        reload_interval: Seconds between live-reload checks per connection.

    """

    root: Path = field(default_factory=Path.cwd)
    routes_dir: str = "routes"
    build_dir: Path = field(default_factory=lambda: Path("build"))
    host: str = "127.0.0.1"
    port: int = 8080
    plugins: tuple[str, ...] = ("templates", "markdown")
    reload_interval: float = 0.5

    def __post_init__(self) -> None:
        # Resolve root to absolute so route and build paths compare cleanly
        # against the absolute paths produced while scanning.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def routes_path(self) -> Path:
        """Absolute path to the route directory."""
        return self.root / self.routes_dir

    @property
    def build_path(self) -> Path:
        """Absolute path to the build output directory."""
        if self.build_dir.is_absolute():
            return self.build_dir
        return self.root / self.build_dir
