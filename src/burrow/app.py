"""Burrow entry points: ``build`` and ``dev``.

Both load configuration from the project root, construct a ``Site`` with
the configured plugins, and report through ``burrow.banner``.
"""

from __future__ import annotations

import time
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING

from burrow._errors import BurrowError
from burrow.banner import print_banner, print_built, print_error, print_step
from burrow.config_loader import load_config
from burrow.site import Site

if TYPE_CHECKING:
    from burrow.config import BurrowConfig
    from burrow.site import BuildResult


def build(root: str | Path = ".", *, watch: bool = False, **kwargs: object) -> BuildResult:
    """Build the site into its build directory.

    Args:
        root: Path to the project root.
        watch: Keep running and rebuild after every change.
        **kwargs: Override BurrowConfig fields.

    Returns:
        The result of the first build.

    """
    config = load_config(Path(root), **kwargs)
    result = _build_once(config)
    if watch:
        _watch(config, kwargs)
    return result


def dev(root: str | Path = ".", **kwargs: object) -> None:
    """Serve the site with on-demand builds and live reload.

    Output goes to a scratch directory under the system temp dir, never to
    the configured build directory.

    Args:
        root: Path to the project root.
        **kwargs: Override BurrowConfig fields.

    """
    from burrow.server.app import run
    from burrow.server.devserver import DevServer, dev_build_path

    config = load_config(Path(root), **kwargs)
    config = replace(config, build_dir=dev_build_path(config.root))
    t0 = time.perf_counter()

    site = Site(config)
    server = DevServer(site, interval=config.reload_interval)
    routes = server.start()

    load_ms = (time.perf_counter() - t0) * 1000
    print_banner(
        config, len(routes), mode="dev",
        document_count=sum(1 for r in routes if r.is_document),
        load_ms=load_ms,
    )

    run(server, config.host, config.port)


def _build_once(config: BurrowConfig) -> BuildResult:
    result = Site(config).build()
    print_banner(
        config, len(result.files), mode="build",
        document_count=result.documents,
        load_ms=result.duration_ms,
    )
    print_built(result)
    return result


def _watch(config: BurrowConfig, overrides: dict[str, object]) -> None:
    """Rebuild after each batch of route or config changes until interrupted."""
    from burrow.watcher import BuildWatcher

    watcher = BuildWatcher(config)
    print_step("Watching for changes (Ctrl+C to stop)...")
    try:
        for batch in watcher.batches():
            names = ", ".join(str(event.path.relative_to(config.root)) for event in batch)
            print_step(f"changed: {names}")
            try:
                if any(event.category == "config" for event in batch):
                    config = load_config(config.root, **overrides)
                    watcher.reconfigure(config)
                result = Site(config).build()
            except BurrowError as exc:
                # Keep watching; the next edit may fix it
                print_error(str(exc))
                continue
            print_built(result)
    except KeyboardInterrupt:
        watcher.stop()
