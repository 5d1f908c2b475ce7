"""Tests for burrow.banner console output."""

from __future__ import annotations

from pathlib import Path

import pytest

from burrow import __version__
from burrow.banner import print_banner, print_built, print_error, print_step
from burrow.config import BurrowConfig
from burrow.site import BuildResult, BuiltFile


@pytest.fixture
def config(tmp_path: Path) -> BurrowConfig:
    return BurrowConfig(root=tmp_path, port=9123)


class TestBanner:
    def test_build_mode(self, config: BurrowConfig, capsys: pytest.CaptureFixture[str]) -> None:
        print_banner(config, 5, mode="build", document_count=3, load_ms=12.0)
        err = capsys.readouterr().err
        assert "Burrow" in err
        assert __version__ in err
        assert "5 routes collected" in err
        assert "3 documents" in err
        assert f"output: {config.build_path}" in err
        assert "live reload" not in err

    def test_dev_mode(self, config: BurrowConfig, capsys: pytest.CaptureFixture[str]) -> None:
        print_banner(config, 1, mode="dev")
        err = capsys.readouterr().err
        assert "1 route collected" in err
        assert "live reload" in err
        assert "/__burrow/broadcast" in err
        assert "127.0.0.1:9123" in err

    def test_warnings(self, config: BurrowConfig, capsys: pytest.CaptureFixture[str]) -> None:
        print_banner(config, 0, mode="build", warnings=["no layouts found"])
        assert "no layouts found" in capsys.readouterr().err

    def test_nothing_on_stdout(self, config: BurrowConfig, capsys: pytest.CaptureFixture[str]) -> None:
        print_banner(config, 2, mode="dev")
        assert capsys.readouterr().out == ""


class TestLines:
    def test_print_step(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_step("Watching")
        assert "Watching" in capsys.readouterr().err

    def test_print_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_error("broken")
        err = capsys.readouterr().err
        assert "✗" in err
        assert "broken" in err

    def test_print_built(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        result = BuildResult(
            files=(BuiltFile("/index.html", tmp_path / "index.html", "document", 10, 1.0),),
            documents=1,
            assets=0,
            duration_ms=4.0,
            output_dir=tmp_path,
        )
        print_built(result)
        err = capsys.readouterr().err
        assert "1 document" in err
        assert "0 assets" in err
        assert str(tmp_path) in err
