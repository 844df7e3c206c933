"""Shared pytest fixtures for cinelut tests."""
import json
from pathlib import Path
from typing import Any, Callable, Dict, Union

import pytest

from cinelut.config import LUTConfig
from cinelut.utils.logging import LogConfig, configure_logging


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def fresh_logging():
    """Give every test its own log handlers.

    Handlers bind to the ``sys.stderr`` of the moment they are created, which
    pytest swaps between tests.
    """
    configure_logging(LogConfig())
    yield


# ============================================================================
# Config file fixtures
# ============================================================================

@pytest.fixture
def config_dir(tmp_path) -> Path:
    """Empty ``configs`` directory under ``tmp_path``."""
    path = tmp_path / "configs"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path) -> Path:
    """Output directory path (not created)."""
    return tmp_path / "output"


@pytest.fixture
def write_config(config_dir) -> Callable[..., Path]:
    """Factory writing a JSON config file under ``config_dir``.

    ``data`` may be a dict (serialized as JSON) or raw text.
    """
    def _write(name: str, data: Union[Dict[str, Any], str, None]) -> Path:
        path = config_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def small_config() -> LUTConfig:
    """Size-2 config with no look."""
    return LUTConfig(size=2, look="none", exposure_offset=1.0, output="small.cube")


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch) -> Path:
    """Run with an empty home directory and ``tmp_path`` as the cwd.

    Keeps settings files on the test machine out of CLI tests.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return home
