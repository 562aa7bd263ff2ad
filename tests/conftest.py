import sys
from pathlib import Path
import typing as t

import pytest
from loguru import logger

# Ensure project root is on path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.config.registry import ConfigRegistry


@pytest.fixture(scope="session")
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def reset_logger():
    """Give every test a clean loguru handler set (the CLI reconfigures it)."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    yield
    logger.remove()


@pytest.fixture()
def log_messages() -> t.List[str]:
    """Collect formatted log lines as 'LEVEL|message'."""
    messages: t.List[str] = []
    logger.add(lambda msg: messages.append(f"{msg.record['level'].name}|{msg.record['message']}"),
               level="DEBUG")
    return messages


@pytest.fixture()
def home(tmp_path: Path, monkeypatch) -> Path:
    # Keep the default search paths away from the real home directory
    d = tmp_path / "home"
    d.mkdir()
    monkeypatch.setenv("HOME", str(d))
    monkeypatch.delenv("UTIL_CONFIG_FILE", raising=False)
    return d


@pytest.fixture()
def registry() -> ConfigRegistry:
    # No environment, no search paths: only what the test registers
    return ConfigRegistry(search_paths=[], environ={})


@pytest.fixture()
def initialized(registry: ConfigRegistry) -> ConfigRegistry:
    registry.init()
    return registry


@pytest.fixture()
def write_config(tmp_path: Path) -> t.Callable[..., Path]:
    """Write a key=value config file and return its path."""
    def _write(text: str, name: str = "util.conf") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
