"""
Pytest configuration and fixtures for dirmirror tests.
"""

import logging
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
import structlog

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    path = temp_dir / "source"
    path.mkdir()
    return path


@pytest.fixture
def replica_dir(temp_dir: Path) -> Path:
    return temp_dir / "replica"


@pytest.fixture
def sync_logger() -> "SyncLogger":
    """A sync logger whose entries tests can inspect."""
    from dirmirror.core.logging import SyncLogger

    return SyncLogger()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Drop handlers a test configured so later tests start clean."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in list(root.handlers):
        # Leave pytest's own capture handlers in place
        if not isinstance(handler, logging.FileHandler) and type(handler) is not logging.StreamHandler:
            continue
        root.removeHandler(handler)
        handler.close()


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str]], None]:
    """Create files (and their parent directories) under a root."""

    def _write(root: Path, files: dict[str, str]) -> None:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

    return _write


@pytest.fixture
def read_tree() -> Callable[[Path], dict[str, str | None]]:
    """Map every relative path under a root to file content (None for dirs)."""

    def _read(root: Path) -> dict[str, str | None]:
        tree: dict[str, str | None] = {}
        for path in sorted(root.rglob("*")):
            relative = path.relative_to(root).as_posix()
            tree[relative] = path.read_text() if path.is_file() else None
        return tree

    return _read


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
