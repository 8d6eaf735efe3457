from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pagepack.config import AppConfig


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("pagepack")
    logger.handlers[:] = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def src_dir(tmp_path: Path) -> Path:
    path = tmp_path / "site"
    path.mkdir()
    return path


@pytest.fixture
def dst_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture
def config(src_dir: Path, dst_dir: Path) -> AppConfig:
    return AppConfig(src_dir=src_dir, dst_dir=dst_dir)


@pytest.fixture
def write():
    def _write(path: Path, content: str | bytes) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write
