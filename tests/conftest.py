"""Pytest configuration for the gocons test suite."""

import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT_DIR = Path(__file__).parent.parent

sys.path.insert(0, str(ROOT_DIR))


@pytest.fixture
def go_file(tmp_path: Path) -> Callable[[str], Path]:
    """Return a factory that writes Go source to a file under tmp_path."""

    def write(text: str, name: str = "store.go") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return write
