"""
Shared test fixtures for the vector library tests.
"""

import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


def write_corpus(path: Path, lines, header=None) -> Path:
    """Write a .vec corpus; header defaults to '<len(lines)> <vector size>'."""
    if header is None:
        size = len(lines[0].split()) - 1 if lines else 0
        header = f"{len(lines)} {size}"
    path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def small_corpus(tmp_path):
    """The two-word corpus from the format description."""
    return write_corpus(tmp_path / "small.vec", [
        "cat 0.1 0.2 -0.1",
        "dog -0.2 0.3 0.1",
    ])


@pytest.fixture
def five_word_corpus(tmp_path):
    return write_corpus(tmp_path / "five.vec", [
        "alpha 0.5 -0.5",
        "beta 0.25 0.75",
        "gamma -1.0 0.0",
        "delta 0.0 0.125",
        "epsilon 2.0 -4.0",
    ])


@pytest.fixture
def corpus(tmp_path):
    """Factory: corpus(lines, header=None, name='corpus.vec') -> Path."""
    def make(lines, header=None, name="corpus.vec"):
        return write_corpus(tmp_path / name, lines, header)
    return make
