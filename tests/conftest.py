"""Pytest configuration for path setup, markers and shared receivers."""

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parent.parent))


def pytest_addoption(parser):
    parser.addoption(
        "--runslow", action="store_true", default=False, help="run tests marked as slow"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="need --runslow to run slow tests")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@dataclass
class Document:
    """Small receiver with the fields the tests mutate."""

    title: str = "untitled"
    body: str = ""
    tags: list = field(default_factory=list)
    views: int = 0
    published: bool = False


@pytest.fixture
def doc() -> Document:
    return Document()
