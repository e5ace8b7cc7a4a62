"""
Shared pytest fixtures for adaptnum tests.
"""

import logging
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def test_output_root() -> Path:
    """
    Returns the root test_output directory. Created once per test session.
    Files here persist after tests complete for easy inspection.
    """
    output_dir = Path(__file__).parent.parent / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def test_output_dir(request, test_output_root) -> Path:
    """
    Returns a directory for the current test to write output files.
    Directory structure: test_output/<module_name>/<test_name>/
    """
    module_name = request.module.__name__.split(".")[-1]
    test_name = request.node.name

    test_dir = test_output_root / module_name / test_name
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


class Recorder:
    """Callable wrapper that remembers every argument it was called with."""

    def __init__(self, func):
        self.func = func
        self.args = []

    def __call__(self, *args):
        self.args.append(args)
        return self.func(*args)

    @property
    def calls(self) -> int:
        return len(self.args)


@pytest.fixture
def recorder():
    """Factory fixture: ``recorder(f)`` wraps ``f`` and records its calls."""
    return Recorder


@pytest.fixture(autouse=True)
def reset_adaptnum_logging():
    """Reset the adaptnum logger to its library default around each test."""
    logger = logging.getLogger("adaptnum")

    def _reset():
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            if not isinstance(handler, logging.NullHandler):
                handler.close()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.NOTSET)

    _reset()
    yield
    _reset()
