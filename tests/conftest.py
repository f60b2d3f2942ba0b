import logging

import pytest

from optimistic_json.json_parser import OptimisticJSONParser


def pytest_configure(config):
    logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def strict_parser():
    """Provides a fresh OptimisticJSONParser instance in strict mode."""
    return OptimisticJSONParser(strict=True)


@pytest.fixture
def lenient_parser():
    """Provides a fresh OptimisticJSONParser instance in non-strict mode."""
    return OptimisticJSONParser(strict=False)


@pytest.fixture
def json_file(tmp_path):
    """Writes the given text to a temporary file and returns its path."""

    def _write(text: str):
        path = tmp_path / "input.json"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
