#!/usr/bin/env python3
"""Shared pytest fixtures for the jsonsource test suite."""

import pytest
import pathlib
import sys
from typing import Callable, List
from unittest.mock import patch

# Add parent directory to path for imports
sys.path.insert(0, str(pathlib.Path(__file__).parent.parent))

from jsonsource import JsonDataSource, JSONOptions
from jsonsource import codec_streams

# Import test data generator
from tests.fixtures.generate_test_data import (
    generate_json_lines,
    generate_json_array,
    generate_corrupted_json,
    generate_widening_lines,
    generate_gzip_lines,
)


# ============================================================================
# File Fixtures
# ============================================================================

@pytest.fixture
def lines_file(tmp_path) -> pathlib.Path:
    """Twenty well-formed JSON lines."""
    json_file = tmp_path / "lines.json"
    generate_json_lines(20, str(json_file))
    return json_file


@pytest.fixture
def corrupted_lines_file(tmp_path) -> pathlib.Path:
    """Thirty JSON lines, every fifth one malformed (six in total)."""
    json_file = tmp_path / "corrupted_lines.json"
    generate_json_lines(30, str(json_file), corrupt_every=5)
    return json_file


@pytest.fixture
def array_file(tmp_path) -> pathlib.Path:
    """One indented JSON document holding an array of ten objects."""
    json_file = tmp_path / "array.json"
    generate_json_array(10, str(json_file))
    return json_file


@pytest.fixture
def corrupted_json_file(tmp_path) -> pathlib.Path:
    """A JSON array document cut short and followed by garbage."""
    json_file = tmp_path / "corrupted.json"
    generate_corrupted_json(50, 2000, str(json_file))
    return json_file


@pytest.fixture
def widening_file(tmp_path) -> pathlib.Path:
    json_file = tmp_path / "widening.json"
    generate_widening_lines(9, str(json_file))
    return json_file


@pytest.fixture
def gzip_lines_file(tmp_path) -> pathlib.Path:
    json_file = tmp_path / "lines.json.gz"
    generate_gzip_lines(20, str(json_file))
    return json_file


@pytest.fixture
def example_file(tmp_path) -> pathlib.Path:
    """The two-line file whose column widens from long to string."""
    json_file = tmp_path / "example.json"
    json_file.write_text('{"a":1}\n{"a":"x"}\n')
    return json_file


# ============================================================================
# Source Fixtures
# ============================================================================

@pytest.fixture
def make_source() -> Callable[..., JsonDataSource]:
    """Build a data source from option keyword arguments."""
    def _make(**params) -> JsonDataSource:
        return JsonDataSource.create(JSONOptions(params))
    return _make


# ============================================================================
# Resource Tracking Fixtures
# ============================================================================

class CountingStream:
    """Wraps a stream and counts how often it is closed."""

    def __init__(self, stream):
        self._stream = stream
        self.close_calls = 0

    def __getattr__(self, name):
        return getattr(self._stream, name)

    def __iter__(self):
        return iter(self._stream)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self.close_calls += 1
        self._stream.close()


@pytest.fixture
def tracked_streams() -> List[CountingStream]:
    """Record every stream the readers open."""
    opened: List[CountingStream] = []
    real_open = codec_streams.open_stream

    def _open(path):
        stream = CountingStream(real_open(path))
        opened.append(stream)
        return stream

    with patch('jsonsource.codec_streams.open_stream', side_effect=_open):
        yield opened


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def clean_environment(monkeypatch):
    """Ensure a clean environment for tests."""
    for var in ['JSONSOURCE_CORRUPT_RECORD_COLUMN', 'LOG_LEVEL', 'PORT']:
        monkeypatch.delenv(var, raising=False)
    yield


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
    config.addinivalue_line("markers", "benchmark: marks benchmark tests")
