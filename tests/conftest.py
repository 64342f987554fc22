"""
Shared pytest configuration and fixtures for the ranked-ballot tabulator.

This module provides common test fixtures and utilities used across
all test modules.
"""

import json
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def sample_candidates():
    """Provide a three-candidate list in caller order."""
    return ["A", "B", "C"]


@pytest.fixture
def majority_after_transfer_ballots():
    """A=3, B=2, C=1; C's ballot transfers to A for a 4-2 win."""
    return [["A", "B", "C"]] * 3 + [["B", "C", "A"]] * 2 + [["C", "A", "B"]]


@pytest.fixture
def cyclic_ballots():
    """Rock-paper-scissors preferences: A>B, B>C, C>A, each 2-1."""
    return [["A", "B", "C"], ["B", "C", "A"], ["C", "A", "B"]]


@pytest.fixture
def temp_ballot_file():
    """Write ballot file content to a temporary path, removed afterwards."""
    paths = []

    def _write(content, suffix=".json"):
        fd, path = tempfile.mkstemp(suffix=suffix)
        with os.fdopen(fd, "w") as f:
            if isinstance(content, str):
                f.write(content)
            else:
                json.dump(content, f)
        paths.append(path)
        return path

    yield _write

    for path in paths:
        if os.path.exists(path):
            os.unlink(path)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (scripts and files)",
    )
    config.addinivalue_line(
        "markers",
        "golden: marks tests as golden dataset validation (hand-computed results)",
    )
    config.addinivalue_line(
        "markers", "invariant: marks tests as mathematical invariant validation"
    )
    config.addinivalue_line(
        "markers", "smoke: marks tests as smoke tests (basic functionality check)"
    )
