"""
Pytest configuration and fixtures for testing.
"""

import os
import tempfile

import pytest

# Keep log files out of the source tree before importing app modules
os.environ.setdefault("CHATRELAY_LOG_DIR", tempfile.mkdtemp(prefix="chatrelay-logs-"))
os.environ.setdefault("CHATRELAY_CORS_ORIGINS", "http://testserver")


@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    """
    Points the NDJSON event log at a per-test directory.

    Returns:
        Path: The log directory for this test
    """
    d = tmp_path / "logs"
    monkeypatch.setenv("CHATRELAY_LOG_DIR", str(d))
    return d
