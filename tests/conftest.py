"""Shared test fixtures for jobsync."""

import json
import logging

import pytest
from jobsync.core.config import JobSyncConfig
from jobsync.scheduler.job import Job


@pytest.fixture
def config():
    """Create a default config without loading from disk."""
    return JobSyncConfig()


@pytest.fixture
def store_path(tmp_path):
    """Path of a job store inside a temporary home (file not created)."""
    return tmp_path / "home" / ".openclaw" / "cron" / "jobs.json"


@pytest.fixture
def workspace(tmp_path):
    """An existing, empty workspace directory."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def write_store(store_path):
    """Write a store file from a dict (as JSON) or a str (verbatim)."""

    def _write(content):
        store_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            store_path.write_text(content, encoding="utf-8")
        else:
            store_path.write_text(json.dumps(content, indent=2), encoding="utf-8")
        return store_path

    return _write


@pytest.fixture
def make_job():
    """Build a minimal Job with a fixed timestamp."""

    def _make(key, name, **kwargs):
        kwargs.setdefault("created_at_ms", 1_700_000_000_000)
        return Job(key=key, name=name, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers setup_logging() attached during a test."""
    yield
    logger = logging.getLogger("jobsync")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
