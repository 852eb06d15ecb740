"""Tests for the Config system."""

import os
from pathlib import Path

import pytest
from jobsync.core.config import JobSyncConfig, _convert_value, _deep_merge, _substitute_env_vars
from jobsync.core.errors import ConfigError

NOWHERE = {
    "project_path": Path("/nonexistent/jobsync.toml"),
    "user_path": Path("/nonexistent/config.toml"),
}


def test_default_config():
    """Default config has sensible values."""
    config = JobSyncConfig()

    assert config.store.path == "~/.openclaw/cron/jobs.json"
    assert config.store.reference_name == "openclaw-cron-jobs.json"
    assert config.store.indent == 2
    assert config.agent.label == "Jane"
    assert config.sync.profile == "core"
    assert config.sync.force is False


def test_load_with_overrides():
    """Explicit overrides take highest precedence."""
    config = JobSyncConfig.load(
        overrides={"store": {"path": "/tmp/jobs.json"}, "agent": {"label": "Friday"}},
        **NOWHERE,
    )

    assert config.store.path == "/tmp/jobs.json"
    assert config.agent.label == "Friday"
    # Defaults still work for non-overridden values
    assert config.sync.profile == "core"


def test_env_var_loading(monkeypatch):
    """JOBSYNC_* environment variables are loaded."""
    monkeypatch.setenv("JOBSYNC_STORE_PATH", "/srv/cron/jobs.json")
    monkeypatch.setenv("JOBSYNC_AGENT_LABEL", "Max")
    monkeypatch.setenv("JOBSYNC_PROFILE", "trader")
    monkeypatch.setenv("JOBSYNC_FORCE", "yes")

    config = JobSyncConfig.load(**NOWHERE)

    assert config.store.path == "/srv/cron/jobs.json"
    assert config.agent.label == "Max"
    assert config.sync.profile == "trader"
    assert config.sync.force is True


@pytest.mark.parametrize("label", ["1", "007", "true", "no"])
def test_env_string_fields_not_coerced(monkeypatch, label):
    """Numeric or boolean-looking text stays text for string fields."""
    monkeypatch.setenv("JOBSYNC_AGENT_LABEL", label)
    monkeypatch.setenv("JOBSYNC_PROFILE", "0")
    monkeypatch.setenv("JOBSYNC_FORCE", "1")

    config = JobSyncConfig.load(**NOWHERE)

    assert config.agent.label == label
    assert config.sync.profile == "0"
    assert config.sync.force is True


def test_toml_layers(tmp_path, monkeypatch):
    """Project toml beats user toml; env beats both."""
    user = tmp_path / "config.toml"
    user.write_text('[agent]\nlabel = "User"\n[sync]\nprofile = "trader"\n')
    project = tmp_path / "jobsync.toml"
    project.write_text('[agent]\nlabel = "Project"\n')

    config = JobSyncConfig.load(project_path=project, user_path=user)
    assert config.agent.label == "Project"
    assert config.sync.profile == "trader"

    monkeypatch.setenv("JOBSYNC_AGENT_LABEL", "Env")
    assert JobSyncConfig.load(project_path=project, user_path=user).agent.label == "Env"


def test_bad_toml_raises_config_error(tmp_path):
    bad = tmp_path / "jobsync.toml"
    bad.write_text("[agent\nlabel = ")
    with pytest.raises(ConfigError, match="Failed to load config"):
        JobSyncConfig.load(project_path=bad, user_path=tmp_path / "none.toml")


def test_invalid_value_raises_config_error():
    with pytest.raises(ConfigError, match="Invalid configuration"):
        JobSyncConfig.load(overrides={"store": {"indent": "wide"}}, **NOWHERE)


def test_env_var_substitution():
    """${VAR} in config values gets replaced with env var values."""
    data = {"key": "${HOME}/something", "nested": {"path": "${JOBSYNC_TEST_DIR}/jobs.json"}}

    os.environ["JOBSYNC_TEST_DIR"] = "/data"
    _substitute_env_vars(data)

    assert "something" in data["key"]
    assert data["nested"]["path"] == "/data/jobs.json"

    del os.environ["JOBSYNC_TEST_DIR"]


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}, "e": 5}
    override = {"b": {"c": 20, "f": 6}, "g": 7}

    _deep_merge(base, override)

    assert base == {"a": 1, "b": {"c": 20, "d": 3, "f": 6}, "e": 5, "g": 7}


def test_convert_value():
    assert _convert_value("true") is True
    assert _convert_value("false") is False
    assert _convert_value("42") == 42
    assert _convert_value("hello") == "hello"


def test_get_store_path_expands_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = JobSyncConfig()
    assert config.get_store_path() == tmp_path / ".openclaw" / "cron" / "jobs.json"


def test_get_workspace():
    workspace = JobSyncConfig().get_workspace()
    assert workspace.is_absolute()
