"""Tests for jobsync/reconcile/runner.py"""
from __future__ import annotations

import json

import pytest

from jobsync.core.config import JobSyncConfig
from jobsync.core.errors import MalformedStoreError, ProfileError
from jobsync.reconcile.runner import ReconcileOptions, ReconcileResult, reconcile
from jobsync.scheduler.job import entry_key
from jobsync.scheduler.profiles import CoreJob, GATEWAY_EDIT_WARNING, profile_keys

MALFORMED = '{"version": 1, "jobs": [}'


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestFirstRun:
    def test_creates_store_and_reference(self, workspace, store_path):
        result = reconcile(workspace, store_path, ReconcileOptions(agent_label="Jane"), now=1)

        stored = read_json(store_path)
        assert stored["version"] == 1
        assert [entry_key(e) for e in stored["jobs"]] == profile_keys("core")

        reference = read_json(workspace / "openclaw-cron-jobs.json")
        assert [e["jobId"] for e in reference] == profile_keys("core")

        assert result.created == [e["name"] for e in stored["jobs"]]
        assert result.replaced == []
        assert result.total == 6
        assert result.restart_required is True
        assert result.warnings == [GATEWAY_EDIT_WARNING]
        assert result.reference_path == workspace / "openclaw-cron-jobs.json"

    def test_to_dict(self, workspace, store_path):
        summary = reconcile(workspace, store_path, now=1).to_dict()
        assert set(summary) == {"created", "replaced", "total", "restartRequired", "warnings"}
        assert summary["restartRequired"] is True


class TestRerun:
    def test_second_run_changes_nothing(self, workspace, store_path):
        reconcile(workspace, store_path, now=1)
        before = store_path.read_text()

        result = reconcile(workspace, store_path, now=2)

        assert result.created == []
        assert result.replaced == []
        assert result.restart_required is False
        assert store_path.read_text() == before

    def test_force_replaces_managed_jobs(self, workspace, store_path):
        reconcile(workspace, store_path, now=1)
        result = reconcile(workspace, store_path, ReconcileOptions(force=True), now=2)

        assert len(result.replaced) == 6
        assert result.created == []
        assert result.restart_required is True
        assert {e["createdAtMs"] for e in read_json(store_path)["jobs"]} == {2}

    def test_user_jobs_survive(self, workspace, store_path, write_store):
        user_job = {"id": "mine", "name": "Mine", "enabled": True, "note": "hand-written"}
        edited = {"jobId": CoreJob.NIGHTLY_IMPROVEMENT.value, "name": "Nightly (edited)", "enabled": False}
        write_store({"version": 1, "jobs": [user_job, edited]})

        result = reconcile(workspace, store_path, now=1)

        jobs = read_json(store_path)["jobs"]
        assert jobs[0] == user_job
        assert jobs[1] == edited
        assert len(jobs) == 7
        assert "Nightly Improvement" not in result.created
        assert result.total == 7

    def test_user_job_with_lone_surrogate_survives(self, workspace, store_path, write_store):
        write_store(r'{"version": 1, "jobs": [{"id": "user", "name": "emoji \ud83d half"}]}')

        result = reconcile(workspace, store_path, now=1)

        jobs = read_json(store_path)["jobs"]
        assert jobs[0] == {"id": "user", "name": "emoji \ud83d half"}
        assert len(jobs) == 7
        assert result.total == 7

    def test_profiles_coexist(self, workspace, store_path):
        reconcile(workspace, store_path, now=1)
        result = reconcile(workspace, store_path, ReconcileOptions(profile="trader"), now=2)

        keys = [entry_key(e) for e in read_json(store_path)["jobs"]]
        assert keys == profile_keys("core") + profile_keys("trader")
        assert result.warnings == []
        assert len(result.created) == 7


class TestMalformedStore:
    def test_fails_without_writing(self, workspace, store_path, write_store):
        write_store(MALFORMED)

        with pytest.raises(MalformedStoreError, match="Failed to parse OpenClaw cron file") as exc:
            reconcile(workspace, store_path, ReconcileOptions(force=False))

        assert str(store_path) in str(exc.value)
        assert store_path.read_text() == MALFORMED
        backups = [p for p in store_path.parent.iterdir() if p.name.startswith("jobs.json.bak-")]
        assert len(backups) == 1
        assert backups[0].read_text() == MALFORMED
        assert not (workspace / "openclaw-cron-jobs.json").exists()

    def test_force_heals_store_and_keeps_backup(self, workspace, store_path, write_store):
        write_store(MALFORMED)

        result = reconcile(workspace, store_path, ReconcileOptions(force=True), now=1)

        assert len(result.created) == 6
        assert [entry_key(e) for e in read_json(store_path)["jobs"]] == profile_keys("core")
        backups = [p for p in store_path.parent.iterdir() if p.name.startswith("jobs.json.bak-")]
        assert len(backups) == 1
        assert backups[0].read_text() == MALFORMED


class TestDryRun:
    def test_writes_nothing(self, workspace, store_path):
        result = reconcile(workspace, store_path, ReconcileOptions(dry_run=True), now=1)
        assert len(result.created) == 6
        assert result.dry_run is True
        assert result.reference_path is None
        assert not store_path.exists()
        assert not (workspace / "openclaw-cron-jobs.json").exists()

    def test_malformed_store_takes_no_backup(self, workspace, store_path, write_store):
        write_store(MALFORMED)
        with pytest.raises(MalformedStoreError) as exc:
            reconcile(workspace, store_path, ReconcileOptions(dry_run=True))
        assert exc.value.backup_path is None
        assert sorted(p.name for p in store_path.parent.iterdir()) == ["jobs.json"]


def test_unknown_profile_writes_nothing(workspace, store_path):
    with pytest.raises(ProfileError):
        reconcile(workspace, store_path, ReconcileOptions(profile="nope"))
    assert not store_path.exists()


class TestOptions:
    def test_from_config_defaults(self, config):
        options = ReconcileOptions.from_config(config)
        assert options.agent_label == "Jane"
        assert options.profile == "core"
        assert options.force is False
        assert options.reference_name == "openclaw-cron-jobs.json"

    def test_from_config_overrides_skip_none(self):
        config = JobSyncConfig(sync={"profile": "trader", "force": True})
        options = ReconcileOptions.from_config(config, profile=None, force=None, agent_label="Max")
        assert options.profile == "trader"
        assert options.force is True
        assert options.agent_label == "Max"


def test_restart_required_tracks_changes():
    assert ReconcileResult().restart_required is False
    assert ReconcileResult(created=["a"]).restart_required is True
    assert ReconcileResult(replaced=["b"]).restart_required is True
