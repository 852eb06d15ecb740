"""
Store health check — is the managed job set present in the store?

Read-only: never writes the store and never takes a backup.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jobsync.core.errors import MalformedStoreError
from jobsync.scheduler.job import entry_key
from jobsync.scheduler.profiles import profile_keys
from jobsync.store.jobs_file import JobsFile


@dataclass(frozen=True)
class CheckResult:
    name: str
    status: str      # "ok" | "warn"
    message: str

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def check_store(store_path: Path, profile: str = "core") -> CheckResult:
    """Report whether every job of ``profile`` exists in the store."""
    name = f"Cron jobs ({profile})"
    expected = profile_keys(profile)
    store = JobsFile(store_path)

    if not store.exists():
        return CheckResult(name, "warn", f"Job store not initialized: {store.path}")

    try:
        document = store.load(backup=False)
    except MalformedStoreError as e:
        return CheckResult(name, "warn", f"Cannot read job store {store.path}: {e.reason}")

    present = {entry_key(entry) for entry in document.jobs}
    found = [key for key in expected if key in present]

    if len(found) == len(expected):
        return CheckResult(name, "ok", f"{len(found)} {profile} jobs configured")
    if found:
        return CheckResult(
            name, "warn", f"Only {len(found)} {profile} jobs (expected {len(expected)})"
        )
    return CheckResult(name, "warn", f"No {profile} jobs configured")
