"""
reconcile() — one full run: generate → load → merge → write.

This is the entry point installers and the CLI call. It is synchronous and
single-shot: one read and one write of the store per call, no retries.
If the store cannot be loaded, the error propagates and nothing is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jobsync.core.config import JobSyncConfig
from jobsync.reconcile.merge import merge_jobs
from jobsync.scheduler.profiles import generate_jobs, profile_warnings
from jobsync.store.jobs_file import JobsFile, write_reference

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOptions:
    """Per-run knobs supplied by the caller."""

    agent_label: str | None = None
    force: bool = False          # overwrite managed jobs; heal a malformed store
    profile: str = "core"
    dry_run: bool = False        # compute the summary, touch nothing on disk
    reference_name: str = "openclaw-cron-jobs.json"
    indent: int = 2

    @classmethod
    def from_config(cls, config: JobSyncConfig, **overrides: Any) -> "ReconcileOptions":
        values: dict[str, Any] = {
            "agent_label": config.agent.label,
            "force": config.sync.force,
            "profile": config.sync.profile,
            "reference_name": config.store.reference_name,
            "indent": config.store.indent,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class ReconcileResult:
    """Summary handed back to the caller."""

    created: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)
    total: int = 0
    warnings: list[str] = field(default_factory=list)
    store_path: Path | None = None
    reference_path: Path | None = None
    dry_run: bool = False

    @property
    def restart_required(self) -> bool:
        """True when the store changed and the gateway must reload it."""
        return bool(self.created or self.replaced)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": list(self.created),
            "replaced": list(self.replaced),
            "total": self.total,
            "restartRequired": self.restart_required,
            "warnings": list(self.warnings),
        }


def reconcile(
    workspace: str | Path,
    store_path: Path,
    options: ReconcileOptions | None = None,
    now: int | None = None,
) -> ReconcileResult:
    """
    Reconcile the managed job set into the store at ``store_path``.

    Args:
        workspace:  Workspace directory; receives the reference file.
        store_path: The scheduler's job store file.
        options:    Agent label, force, profile and dry-run settings.
        now:        Creation timestamp in ms for generated jobs.

    Raises:
        MalformedStoreError: the store exists but cannot be parsed and
            force is off. A backup has been written (unless dry_run).
        ProfileError: unknown profile.
        OSError: reading or writing failed.
    """
    options = options or ReconcileOptions()
    workspace = Path(workspace)

    desired = generate_jobs(workspace, options.agent_label, options.profile, now=now)
    store = JobsFile(store_path, indent=options.indent)
    existing = store.load(force=options.force, backup=not options.dry_run)

    merged = merge_jobs(existing, desired, force=options.force)

    reference_path = workspace / options.reference_name
    if options.dry_run:
        logger.info(f"Dry run: {store.path} not written")
    else:
        store.write(merged.document)
        write_reference(reference_path, desired, indent=options.indent)

    result = ReconcileResult(
        created=merged.created,
        replaced=merged.replaced,
        total=len(merged.document.jobs),
        warnings=profile_warnings(options.profile),
        store_path=store.path,
        reference_path=None if options.dry_run else reference_path,
        dry_run=options.dry_run,
    )
    logger.info(
        f"Reconciled profile {options.profile!r} into {store.path}: "
        f"{len(result.created)} new, {len(result.replaced)} replaced, {result.total} total"
    )
    return result
