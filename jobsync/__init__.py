"""
jobsync — keep a scheduler's job store in line with the jobs you manage.

Public API:
    from jobsync import reconcile, ReconcileOptions, merge_jobs, generate_jobs
"""

__version__ = "0.1.0"

# Core
from jobsync.core.config import JobSyncConfig
from jobsync.core.errors import JobSyncError, MalformedStoreError, StoreError

# Jobs
from jobsync.scheduler.job import Job
from jobsync.scheduler.profiles import generate_jobs

# Store
from jobsync.store.document import JobStoreDocument
from jobsync.store.jobs_file import JobsFile

# Reconcile
from jobsync.reconcile.merge import MergeResult, merge_jobs
from jobsync.reconcile.runner import ReconcileOptions, ReconcileResult, reconcile

__all__ = [
    # Core
    "JobSyncConfig",
    "JobSyncError",
    "StoreError",
    "MalformedStoreError",
    # Jobs
    "Job",
    "generate_jobs",
    # Store
    "JobStoreDocument",
    "JobsFile",
    # Reconcile
    "MergeResult",
    "merge_jobs",
    "ReconcileOptions",
    "ReconcileResult",
    "reconcile",
]
