"""
jobsync exception hierarchy.

Every error in the system inherits from JobSyncError.
Each subsystem has its own error class for targeted catching.

Usage:
    try:
        result = reconcile(workspace, options)
    except MalformedStoreError as e:
        # Store file could not be parsed; e.backup_path holds the copy
    except JobSyncError as e:
        # Handle any jobsync error
"""

from __future__ import annotations

from pathlib import Path


class JobSyncError(Exception):
    """Base exception for all jobsync errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


# ━━━ Core Errors ━━━


class ConfigError(JobSyncError):
    """Configuration is invalid, missing, or malformed."""

    pass


class ProfileError(JobSyncError):
    """Requested desired-set profile does not exist."""

    def __init__(self, message: str, profile: str = "", details: dict | None = None):
        self.profile = profile
        super().__init__(message, details)


# ━━━ Store Errors ━━━


class StoreError(JobSyncError):
    """Job store failure — unreadable file, bad structure, etc."""

    pass


class MalformedStoreError(StoreError):
    """
    The job store exists but could not be parsed.

    backup_path is None when the caller asked for a read-only load
    (dry run, doctor) and no copy was taken.
    """

    def __init__(
        self,
        path: Path,
        backup_path: Path | None = None,
        reason: str = "",
        details: dict | None = None,
    ):
        self.path = path
        self.backup_path = backup_path
        self.reason = reason
        if backup_path is not None:
            message = (
                f"Failed to parse OpenClaw cron file: {path}. Backed up to: {backup_path}. "
                "Fix the JSON and re-run, or re-run with --force to overwrite."
            )
        else:
            message = (
                f"Failed to parse OpenClaw cron file: {path}. "
                "Fix the JSON and re-run, or re-run with --force to overwrite."
            )
        super().__init__(message, details)
