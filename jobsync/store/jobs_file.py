"""
JobsFile — reads and writes the scheduler's JSON job store.

File: ~/.openclaw/cron/jobs.json by default (the path is always passed in)

Load policy:
    missing file           → empty document, not an error
    unparsable, no force   → byte-for-byte backup, then MalformedStoreError
    unparsable, force      → byte-for-byte backup, then empty document

Backups sit next to the store as ``<name>.bak-<unix-epoch-millis>``.
"""

from __future__ import annotations

import json
import logging
import shutil
import time
from pathlib import Path

from jobsync.core.errors import MalformedStoreError
from jobsync.scheduler.job import Job
from jobsync.store.document import JobStoreDocument

logger = logging.getLogger(__name__)


class JobsFile:
    """
    One job-store file on disk.

    Usage:
        store = JobsFile(Path("~/.openclaw/cron/jobs.json"))
        doc = store.load(force=False)
        ...
        store.write(merged_doc)

    There is no locking. A concurrent writer (the gateway itself, or a
    second run) between load() and write() loses; last writer wins.
    """

    def __init__(self, path: Path, indent: int = 2) -> None:
        self._path = Path(path).expanduser()
        self._indent = indent

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    # ── Read ─────────────────────────────────────────────────────────────────

    def load(self, force: bool = False, backup: bool = True) -> JobStoreDocument:
        """
        Read the store.

        Args:
            force:  On a malformed file, continue with an empty document
                    instead of raising.
            backup: Copy a malformed file aside before raising or discarding.
                    Pass False for read-only callers (dry run, doctor).

        Raises MalformedStoreError when the file cannot be parsed and
        force is False. The original file is never modified.
        """
        if not self._path.exists():
            logger.debug(f"No job store at {self._path}; starting empty")
            return JobStoreDocument()

        raw = self._path.read_bytes()
        try:
            return JobStoreDocument.from_data(json.loads(raw.decode("utf-8-sig")))
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            reason = str(e)

        backup_path = self.backup() if backup else None

        if not force:
            raise MalformedStoreError(self._path, backup_path, reason)

        if backup_path is not None:
            logger.warning(
                f"Discarding unreadable job store {self._path} ({reason}); "
                f"previous contents saved to {backup_path}"
            )
        else:
            logger.warning(f"Ignoring unreadable job store {self._path} ({reason})")
        return JobStoreDocument()

    def backup(self) -> Path:
        """Copy the store file to a new, unused ``.bak-<millis>`` sibling."""
        stamp = int(time.time() * 1000)
        target = self._backup_path(stamp)
        while target.exists():
            stamp += 1
            target = self._backup_path(stamp)
        shutil.copyfile(self._path, target)
        logger.warning(f"Backed up job store {self._path} to {target}")
        return target

    def _backup_path(self, stamp: int) -> Path:
        return self._path.with_name(f"{self._path.name}.bak-{stamp}")

    # ── Write ────────────────────────────────────────────────────────────────

    def write(self, document: JobStoreDocument) -> None:
        """Persist the document. I/O errors propagate unchanged."""
        _write_json(self._path, document.to_dict(), self._indent)
        logger.debug(f"Wrote {len(document.jobs)} jobs to {self._path}")


def write_reference(path: Path, jobs: list[Job], indent: int = 2) -> None:
    """
    Write the desired set alone to a workspace-local file for inspection.

    Nothing reads this file back; it does not influence later runs.
    """
    _write_json(Path(path), [job.to_dict() for job in jobs], indent)
    logger.debug(f"Wrote reference copy of {len(jobs)} desired jobs to {path}")


def _write_json(path: Path, data: object, indent: int) -> None:
    try:
        payload = (json.dumps(data, indent=indent, ensure_ascii=False) + "\n").encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates (legal as JSON escapes) only survive escaped
        payload = (json.dumps(data, indent=indent) + "\n").encode("ascii")
    # Encode fully before opening: opening truncates the file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
