"""
Merge engine — folds the desired job set into an existing store document.

Rules, per existing entry (walked in store order):
    no usable key              → kept as-is
    key not in desired set     → kept as-is (unmanaged)
    key in desired set         → force=False: existing entry kept
                                 force=True:  desired job written in its place
After the walk, desired jobs not yet matched are appended in desired order.

Existing order is never changed, so the store file stays diff-friendly
between runs. Each desired job is used at most once per merge.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from jobsync.scheduler.job import Job, entry_key
from jobsync.store.document import JobStoreDocument, coerce_version

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """Merged document plus the names of jobs that were added or overwritten."""

    document: JobStoreDocument
    created: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.replaced)


def merge_jobs(
    existing: JobStoreDocument,
    desired: list[Job],
    force: bool = False,
) -> MergeResult:
    """
    Merge desired jobs into an existing document.

    Pure: performs no I/O, never mutates its inputs, and cannot fail on
    well-typed arguments. Entries of ``existing.jobs`` are carried over by
    reference; desired jobs are serialized with both identity fields set.
    """
    desired_by_key: dict[str, Job] = {}
    for job in desired:
        if not job.key:
            logger.debug(f"Skipping desired job without a key: {job.name!r}")
            continue
        # First definition of a key wins
        desired_by_key.setdefault(job.key, job)

    consumed: set[str] = set()
    created: list[str] = []
    replaced: list[str] = []
    merged: list = []

    for entry in existing.jobs:
        key = entry_key(entry)
        if key is None or key not in desired_by_key:
            merged.append(entry)
            continue

        if key in consumed:
            # Same managed key appears twice in the store; the first
            # occurrence already holds the slot, leave the rest alone.
            logger.warning(f"Job store has more than one entry with key {key!r}")
            merged.append(entry)
            continue

        consumed.add(key)
        if force:
            job = desired_by_key[key]
            merged.append(job.to_dict())
            replaced.append(job.label)
        else:
            merged.append(entry)

    for job in desired:
        if not job.key or job.key in consumed:
            continue
        consumed.add(job.key)
        merged.append(job.to_dict())
        created.append(job.label)

    document = JobStoreDocument(
        version=coerce_version(existing.version),
        jobs=merged,
        extra=dict(existing.extra),
    )
    logger.debug(
        f"Merged {len(desired_by_key)} desired into {len(existing.jobs)} existing jobs: "
        f"{len(created)} created, {len(replaced)} replaced, {len(merged)} total"
    )
    return MergeResult(document=document, created=created, replaced=replaced)
