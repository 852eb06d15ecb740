"""
JobStoreDocument — the persisted job store, as the scheduler daemon reads it.

    {"version": 1, "jobs": [ {...}, {...} ]}

Entries in ``jobs`` are kept as the raw JSON values they were loaded as.
Entries this tool does not manage must survive a round trip untouched,
so they are never parsed into Job objects here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEFAULT_VERSION = 1


def coerce_version(value: Any) -> int:
    """Keep integer versions; anything else (bools included) becomes 1."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return DEFAULT_VERSION


@dataclass
class JobStoreDocument:
    """Store contents: a format version and the ordered job entries."""

    version: int = DEFAULT_VERSION
    jobs: list[Any] = field(default_factory=list)
    extra: dict = field(default_factory=dict)  # other top-level keys, kept as-is

    def to_dict(self) -> dict:
        return {**self.extra, "version": self.version, "jobs": list(self.jobs)}

    @classmethod
    def from_data(cls, data: Any) -> "JobStoreDocument":
        """
        Build a document from parsed JSON.

        Raises ValueError if the top level is not an object or ``jobs`` is
        present but not a list. A missing ``jobs`` means an empty store.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        jobs = data.get("jobs", [])
        if jobs is None:
            jobs = []
        if not isinstance(jobs, list):
            raise ValueError(f"'jobs' must be a list, got {type(jobs).__name__}")
        return cls(
            version=coerce_version(data.get("version")),
            jobs=list(jobs),
            extra={k: v for k, v in data.items() if k not in ("version", "jobs")},
        )
