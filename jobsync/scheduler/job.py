"""
Job — one automation job definition for the external scheduler.

A Job has a single identity, ``key``. The store format names it twice
(``jobId`` and ``id``) for compatibility with older readers; both are
written from ``key`` in to_dict() and nowhere else.

Schedule and payload are opaque dicts passed through unchanged:
    schedule: {"kind": "cron", "expr": "0 9 * * 1"}
    payload:  {"kind": "systemEvent", "command": "/path/to/script.sh"}
              {"kind": "agentTurn",   "message": "free-text instruction"}
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

# Serialized names of the identity, in lookup order.
KEY_FIELDS = ("jobId", "id")

_KNOWN_FIELDS = {
    "jobId", "id", "name", "enabled", "deleteAfterRun", "createdAtMs",
    "updatedAtMs", "schedule", "sessionTarget", "wakeMode", "payload", "isolation",
}


def now_ms() -> int:
    return int(time.time() * 1000)


def entry_key(entry: Any) -> str | None:
    """
    Return the identity of a raw store entry, or None if it has none.

    ``jobId`` wins over ``id`` when both are present. Non-dict entries and
    empty or non-string keys count as keyless.
    """
    if not isinstance(entry, dict):
        return None
    for name in KEY_FIELDS:
        value = entry.get(name)
        if isinstance(value, str) and value:
            return value
    return None


def system_event(command: str) -> dict:
    """Lightweight command payload, run directly by the scheduler."""
    return {"kind": "systemEvent", "command": command}


def agent_turn(message: str) -> dict:
    """Conversational task payload, handed to an agent session."""
    return {"kind": "agentTurn", "message": message}


@dataclass
class Job:
    """A job definition as the scheduler daemon stores it."""

    key: str             # stable identity, serialized as jobId and id
    name: str            # human-readable label, reporting only
    schedule: dict = field(default_factory=dict)
    payload: dict = field(default_factory=dict)

    enabled: bool = True
    delete_after_run: bool = False
    session_target: str = "main"
    wake_mode: str = "next-heartbeat"
    isolation: dict | None = None
    created_at_ms: int = field(default_factory=now_ms)
    updated_at_ms: int = 0   # 0 means "same as created_at_ms"
    extra: dict = field(default_factory=dict)  # unknown fields, round-tripped

    def __post_init__(self) -> None:
        if not self.updated_at_ms:
            self.updated_at_ms = self.created_at_ms

    @property
    def label(self) -> str:
        """Name used in reports; falls back to the key."""
        return self.name or self.key

    def to_dict(self) -> dict:
        """Serialize with both identity fields set to ``key``."""
        d: dict[str, Any] = {
            **self.extra,
            "jobId": self.key,
            "id": self.key,
            "name": self.name,
            "enabled": self.enabled,
            "deleteAfterRun": self.delete_after_run,
            "createdAtMs": self.created_at_ms,
            "updatedAtMs": self.updated_at_ms,
            "schedule": dict(self.schedule),
            "sessionTarget": self.session_target,
            "wakeMode": self.wake_mode,
            "payload": dict(self.payload),
        }
        if self.isolation is not None:
            d["isolation"] = dict(self.isolation)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Job":
        """Read a store entry leniently; wrongly typed fields fall back to defaults."""

        def typed(name: str, kind: type, default: Any) -> Any:
            value = d.get(name, default)
            return value if isinstance(value, kind) else default

        return cls(
            key=entry_key(d) or "",
            name=str(d.get("name") or ""),
            schedule=typed("schedule", dict, {}),
            payload=typed("payload", dict, {}),
            enabled=bool(d.get("enabled", True)),
            delete_after_run=bool(d.get("deleteAfterRun", False)),
            session_target=str(d.get("sessionTarget", "main")),
            wake_mode=str(d.get("wakeMode", "next-heartbeat")),
            isolation=typed("isolation", dict, None),
            created_at_ms=typed("createdAtMs", int, 0),
            updated_at_ms=typed("updatedAtMs", int, 0),
            extra={k: v for k, v in d.items() if k not in _KNOWN_FIELDS},
        )
