"""
Desired-set profiles — the job definitions jobsync manages.

Every job key is a literal in one of the enums below, never a freshly
generated id. Re-running (today, or after an upgrade) therefore targets
the same store entries, which is what lets the merge recognise a job it
created earlier.

Profiles:
    core   — memory upkeep and self-improvement turns for a personal agent
    trader — health checks and journal synthesis for a trading workspace
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable

from jobsync.core.config import DEFAULT_AGENT_LABEL
from jobsync.core.errors import ProfileError
from jobsync.scheduler.job import Job, agent_turn, now_ms, system_event
from jobsync.scheduler.schedule import cron_schedule


class CoreJob(str, Enum):
    """Fixed keys of the core profile."""

    WEEKLY_SYNTHESIS = "9a7b3a2d-7c15-4e45-9e69-4ed6d7d3750b"
    DAILY_MEMORY_DISTILL = "64e59bfe-8f38-4bad-8def-29449d957d34"
    NIGHTLY_IMPROVEMENT = "c5e53f94-5ee8-476f-a1e6-e29160f57a7b"
    COST_SAVINGS_SEARCHER = "8816f6a6-6ad8-40e2-a340-5557ad00601d"
    WEEKLY_EXPERIMENT_REVIEW = "cf2950a3-7197-49c0-91e3-847bb912e405"
    WEEKLY_BUG_SWEEP = "51c9003f-bc7d-4ea0-8228-bc4faa7e0d6d"


class TraderJob(str, Enum):
    """Fixed keys of the trader profile."""

    HEALTH_CHECK = "trader-health-check"
    RESTART_RUNNER = "trader-restart-runner"
    REPORT_WALLET = "trader-report-wallet"
    DAILY_RECAP_TEMPLATE = "trader-daily-recap-template"
    DAILY_SYNTHESIS = "trader-daily-synthesis"
    WEEKLY_TEMPLATE = "trader-weekly-template"
    WEEKLY_SYNTHESIS = "trader-weekly-synthesis"


GATEWAY_EDIT_WARNING = (
    "OpenClaw docs recommend using `openclaw cron add/edit` for changes; manual edits to "
    "~/.openclaw/cron/jobs.json are only safe when the Gateway is stopped."
)


def resolve_agent_label(label: str | None) -> str:
    """Strip the label; empty or missing labels fall back to the default."""
    return (label or "").strip() or DEFAULT_AGENT_LABEL


def _isolation(prefix: str, max_chars: int) -> dict:
    return {
        "postToMainPrefix": prefix,
        "postToMainMode": "summary",
        "postToMainMaxChars": max_chars,
    }


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Core profile
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _core_jobs(workspace: str, agent: str, ts: int) -> list[Job]:
    def turn(key: CoreJob, name: str, expr: str, target: str, message: str,
             enabled: bool = True, isolated: bool = True) -> Job:
        return Job(
            key=key.value,
            name=name,
            enabled=enabled,
            created_at_ms=ts,
            updated_at_ms=ts,
            schedule=cron_schedule(expr),
            session_target=target,
            payload=agent_turn(f"Agent: {agent}. {name}: {message}"),
            isolation=_isolation("Cron", 8000) if isolated else None,
        )

    return [
        turn(
            CoreJob.WEEKLY_SYNTHESIS, "Weekly Synthesis", "0 9 * * 1", "isolated",
            f"Run {workspace}/scripts/weekly-synthesis.sh to apply memory decay and regenerate "
            "entity summaries. Use the exec tool to run the script. Only modify workspace files; "
            "do not send any external messages. Then write a short [weekly-synthesis] note into "
            "today's memory file.",
        ),
        turn(
            CoreJob.DAILY_MEMORY_DISTILL, "Daily Memory Distill", "55 23 * * *", "main",
            f"Read today's {workspace}/memory/YYYY-MM-DD.md. Append a structured [summary] block "
            "with: key-events, decisions, todos, promote-to-memory. Only edit the memory file; "
            "do not chat.",
            isolated=False,
        ),
        turn(
            CoreJob.NIGHTLY_IMPROVEMENT, "Nightly Improvement", "15 22 * * *", "isolated",
            f"Read today's {workspace}/memory/YYYY-MM-DD.md logs. Analyze for patterns, friction, "
            "or opportunities. Implement ONE concrete improvement (fix bug, add script, improve "
            "workflow). Only local changes; no external APIs. Log with [task] "
            "id=cron/nightly-improvement. Do not chat.",
        ),
        turn(
            CoreJob.COST_SAVINGS_SEARCHER, "Cost Savings Searcher", "15 23 * * *", "isolated",
            f"Analyze recent {workspace}/memory/*.md logs and OpenClaw usage patterns for token "
            "optimization opportunities. Look for: over-verbose replies, redundant context, "
            "inefficient schedules. Propose and implement safe local changes (workspace-only). "
            "Record changes as [experiment] entries in MEMORY.md or memory logs. Log with [task] "
            "id=cron/cost-savings. Do not chat.",
        ),
        turn(
            CoreJob.WEEKLY_EXPERIMENT_REVIEW, "Weekly Experiment Review", "0 9 * * 1", "isolated",
            f"Scan recent {workspace}/memory/*.md for [experiment] entries without "
            "[experiment-result]. For each, analyze outcome, write result block, update MEMORY.md "
            "rules where appropriate. Only edit memory files and MEMORY.md; no code changes. "
            "Write a short summary into today's memory file.",
            enabled=False,
        ),
        turn(
            CoreJob.WEEKLY_BUG_SWEEP, "Weekly Bug Sweep", "30 9 * * 1", "isolated",
            f"Scan recent {workspace}/memory/*.md for [bug] and [incident] entries. Ensure each "
            "has root cause and fix documented; update MEMORY.md rules where patterns emerge. "
            "Only edit memory/*.md and MEMORY.md; no code changes. Write a short summary into "
            "today's memory file.",
            enabled=False,
        ),
    ]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Trader profile
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _trader_jobs(workspace: str, agent: str, ts: int) -> list[Job]:
    def script(key: TraderJob, name: str, expr: str, script_name: str) -> Job:
        return Job(
            key=key.value,
            name=name,
            created_at_ms=ts,
            updated_at_ms=ts,
            schedule=cron_schedule(expr),
            session_target="main",
            payload=system_event(f"{workspace}/scripts/{script_name}"),
        )

    def turn(key: TraderJob, name: str, expr: str, message: str) -> Job:
        return Job(
            key=key.value,
            name=name,
            created_at_ms=ts,
            updated_at_ms=ts,
            schedule=cron_schedule(expr),
            session_target="isolated",
            payload=agent_turn(f"Agent: {agent}. {message}"),
            isolation=_isolation("Trader", 4000),
        )

    return [
        script(TraderJob.HEALTH_CHECK, "Trader Health Check", "*/5 * * * *", "health_check.sh"),
        script(TraderJob.RESTART_RUNNER, "Trader Restart Runner", "* * * * *", "restart_runner.sh"),
        script(TraderJob.REPORT_WALLET, "Trader Report Wallet", "0 0 * * 0", "report_wallet.sh"),
        script(
            TraderJob.DAILY_RECAP_TEMPLATE, "Trader Daily Recap Template", "55 23 * * *",
            "daily_recap.sh",
        ),
        turn(
            TraderJob.DAILY_SYNTHESIS, "Trader Daily Synthesis", "0 0 * * *",
            "Daily Synthesis: Read journal/trades/ and journal/decisions/ for today. Fill in "
            "journal/recaps/YYYY-MM-DD.md with: 1) What happened (trades, blocks, errors), "
            "2) What worked/didn't, 3) Top 3 learnings, 4) 1-3 suggested tweaks (small + "
            "reversible). Write suggestions to suggestions/pending.json for human approval. "
            "Only edit journal files and suggestions/pending.json; no code changes.",
        ),
        script(
            TraderJob.WEEKLY_TEMPLATE, "Trader Weekly Template", "55 8 * * 1",
            "weekly_synthesis.sh",
        ),
        turn(
            TraderJob.WEEKLY_SYNTHESIS, "Trader Weekly Synthesis", "0 9 * * 1",
            "Weekly Synthesis: Read all daily recaps from last week. Fill in "
            "journal/recaps/WEEK-YYYY-WW.md with: 1) What changed in behavior across the week, "
            "2) Which market conditions hurt/helped, 3) Confirmed rules to pin, 4) Rules to "
            "delete. Update knowledge/tacit/ with confirmed patterns. Keep it short and focused. "
            "Only edit journal and knowledge/tacit/ files.",
        ),
    ]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Registry
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

_PROFILES: dict[str, Callable[[str, str, int], list[Job]]] = {
    "core": _core_jobs,
    "trader": _trader_jobs,
}

_PROFILE_KEYS: dict[str, type[Enum]] = {
    "core": CoreJob,
    "trader": TraderJob,
}

_PROFILE_WARNINGS: dict[str, list[str]] = {
    "core": [GATEWAY_EDIT_WARNING],
    "trader": [],
}


def available_profiles() -> list[str]:
    return list(_PROFILES)


def _check_profile(profile: str) -> None:
    if profile not in _PROFILES:
        raise ProfileError(
            f"Unknown profile: {profile!r} (available: {', '.join(available_profiles())})",
            profile=profile,
        )


def profile_keys(profile: str) -> list[str]:
    """The fixed keys a profile manages, in generation order."""
    _check_profile(profile)
    return [member.value for member in _PROFILE_KEYS[profile]]


def profile_warnings(profile: str) -> list[str]:
    _check_profile(profile)
    return list(_PROFILE_WARNINGS[profile])


def generate_jobs(
    workspace: str | Path,
    agent_label: str | None = None,
    profile: str = "core",
    now: int | None = None,
) -> list[Job]:
    """
    Build the desired job set for a workspace.

    Args:
        workspace:   Workspace directory, substituted into script paths.
        agent_label: Name substituted into agent instructions only.
        profile:     Which job set to build.
        now:         Creation timestamp in ms (defaults to the current time).

    Raises ProfileError for an unknown profile.
    """
    _check_profile(profile)
    ts = now if now is not None else now_ms()
    return _PROFILES[profile](str(workspace), resolve_agent_label(agent_label), ts)
