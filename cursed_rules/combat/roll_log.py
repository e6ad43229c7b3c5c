"""
Roll log module for the rules engine.

Resolved rolls can be recorded to a campaign log. Recording is best-effort:
the sink may be slow, asynchronous or failing, and none of that changes the
result the resolver already computed.
"""

import asyncio
import inspect
import threading
import time
from collections.abc import Awaitable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Protocol

from pydantic import BaseModel, Field

from cursed_rules.core.error_handling import ERROR_HANDLER, ErrorSeverity
from cursed_rules.core.logging import log_debug


class RollLogEntry(BaseModel):
    """One recorded roll."""

    session_id: str = Field(description="Campaign or session the roll belongs to.")
    actor_name: str = Field(description="Name of the rolling character.")
    action_name: str = Field(description="Skill, technique or attack rolled.")
    rolls: list[int] = Field(default_factory=list, description="Per-die results.")
    total: int = Field(description="Final total.")
    breakdown: str = Field(default="", description="How the total was built.")
    timestamp: float = Field(default_factory=time.time)


class RollLogSink(Protocol):
    """Receives roll log entries; may return an awaitable."""

    def record(
        self,
        session_id: str,
        actor_name: str,
        action_name: str,
        rolls: list[int],
        total: int,
        breakdown: str,
    ) -> Awaitable[None] | None: ...


class InMemoryRollLog:
    """A roll log sink that keeps entries in a list, newest last."""

    def __init__(self) -> None:
        self.entries: list[RollLogEntry] = []

    def record(
        self,
        session_id: str,
        actor_name: str,
        action_name: str,
        rolls: list[int],
        total: int,
        breakdown: str,
    ) -> None:
        self.entries.append(
            RollLogEntry(
                session_id=session_id,
                actor_name=actor_name,
                action_name=action_name,
                rolls=list(rolls),
                total=total,
                breakdown=breakdown,
            )
        )

    def for_session(self, session_id: str) -> list[RollLogEntry]:
        """Returns the entries of one session, oldest first."""
        return [entry for entry in self.entries if entry.session_id == session_id]


def _log_task_failure(task: "asyncio.Task[Any]") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        ERROR_HANDLER.handle(
            f"Failed to record roll: {error}",
            ErrorSeverity.MEDIUM,
            {"context": "roll_log"},
            error,
        )


# Awaitable records with no running loop are driven here, one at a time,
# so the resolver never waits on a slow sink.
_BACKGROUND = ThreadPoolExecutor(max_workers=1, thread_name_prefix="roll-log")
_in_flight: set["Future[None]"] = set()
_in_flight_lock = threading.Lock()


def _forget(future: "Future[None]") -> None:
    with _in_flight_lock:
        _in_flight.discard(future)


def _record_in_background(pending: Awaitable[None]) -> None:
    ERROR_HANDLER.safe_execute(
        lambda: asyncio.run(_await(pending)),
        None,
        "Failed to record roll",
        ErrorSeverity.MEDIUM,
        {"context": "roll_log"},
    )


def _run_awaitable(pending: Awaitable[None]) -> None:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None
    if loop is None:
        future = _BACKGROUND.submit(_record_in_background, pending)
        with _in_flight_lock:
            _in_flight.add(future)
        future.add_done_callback(_forget)
        return
    task = loop.create_task(_await(pending))
    task.add_done_callback(_log_task_failure)


async def _await(pending: Awaitable[None]) -> None:
    await pending


def dispatch_roll_log(sink: RollLogSink | None, entry: RollLogEntry) -> None:
    """
    Hands an entry to a sink without letting it fail the caller.

    Synchronous sinks run immediately. Awaitable results are scheduled on the
    running event loop, or handed to a background thread when there is none;
    see `flush_roll_log`.

    Args:
        sink (RollLogSink | None): Where to record, None to skip.
        entry (RollLogEntry): The entry to record.

    """
    if sink is None:
        return

    def _record() -> None:
        pending = sink.record(
            entry.session_id,
            entry.actor_name,
            entry.action_name,
            entry.rolls,
            entry.total,
            entry.breakdown,
        )
        if inspect.isawaitable(pending):
            _run_awaitable(pending)

    ERROR_HANDLER.safe_execute(
        _record,
        None,
        "Failed to record roll",
        ErrorSeverity.MEDIUM,
        {"session_id": entry.session_id, "action": entry.action_name},
    )
    log_debug("Roll dispatched to log", {"action": entry.action_name, "total": entry.total})


def flush_roll_log(timeout: float | None = None) -> bool:
    """
    Waits for the records handed to the background thread.

    Args:
        timeout (float | None): Seconds to wait at most, None to wait for all.

    Returns:
        bool: True when every record handed off so far has finished.

    """
    with _in_flight_lock:
        in_flight = list(_in_flight)
    _, not_done = wait(in_flight, timeout=timeout)
    return not not_done
