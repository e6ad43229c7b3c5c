"""
Tests for best-effort roll logging.
"""

import asyncio
import time

from cursed_rules.combat.combat_resolver import (
    AttackRequest,
    CombatResolver,
    DefenseRequest,
)
from cursed_rules.combat import roll_log
from cursed_rules.combat.roll_log import (
    InMemoryRollLog,
    RollLogEntry,
    dispatch_roll_log,
    flush_roll_log,
)


def _entry(**overrides):
    fields = dict(
        session_id="s1",
        actor_name="Yuji",
        action_name="Ataque Desarmado",
        rolls=[3],
        total=8,
        breakdown="[DanoBase]5",
    )
    fields.update(overrides)
    return RollLogEntry(**fields)


def test_in_memory_log_filters_by_session():
    log = InMemoryRollLog()
    dispatch_roll_log(log, _entry())
    dispatch_roll_log(log, _entry(session_id="s2"))
    assert [entry.session_id for entry in log.for_session("s1")] == ["s1"]
    assert len(log.entries) == 2


def test_dispatch_without_sink_is_a_no_op():
    dispatch_roll_log(None, _entry())


def test_failing_sink_is_swallowed(mocker):
    """Test that a sink error never reaches the caller."""
    sink = mocker.Mock()
    sink.record.side_effect = ConnectionError("offline")
    dispatch_roll_log(sink, _entry())
    sink.record.assert_called_once_with(
        "s1", "Yuji", "Ataque Desarmado", [3], 8, "[DanoBase]5"
    )


class AsyncSink:
    def __init__(self):
        self.recorded = []

    async def record(self, session_id, actor_name, action_name, rolls, total, breakdown):
        await asyncio.sleep(0)
        self.recorded.append((session_id, action_name, total))


def test_async_sink_without_running_loop():
    sink = AsyncSink()
    dispatch_roll_log(sink, _entry())
    assert flush_roll_log(timeout=5)
    assert sink.recorded == [("s1", "Ataque Desarmado", 8)]


class SlowSink(AsyncSink):
    async def record(self, session_id, actor_name, action_name, rolls, total, breakdown):
        await asyncio.sleep(1.0)
        self.recorded.append((session_id, action_name, total))


def test_slow_async_sink_does_not_block_the_resolver(fighter, pools, scripted_dice):
    """Test that a resolve returns before a slow sink finishes recording."""
    sink = SlowSink()
    resolver = CombatResolver(dice=scripted_dice(10), roll_log=sink, session_id="s1")

    started = time.monotonic()
    result = resolver.resolve_attack(fighter, pools, AttackRequest(manual_damage=5))
    elapsed = time.monotonic() - started

    assert elapsed < 0.5
    assert sink.recorded == []
    assert flush_roll_log(timeout=5)
    assert sink.recorded == [("s1", "Ataque Desarmado", result.total)]


def test_failing_async_sink_is_reported(mocker):
    """Test that an error raised in the background reaches the error handler."""
    handle = mocker.patch.object(roll_log.ERROR_HANDLER, "handle")

    class BrokenSink:
        async def record(self, *args):
            raise ConnectionError("offline")

    dispatch_roll_log(BrokenSink(), _entry())
    assert flush_roll_log(timeout=5)

    handle.assert_called_once()
    assert isinstance(handle.call_args.args[3], ConnectionError)


def test_async_sink_inside_running_loop():
    """Test that the record is scheduled without blocking the caller."""
    sink = AsyncSink()

    async def play():
        dispatch_roll_log(sink, _entry())
        assert sink.recorded == []
        await asyncio.sleep(0.01)

    asyncio.run(play())
    assert sink.recorded == [("s1", "Ataque Desarmado", 8)]


def test_resolver_logs_rolls_for_the_session(fighter, pools, scripted_dice):
    log = InMemoryRollLog()
    resolver = CombatResolver(dice=scripted_dice(10, 2, 3), roll_log=log, session_id="s1")

    result = resolver.resolve_attack(fighter, pools, AttackRequest(manual_damage=5, invested=2))

    entry = log.for_session("s1")[0]
    assert entry.actor_name == "Yuji"
    assert entry.action_name == "Ataque Desarmado"
    assert entry.rolls == [2, 3]
    assert entry.total == result.total
    assert entry.breakdown == result.detail


def test_resolver_logs_defense_total_as_roll(fighter, pools, scripted_dice):
    """Test that diceless defenses log their total in place of rolls."""
    log = InMemoryRollLog()
    resolver = CombatResolver(dice=scripted_dice(), roll_log=log, session_id="s1")

    resolver.resolve_defense(fighter, pools, DefenseRequest(incoming_damage=9, invested=2))

    assert log.entries[0].rolls == [7]
    assert log.entries[0].action_name == "Dano Final Recebido"


def test_resolver_without_session_does_not_log(fighter, pools, scripted_dice):
    log = InMemoryRollLog()
    resolver = CombatResolver(dice=scripted_dice(10), roll_log=log)
    resolver.resolve_attack(fighter, pools, AttackRequest(manual_damage=1))
    assert log.entries == []


def test_failing_log_keeps_the_result(fighter, pools, scripted_dice, mocker):
    sink = mocker.Mock()
    sink.record.side_effect = RuntimeError("database locked")
    resolver = CombatResolver(dice=scripted_dice(10), roll_log=sink, session_id="s1")

    result = resolver.resolve_attack(fighter, pools, AttackRequest(manual_damage=5))

    assert result.total == 8
    sink.record.assert_called_once()
