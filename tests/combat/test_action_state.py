"""
Tests for the per-turn action economy.
"""

from cursed_rules.combat.action_state import MOVEMENT_PER_TURN, ActionState


def test_fresh_turn():
    state = ActionState()
    assert state.standard_available
    assert state.movement_points == MOVEMENT_PER_TURN
    assert state.reaction_penalty == 0
    assert state.can_full_action


def test_spend_standard_once():
    state = ActionState()
    assert state.spend_standard() is True
    assert state.spend_standard() is False
    assert not state.can_full_action


def test_spend_movement_until_empty():
    state = ActionState()
    assert state.spend_movement() is True
    assert state.spend_movement() is True
    assert state.spend_movement() is False
    assert state.movement_points == 0


def test_full_action_spends_everything():
    state = ActionState()
    assert state.spend_full_action() is True
    assert state.standard_available is False
    assert state.movement_points == 0


def test_full_action_needs_movement():
    """Test that a refused full action leaves the state untouched."""
    state = ActionState(movement_points=0)
    assert state.spend_full_action() is False
    assert state.standard_available is True


def test_reactions_accumulate_penalty():
    state = ActionState()
    for _ in range(3):
        assert state.use_reaction() is True
    assert state.reaction_penalty == 3


def test_reset_turn():
    state = ActionState()
    state.spend_full_action()
    state.use_reaction()
    state.reset_turn()
    assert state == ActionState()


def test_full_action_with_one_movement_left():
    """Test that a full action consumes all remaining movement at once."""
    state = ActionState(standard_available=True, movement_points=1)
    assert state.spend_full_action() is True
    assert (state.standard_available, state.movement_points) == (False, 0)
