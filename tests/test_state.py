import pytest

from lzmacodec.lengthcodec import MAX_POS_BITS
from lzmacodec.properties import Properties
from lzmacodec.rangecoder import PROB_INIT, new_probs
from lzmacodec.state import STATES, State


@pytest.fixture
def state():
    return State(Properties(lc=3, lp=0, pb=2))


@pytest.mark.parametrize(
    "start,method,expected",
    [
        (0, "update_match", 7),
        (7, "update_match", 10),
        (0, "update_rep", 8),
        (7, "update_rep", 11),
        (0, "update_short_rep", 9),
        (10, "update_short_rep", 11),
        (3, "update_literal", 0),
    ],
)
def test_transitions(state, start, method, expected):
    state.state = start
    getattr(state, method)()
    assert state.state == expected


def test_literal_after_any_state_is_a_literal_state(state):
    for start in range(STATES):
        state.state = start
        state.update_literal()
        assert 0 <= state.state < 7


def test_reset_restores_initial_values(state):
    state.update_match()
    state.rep[:] = [1, 2, 3, 4]
    state.is_rep[0] = 5
    state.reset()
    assert state.state == 0
    assert state.rep == [0, 0, 0, 0]
    assert state.is_rep == new_probs(STATES)
    assert len(state.is_match) == STATES << MAX_POS_BITS


def test_states_splits_position(state):
    for head in range(20):
        s1, s2, pos_state = state.states(head)
        assert s1 == state.state
        assert pos_state == head & state.pos_bit_mask
        assert s2 >> MAX_POS_BITS == s1
        assert s2 & ((1 << MAX_POS_BITS) - 1) == pos_state


def test_lit_state_full_context_is_previous_byte():
    st = State(Properties(lc=8, lp=0, pb=0))
    assert [st.lit_state(b, 12345) for b in range(256)] == list(range(256))


def test_lit_state_without_context_is_zero():
    st = State(Properties(lc=0, lp=0, pb=0))
    assert {st.lit_state(b, h) for b in range(256) for h in range(8)} == {0}


def test_copy_is_independent(state):
    state.update_match()
    state.rep[0] = 5
    clone = state.copy()
    clone.rep[1] = 9
    clone.is_match[0] = 1
    clone.lit_codec.probs[0] = 1
    assert clone.state == state.state
    assert clone.rep[0] == 5
    assert state.rep[1] == 0
    assert state.is_match[0] == PROB_INIT
    assert state.lit_codec.probs[0] == PROB_INIT