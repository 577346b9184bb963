"""Tests for injectable random sources."""

import os

import pytest

from envlab.core.random_source import (
    RandomSource,
    SequenceRandomSource,
    SystemRandomSource,
    default_random_source,
    index_draw,
    percent_draw,
)


def test_sources_satisfy_protocol():
    """Test sources satisfy the protocol."""
    assert isinstance(SystemRandomSource(1), RandomSource)
    assert isinstance(SequenceRandomSource([0.5]), RandomSource)


def test_seeded_sources_repeat():
    """Test equal seeds give equal draws."""
    a = SystemRandomSource(99)
    b = SystemRandomSource(99)
    assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]


def test_sequence_replays_and_exhausts():
    """Test sequence replay and exhaustion."""
    rng = SequenceRandomSource([0.1, 0.2])
    assert rng.random() == 0.1
    assert rng.random() == 0.2
    assert rng.consumed == 2
    with pytest.raises(IndexError):
        rng.random()


def test_sequence_cycle():
    """Test cycling sequence."""
    rng = SequenceRandomSource([0.3], cycle=True)
    assert [rng.random() for _ in range(3)] == [0.3, 0.3, 0.3]


@pytest.mark.parametrize("value", [-0.1, 1.0, 2])
def test_sequence_rejects_out_of_range(value):
    """Test out-of-range sequence values are rejected."""
    with pytest.raises(ValueError):
        SequenceRandomSource([value])


def test_draw_helpers():
    """Test percent and index draws."""
    assert percent_draw(SequenceRandomSource([0.25])) == 25.0
    assert index_draw(SequenceRandomSource([0.5]), 3) == 1
    assert index_draw(SequenceRandomSource([0.999999]), 3) == 2
    with pytest.raises(ValueError):
        index_draw(SequenceRandomSource([0.5]), 0)


def test_default_source_uses_configured_seed():
    """Test default source seed comes from settings."""
    os.environ["RANDOM_SEED"] = "12"
    assert default_random_source().seed == 12
