import pytest

from services.scheduler import seconds_until_next_tick


def test_next_tick_aligned_to_interval():
    assert seconds_until_next_tick(30, 1000.0) == pytest.approx(20.0)
    assert seconds_until_next_tick(30, 1020.0) == pytest.approx(30.0)


def test_invalid_interval():
    with pytest.raises(ValueError):
        seconds_until_next_tick(0, 1000.0)
