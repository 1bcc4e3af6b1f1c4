import pytest

from accelerate_vocab.utils.formatting import (
    NO_DATA,
    accuracy_band,
    accuracy_percent,
    format_accuracy,
    format_clock,
    format_duration,
    mean,
    round_half_up,
)


@pytest.mark.parametrize('value, expected', [(2.5, 3), (2.4, 2), (66.5, 67), (0, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_accuracy_percent():
    assert accuracy_percent(5, 6) == 83
    assert accuracy_percent(1, 8) == 13
    assert accuracy_percent(0, 0) is None


def test_mean_ignores_missing_values():
    assert mean([80, None, 60]) == 70
    assert mean([None]) is None
    assert mean([]) is None


def test_display_helpers():
    assert format_accuracy(None) == NO_DATA
    assert format_accuracy(72.26) == '72.3%'
    assert format_duration(None) == NO_DATA
    assert format_duration(45) == '45s'
    assert format_duration(185) == '3m 5s'
    assert format_clock(65) == '1:05'
    assert format_clock(-3) == '0:00'


def test_accuracy_band():
    assert accuracy_band(None) == 'none'
    assert accuracy_band(80) == 'good'
    assert accuracy_band(60) == 'fair'
    assert accuracy_band(59.9) == 'poor'
