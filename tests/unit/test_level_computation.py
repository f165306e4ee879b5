"""Level curve: level = floor(sqrt(xp / 100)) + 1."""

from __future__ import annotations

import pytest

from playhub.rewards.levels import compute_level, xp_for_level


@pytest.mark.parametrize(
    ("xp", "level"),
    [(0, 1), (99, 1), (100, 2), (399, 2), (400, 3), (900, 4), (10_000, 11), (-50, 1)],
)
def test_compute_level(xp, level):
    assert compute_level(xp) == level


def test_xp_for_level_is_the_threshold():
    for level in range(1, 20):
        threshold = xp_for_level(level)
        assert compute_level(threshold) == level
        if threshold > 0:
            assert compute_level(threshold - 1) == level - 1
