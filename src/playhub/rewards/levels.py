"""Player level computation.

Must match the client's level badge: level = floor(sqrt(xp / 100)) + 1.
"""

from __future__ import annotations

import math


def compute_level(total_xp: int) -> int:
    """Level for a total XP amount. Negative XP is treated as zero."""
    # isqrt(xp // 100) == floor(sqrt(xp / 100)) for integer xp, without float rounding
    return math.isqrt(max(total_xp, 0) // 100) + 1


def xp_for_level(level: int) -> int:
    """Minimum total XP needed to reach ``level``."""
    if level <= 1:
        return 0
    return (level - 1) ** 2 * 100
