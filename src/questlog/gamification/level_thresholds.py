"""Level curve and level computation.

The curve is a plain table so it can be tuned without touching the
computation: a user is at the highest level whose cumulative XP they have
reached. Cumulative values must be strictly increasing.
"""

from __future__ import annotations

from bisect import bisect_right

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Novice", "cumulative": 0},
    {"level": 2, "title": "Apprentice", "cumulative": 100},
    {"level": 3, "title": "Initiate", "cumulative": 250},
    {"level": 4, "title": "Adventurer", "cumulative": 500},
    {"level": 5, "title": "Pathfinder", "cumulative": 850},
    {"level": 6, "title": "Journeyman", "cumulative": 1300},
    {"level": 7, "title": "Taskwright", "cumulative": 1900},
    {"level": 8, "title": "Veteran", "cumulative": 2700},
    {"level": 9, "title": "Vanguard", "cumulative": 3700},
    {"level": 10, "title": "Champion", "cumulative": 5000},
    {"level": 11, "title": "Knight", "cumulative": 6500},
    {"level": 12, "title": "Warden", "cumulative": 8000},
    {"level": 13, "title": "Sentinel", "cumulative": 9500},
    {"level": 14, "title": "Paladin", "cumulative": 11000},
    {"level": 15, "title": "Hero", "cumulative": 12500},
    {"level": 16, "title": "Master", "cumulative": 14000},
    {"level": 17, "title": "Grandmaster", "cumulative": 15500},
    {"level": 18, "title": "Sage", "cumulative": 17000},
    {"level": 19, "title": "Legend", "cumulative": 18500},
    {"level": 20, "title": "Mythic", "cumulative": 20000},
]

MAX_LEVEL: int = LEVEL_THRESHOLDS[-1]["level"]

_CUMULATIVE = [t["cumulative"] for t in LEVEL_THRESHOLDS]


def _index_for_xp(total_xp: int) -> int:
    if total_xp < 0:
        msg = f"total_xp must be non-negative, got {total_xp}"
        raise ValueError(msg)
    return bisect_right(_CUMULATIVE, total_xp) - 1


def level_for_xp(total_xp: int) -> int:
    """Level reached with ``total_xp``. Monotonic non-decreasing in XP."""
    return LEVEL_THRESHOLDS[_index_for_xp(total_xp)]["level"]


def compute_level(total_xp: int) -> dict:
    """Compute level info (level, title and progress toward the next level)."""
    idx = _index_for_xp(total_xp)
    current = LEVEL_THRESHOLDS[idx]
    next_level = LEVEL_THRESHOLDS[min(idx + 1, len(LEVEL_THRESHOLDS) - 1)]

    xp_into_level = total_xp - current["cumulative"]
    xp_for_level = next_level["cumulative"] - current["cumulative"]

    # At max level, avoid division by zero in progress bars
    if xp_for_level == 0:
        xp_for_level = 1

    return {
        "level": current["level"],
        "title": current["title"],
        "xp_into_level": xp_into_level,
        "xp_for_level": xp_for_level,
        "next_level": next_level["level"],
        "next_title": next_level["title"],
    }
