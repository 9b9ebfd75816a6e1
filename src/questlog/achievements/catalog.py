"""Static achievement catalog and idempotent seeding."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.db.models import Achievement

logger = logging.getLogger(__name__)

# Counters a predicate can be evaluated against
TRIGGER_TYPES = frozenset({
    "tasks_created",
    "tasks_completed",
    "high_priority_completed",
    "labels_created",
    "level_reached",
    "total_xp",
})

ACHIEVEMENT_SEED_DATA: list[dict] = [
    # Tasks
    {"slug": "first_task_created", "name": "Quest Accepted", "description": "Create your first task",
     "trigger_type": "tasks_created", "threshold": 1, "xp_bonus": 10, "sort_order": 1},
    {"slug": "first_task", "name": "First Steps", "description": "Complete your first task",
     "trigger_type": "tasks_completed", "threshold": 1, "xp_bonus": 25, "sort_order": 2},
    {"slug": "tasks_10", "name": "Getting Things Done", "description": "Complete 10 tasks",
     "trigger_type": "tasks_completed", "threshold": 10, "xp_bonus": 100, "sort_order": 3},
    {"slug": "tasks_50", "name": "Task Slayer", "description": "Complete 50 tasks",
     "trigger_type": "tasks_completed", "threshold": 50, "xp_bonus": 250, "sort_order": 4},
    {"slug": "tasks_100", "name": "Centurion", "description": "Complete 100 tasks",
     "trigger_type": "tasks_completed", "threshold": 100, "xp_bonus": 500, "sort_order": 5},
    {"slug": "high_priority_5", "name": "Firefighter", "description": "Complete 5 high-priority tasks",
     "trigger_type": "high_priority_completed", "threshold": 5, "xp_bonus": 75, "sort_order": 6},
    # Labels
    {"slug": "first_label", "name": "Organizer", "description": "Create your first label",
     "trigger_type": "labels_created", "threshold": 1, "xp_bonus": 10, "sort_order": 7},
    {"slug": "labels_5", "name": "Librarian", "description": "Create 5 labels",
     "trigger_type": "labels_created", "threshold": 5, "xp_bonus": 50, "sort_order": 8},
    # Progression
    {"slug": "level_2", "name": "Level Up!", "description": "Reach level 2",
     "trigger_type": "level_reached", "threshold": 2, "xp_bonus": 0, "sort_order": 9},
    {"slug": "level_5", "name": "Rising Star", "description": "Reach level 5",
     "trigger_type": "level_reached", "threshold": 5, "xp_bonus": 100, "sort_order": 10},
    {"slug": "level_10", "name": "Champion", "description": "Reach level 10",
     "trigger_type": "level_reached", "threshold": 10, "xp_bonus": 250, "sort_order": 11},
    {"slug": "xp_1000", "name": "Thousand Club", "description": "Earn 1,000 XP in total",
     "trigger_type": "total_xp", "threshold": 1000, "xp_bonus": 50, "sort_order": 12},
]


async def seed_achievements(db: AsyncSession) -> int:
    """Insert catalog entries that are missing. Returns the number inserted."""
    result = await db.execute(select(Achievement.slug))
    existing = set(result.scalars())

    inserted = 0
    for data in ACHIEVEMENT_SEED_DATA:
        if data["trigger_type"] not in TRIGGER_TYPES:
            msg = f"Unknown trigger type for {data['slug']}: {data['trigger_type']}"
            raise ValueError(msg)
        if data["slug"] in existing:
            continue
        db.add(Achievement(**data))
        inserted += 1

    if inserted:
        await db.commit()
        logger.info("Seeded %d achievements", inserted)
    return inserted
