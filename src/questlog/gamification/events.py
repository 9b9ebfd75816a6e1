"""Redis pub/sub broadcasts for level-ups and earned achievements.

Published only after the reward transaction committed. A failed publish is
logged and never fails the request.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from questlog.db.models import Achievement
    from questlog.gamification.reward_pipeline import RewardResult

logger = logging.getLogger(__name__)

LEVEL_UP_CHANNEL = "pubsub:level_up"
ACHIEVEMENT_CHANNEL = "pubsub:achievement_earned"


async def _publish(redis: object, channel: str, payload: dict) -> bool:
    if redis is None:
        return False
    try:
        await redis.publish(channel, json.dumps(payload))  # type: ignore[attr-defined]
    except Exception:
        logger.warning("Failed to publish %s event", channel, exc_info=True)
        return False
    return True


async def publish_achievements(redis: object, user_id: str, achievements: list[Achievement]) -> int:
    """Broadcast each earned achievement. Returns how many were published."""
    published = 0
    for achievement in achievements:
        if await _publish(redis, ACHIEVEMENT_CHANNEL, {
            "user_id": user_id,
            "slug": achievement.slug,
            "name": achievement.name,
            "xp_bonus": achievement.xp_bonus,
        }):
            published += 1
    return published


async def publish_reward_events(redis: object, user_id: str, result: RewardResult) -> None:
    """Broadcast the level-up (if any) and achievements from a task completion."""
    if result.leveled_up:
        await _publish(redis, LEVEL_UP_CHANNEL, {
            "user_id": user_id,
            "old_level": result.previous_level,
            "new_level": result.current_level,
            "total_xp": result.total_xp,
        })
    await publish_achievements(redis, user_id, result.new_achievements)
