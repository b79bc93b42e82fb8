"""User activity trail."""
import logging

from internhub.models.activity import UserActivity

logger = logging.getLogger(__name__)


async def record_activity(user_id: str, action: str) -> UserActivity:
    activity = UserActivity(user_id=str(user_id), action=action)
    await activity.insert()
    logger.debug(f"Activity for {user_id}: {action}")
    return activity


async def recent_activities(user_id: str, limit: int = 10) -> list[UserActivity]:
    return (
        await UserActivity.find(UserActivity.user_id == str(user_id))
        .sort(-UserActivity.created_at)
        .limit(limit)
        .to_list()
    )
