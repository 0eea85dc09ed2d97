"""
Task activity trail.

Activities are recorded after the mutation they describe has committed.
A failure here is logged and dropped: it must never undo or fail the
dependency or status change that triggered it.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models

logger = logging.getLogger(__name__)

# Column limits on task_activities
MAX_DESCRIPTION_LENGTH = 500
MAX_VALUE_LENGTH = 100


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None:
        return None
    return value if len(value) <= limit else value[:limit - 3] + "..."


def record_activity(
    db: Session,
    task_id: int,
    actor_id: Optional[int],
    activity_type: models.ActivityType,
    description: Optional[str] = None,
    old_value: Optional[str] = None,
    new_value: Optional[str] = None,
) -> Optional[models.TaskActivity]:
    """
    Append an activity entry for a task (best effort).

    Args:
        db: Database session; any previous work on it must already be committed
        task_id: ID of the task the activity belongs to
        actor_id: ID of the user who triggered it (optional)
        activity_type: Kind of activity (from ActivityType enum)
        description: Human-readable summary
        old_value: Previous value (optional)
        new_value: New value (optional)

    Returns:
        The created TaskActivity, or None if it could not be stored
    """
    logger.debug(f"Recording activity: type={activity_type}, task_id={task_id}, actor_id={actor_id}")

    activity = models.TaskActivity(
        task_id=task_id,
        user_id=actor_id,
        activity_type=activity_type.value,
        description=_clip(description, MAX_DESCRIPTION_LENGTH),
        old_value=_clip(old_value, MAX_VALUE_LENGTH),
        new_value=_clip(new_value, MAX_VALUE_LENGTH),
    )

    try:
        db.add(activity)
        db.commit()
        db.refresh(activity)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record {activity_type.value} activity for task {task_id}: {e}")
        return None

    logger.debug(f"Activity recorded: id={activity.id}, type={activity_type.value}")
    return activity


def list_activities(db: Session, task_id: int) -> List[models.TaskActivity]:
    """Activities for a task, newest first."""
    return db.query(models.TaskActivity)\
        .filter(models.TaskActivity.task_id == task_id)\
        .order_by(models.TaskActivity.created_at.desc(), models.TaskActivity.id.desc())\
        .all()
