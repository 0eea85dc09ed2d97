"""
Task lookups used by the dependency core.

The dependency guard and the status validator only need to know whether a
task exists, read its title/status, and change its status.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

import models
from time_utils import utc_now

logger = logging.getLogger(__name__)


def task_exists(db: Session, task_id: int) -> bool:
    exists = db.query(models.Task.id).filter(models.Task.id == task_id).first() is not None
    logger.debug(f"Task {task_id} exists={exists}")
    return exists


def get_task(db: Session, task_id: int) -> Optional[models.Task]:
    return db.query(models.Task).filter(models.Task.id == task_id).first()


def set_task_status(db: Session, task: models.Task, status: models.TaskStatus) -> None:
    """
    Set a task's status without validation and keep completed_at in step.

    Callers run validate_transition first; this only applies the change.
    """
    if task.status == status:
        return

    logger.debug(f"Task {task.id} status {task.status} -> {status}")
    task.status = status
    if status == models.TaskStatus.completed:
        task.completed_at = utc_now()
    else:
        task.completed_at = None
