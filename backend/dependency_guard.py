"""
Validation for dependency creation and removal.

Every edge reaches task_dependencies through create_dependency, which keeps
the graph free of self-loops, duplicates and cycles.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

import models
from activity_log import record_activity
from dependency_graph import (
    create_edge,
    delete_edge,
    dependency_exists,
    get_edge,
    graph_mutation_lock,
    has_path,
)
from errors import ConflictError, InvalidArgumentError, NotFoundError
from task_store import get_task

logger = logging.getLogger(__name__)


def canonical_edge(
    task_id: int,
    dependent_task_id: int,
    dependency_type: models.DependencyType
) -> Tuple[int, int]:
    """
    Map a directional request onto (blocking_task_id, blocked_task_id).

    blocked_by: task_id is blocked by dependent_task_id.
    blocks: task_id blocks dependent_task_id.
    """
    if dependency_type == models.DependencyType.blocks:
        return task_id, dependent_task_id
    return dependent_task_id, task_id


def create_dependency(
    db: Session,
    task_id: int,
    dependent_task_id: int,
    dependency_type: models.DependencyType = models.DependencyType.blocked_by,
    creator_id: Optional[int] = None
) -> models.TaskDependency:
    """
    Validate and persist a dependency between two tasks.

    Raises:
        NotFoundError: either task does not exist
        InvalidArgumentError: task_id == dependent_task_id
        ConflictError: the edge already exists or would close a cycle
    """
    logger.debug(
        f"Creating dependency: task_id={task_id}, dependent_task_id={dependent_task_id}, "
        f"type={dependency_type.value}, creator_id={creator_id}"
    )

    with graph_mutation_lock(db):
        task = get_task(db, task_id)
        if task is None:
            logger.info(f"Task {task_id} not found")
            raise NotFoundError(f"Task with ID {task_id} does not exist.")

        dependent_task = get_task(db, dependent_task_id)
        if dependent_task is None:
            logger.info(f"Dependent task {dependent_task_id} not found")
            raise NotFoundError(f"Dependent task with ID {dependent_task_id} does not exist.")

        if task_id == dependent_task_id:
            logger.info(f"Self-dependency rejected for task {task_id}")
            raise InvalidArgumentError("A task cannot depend on itself.")

        blocking_task_id, blocked_task_id = canonical_edge(task_id, dependent_task_id, dependency_type)

        if dependency_exists(db, blocking_task_id, blocked_task_id):
            logger.info(f"Dependency already exists: task {blocking_task_id} blocks task {blocked_task_id}")
            raise ConflictError("This dependency already exists.")

        # The new edge closes a cycle iff the blocker already depends on the blocked task
        if has_path(db, blocking_task_id, blocked_task_id):
            logger.info(
                f"Circular dependency detected: task {blocking_task_id} already depends on task {blocked_task_id}"
            )
            raise ConflictError("Creating this dependency would result in a circular dependency.")

        edge = create_edge(db, blocking_task_id, blocked_task_id, creator_id)
        db.commit()
        db.refresh(edge)

    blocking_task = dependent_task if blocking_task_id == dependent_task_id else task
    record_activity(
        db,
        task_id=blocked_task_id,
        actor_id=creator_id,
        activity_type=models.ActivityType.dependency_added,
        description=f"Dependency created: blocked by task '{blocking_task.title}' (#{blocking_task_id})",
        new_value=str(blocking_task_id),
    )

    logger.info(f"Created dependency {edge.id}: task {blocking_task_id} blocks task {blocked_task_id}")
    return edge


def delete_dependency(db: Session, dependency_id: int, actor_id: Optional[int] = None) -> None:
    """
    Remove a dependency. Removal can neither create a cycle nor make a
    status invalid, so nothing beyond existence is checked.

    Raises:
        NotFoundError: no dependency with this id
    """
    logger.debug(f"Deleting dependency {dependency_id}")

    edge = get_edge(db, dependency_id)
    if edge is None:
        logger.info(f"Dependency {dependency_id} not found")
        raise NotFoundError(f"Dependency with ID {dependency_id} not found.")

    blocking_task_id = edge.blocking_task_id
    blocked_task_id = edge.blocked_task_id

    delete_edge(db, edge)
    db.commit()

    record_activity(
        db,
        task_id=blocked_task_id,
        actor_id=actor_id,
        activity_type=models.ActivityType.dependency_removed,
        description=f"Dependency removed: no longer blocked by task #{blocking_task_id}",
        old_value=str(blocking_task_id),
    )

    logger.info(f"Deleted dependency {dependency_id}: task {blocking_task_id} no longer blocks task {blocked_task_id}")
