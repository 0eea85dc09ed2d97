"""
Dependency graph store.

Each row of task_dependencies is one directed edge: blocked_task depends on
blocking_task. The "depends-on" adjacency therefore runs blocked -> blocking.

Also provides graph_mutation_lock, which every check-then-write sequence
against the graph (dependency creation, status changes) must hold until it
commits, so two concurrent requests cannot each pass their checks and
jointly break acyclicity or the blocking rules.
"""

import logging
import threading
from collections import deque
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import or_, text
from sqlalchemy.orm import Session

import models

logger = logging.getLogger(__name__)

# Key for pg_advisory_xact_lock; any constant shared by all workers works
GRAPH_ADVISORY_LOCK_KEY = 0x7A5C_DE90

_graph_lock = threading.RLock()


@contextmanager
def graph_mutation_lock(db: Session):
    """
    Serialize graph check-then-write sequences.

    Within one process a re-entrant lock is held for the duration of the block.
    On PostgreSQL a transaction-scoped advisory lock is also taken so separate
    worker processes serialize too; it is released on commit or rollback.
    The caller must commit before leaving the block; an exception rolls the
    session back.
    """
    with _graph_lock:
        if db.get_bind().dialect.name == "postgresql":
            logger.debug("Acquiring PostgreSQL advisory lock for dependency graph")
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": GRAPH_ADVISORY_LOCK_KEY})
        try:
            yield
        except Exception:
            db.rollback()
            raise


def get_dependencies_for(db: Session, task_id: int) -> List[models.TaskDependency]:
    """Edges whose blocked task is task_id, i.e. the tasks blocking it."""
    edges = db.query(models.TaskDependency)\
        .filter(models.TaskDependency.blocked_task_id == task_id)\
        .order_by(models.TaskDependency.id)\
        .all()
    logger.debug(f"Task {task_id} is blocked by {len(edges)} task(s)")
    return edges


def get_dependents_for(db: Session, task_id: int) -> List[models.TaskDependency]:
    """Edges whose blocking task is task_id, i.e. the tasks waiting on it."""
    edges = db.query(models.TaskDependency)\
        .filter(models.TaskDependency.blocking_task_id == task_id)\
        .order_by(models.TaskDependency.id)\
        .all()
    logger.debug(f"Task {task_id} blocks {len(edges)} task(s)")
    return edges


def list_edges_for_task(db: Session, task_id: int) -> List[models.TaskDependency]:
    """Every edge touching task_id, in either direction."""
    return db.query(models.TaskDependency)\
        .filter(or_(
            models.TaskDependency.blocking_task_id == task_id,
            models.TaskDependency.blocked_task_id == task_id
        ))\
        .order_by(models.TaskDependency.id)\
        .all()


def get_edge(db: Session, dependency_id: int) -> Optional[models.TaskDependency]:
    return db.query(models.TaskDependency).filter(models.TaskDependency.id == dependency_id).first()


def dependency_exists(db: Session, blocking_task_id: int, blocked_task_id: int) -> bool:
    existing = db.query(models.TaskDependency.id)\
        .filter(
            models.TaskDependency.blocking_task_id == blocking_task_id,
            models.TaskDependency.blocked_task_id == blocked_task_id
        )\
        .first()
    return existing is not None


def has_path(db: Session, from_task_id: int, to_task_id: int) -> bool:
    """
    Return True if from_task_id depends on to_task_id, directly or transitively.

    BFS over the depends-on adjacency (blocked -> blocking). A zero-length
    path counts, so has_path(x, x) is True.
    """
    logger.debug(f"Checking path: from_task_id={from_task_id}, to_task_id={to_task_id}")

    if from_task_id == to_task_id:
        return True

    visited = set()
    queue = deque([from_task_id])

    while queue:
        current_task_id = queue.popleft()

        if current_task_id in visited:
            continue
        visited.add(current_task_id)

        blocking_ids = db.query(models.TaskDependency.blocking_task_id)\
            .filter(models.TaskDependency.blocked_task_id == current_task_id)\
            .all()

        for (blocking_id,) in blocking_ids:
            if blocking_id == to_task_id:
                logger.debug(f"Path found: task {from_task_id} depends on task {to_task_id} via task {current_task_id}")
                return True
            if blocking_id not in visited:
                queue.append(blocking_id)

    logger.debug(f"No path from task {from_task_id} to task {to_task_id} ({len(visited)} task(s) visited)")
    return False


def create_edge(
    db: Session,
    blocking_task_id: int,
    blocked_task_id: int,
    created_by_user_id: Optional[int] = None
) -> models.TaskDependency:
    """Add an edge to the session and flush it. The caller commits."""
    edge = models.TaskDependency(
        blocking_task_id=blocking_task_id,
        blocked_task_id=blocked_task_id,
        created_by_user_id=created_by_user_id
    )
    db.add(edge)
    db.flush()
    logger.debug(f"Edge {edge.id} flushed: task {blocking_task_id} blocks task {blocked_task_id}")
    return edge


def delete_edge(db: Session, edge: models.TaskDependency) -> None:
    """Remove an edge from the session and flush. The caller commits."""
    db.delete(edge)
    db.flush()
    logger.debug(f"Edge {edge.id} deleted: task {edge.blocking_task_id} no longer blocks task {edge.blocked_task_id}")
