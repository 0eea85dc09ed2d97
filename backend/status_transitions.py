"""
Dependency-aware task status transitions.

Every (old_status, new_status) pair maps to the precondition checks it must
pass in TRANSITION_RULES. Evaluation is read-only: it returns a decision and
leaves applying the change to the caller.

Rules:
- Starting or finishing a task out of pending or cancelled requires every
  blocking task to be completed.
- Reopening a completed task is refused while any task depending on it is
  in progress or completed.
- Cancelling is always allowed. Dependency edges are kept, so dependents of
  a cancelled task stay blocked until the edge is removed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

import models
from dependency_graph import get_dependencies_for, get_dependents_for
from errors import TaskBlockedError
from task_store import get_task

logger = logging.getLogger(__name__)

TaskStatus = models.TaskStatus

# Dependent tasks in these states assumed their blockers were finished
ACTIVE_DEPENDENT_STATUSES = {TaskStatus.in_progress, TaskStatus.completed}


@dataclass
class TransitionDecision:
    allowed: bool
    reasons: List[str] = field(default_factory=list)
    message: Optional[str] = None


def can_start(db: Session, task_id: int) -> bool:
    """True if every task blocking task_id is completed (or there are none)."""
    logger.debug(f"Checking if task {task_id} can start")

    for dependency in get_dependencies_for(db, task_id):
        blocking_task = get_task(db, dependency.blocking_task_id)
        if blocking_task is not None and blocking_task.status != TaskStatus.completed:
            logger.debug(f"Task {task_id} cannot start: task {blocking_task.id} is {blocking_task.status.value}")
            return False

    return True


def get_blocking_reasons(db: Session, task_id: int) -> List[str]:
    """One message per blocking task that is not completed yet."""
    reasons = []
    for dependency in get_dependencies_for(db, task_id):
        blocking_task = get_task(db, dependency.blocking_task_id)
        if blocking_task is not None and blocking_task.status != TaskStatus.completed:
            reasons.append(f"Waiting for task '{blocking_task.title}' (#{blocking_task.id}) to be completed")

    logger.debug(f"Task {task_id} has {len(reasons)} blocking reason(s)")
    return reasons


def get_reopen_conflicts(db: Session, task_id: int) -> List[str]:
    """One message per dependent task that is in progress or completed."""
    conflicts = []
    for dependency in get_dependents_for(db, task_id):
        dependent_task = get_task(db, dependency.blocked_task_id)
        if dependent_task is not None and dependent_task.status in ACTIVE_DEPENDENT_STATUSES:
            conflicts.append(
                f"'{dependent_task.title}' (#{dependent_task.id}) is currently {dependent_task.status.value}"
            )
            logger.warning(
                f"Reopening task {task_id} would affect dependent task {dependent_task.id} "
                f"which is currently {dependent_task.status.value}"
            )
    return conflicts


# ============== Precondition checks ==============
# Each returns None when satisfied, or a rejecting TransitionDecision.

PreconditionCheck = Callable[[Session, models.Task, TaskStatus, TaskStatus], Optional[TransitionDecision]]


def require_can_start(
    db: Session, task: models.Task, old_status: TaskStatus, new_status: TaskStatus
) -> Optional[TransitionDecision]:
    reasons = get_blocking_reasons(db, task.id)
    if not reasons:
        return None

    action = "reactivate task" if old_status == TaskStatus.cancelled else "change task status"
    return TransitionDecision(
        allowed=False,
        reasons=reasons,
        message=f"Cannot {action} because it is blocked by dependencies: {'; '.join(reasons)}"
    )


def require_no_active_dependents(
    db: Session, task: models.Task, old_status: TaskStatus, new_status: TaskStatus
) -> Optional[TransitionDecision]:
    logger.warning(f"Completed task {task.id} is being reopened. This may block dependent tasks.")

    conflicts = get_reopen_conflicts(db, task.id)
    if not conflicts:
        return None

    return TransitionDecision(
        allowed=False,
        reasons=conflicts,
        message=(
            "Cannot reopen this task because the following dependent tasks would become invalid: "
            f"{'; '.join(conflicts)}. Please move these tasks back to Pending first, or remove the dependencies."
        )
    )


TRANSITION_RULES: Dict[Tuple[TaskStatus, TaskStatus], Tuple[PreconditionCheck, ...]] = {
    (TaskStatus.pending, TaskStatus.in_progress): (require_can_start,),
    (TaskStatus.pending, TaskStatus.completed): (require_can_start,),
    (TaskStatus.pending, TaskStatus.cancelled): (),

    (TaskStatus.in_progress, TaskStatus.pending): (),
    (TaskStatus.in_progress, TaskStatus.completed): (),
    (TaskStatus.in_progress, TaskStatus.cancelled): (),

    (TaskStatus.completed, TaskStatus.pending): (require_no_active_dependents,),
    (TaskStatus.completed, TaskStatus.in_progress): (require_no_active_dependents,),
    (TaskStatus.completed, TaskStatus.cancelled): (),

    (TaskStatus.cancelled, TaskStatus.pending): (),
    (TaskStatus.cancelled, TaskStatus.in_progress): (require_can_start,),
    (TaskStatus.cancelled, TaskStatus.completed): (require_can_start,),
}


def evaluate_transition(db: Session, task: models.Task, new_status: TaskStatus) -> TransitionDecision:
    """Decide whether task may move to new_status. Never writes."""
    old_status = task.status
    logger.info(f"Validating dependency constraints for task {task.id}: {old_status.value} -> {new_status.value}")

    if old_status == new_status:
        return TransitionDecision(allowed=True)

    if new_status == TaskStatus.cancelled:
        logger.info(
            f"Task {task.id} is being cancelled. Dependent tasks will remain blocked until dependencies are removed."
        )

    for check in TRANSITION_RULES[(old_status, new_status)]:
        decision = check(db, task, old_status, new_status)
        if decision is not None:
            logger.info(f"Transition rejected for task {task.id}: {decision.message}")
            return decision

    logger.info(f"Dependency constraint validation passed for task {task.id}")
    return TransitionDecision(allowed=True)


def validate_transition(db: Session, task: models.Task, new_status: TaskStatus) -> None:
    """
    Raise TaskBlockedError if the transition is not allowed.

    Raises:
        TaskBlockedError: carries the rejection message and per-task reasons
    """
    decision = evaluate_transition(db, task, new_status)
    if not decision.allowed:
        raise TaskBlockedError(decision.message, decision.reasons)
