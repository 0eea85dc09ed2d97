from fastapi import FastAPI, HTTPException, Depends, Query, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional
import logging
import os

from database import get_db, engine, Base
import models
import schemas
from activity_log import list_activities, record_activity
from auth.dependencies import get_current_user, require_role
from auth.security import hash_password
from dependency_graph import (
    get_dependencies_for,
    get_dependents_for,
    get_edge,
    graph_mutation_lock,
    list_edges_for_task,
)
from dependency_guard import create_dependency, delete_dependency
from errors import TaskManagementError, TaskBlockedError
from status_transitions import can_start, get_blocking_reasons, validate_transition
from task_store import get_task, set_task_status, task_exists
from time_utils import is_overdue

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

app = FastAPI(
    title="Task Management API",
    description="Tasks, users, categories, comments and task dependencies",
    version="1.0.0"
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def create_tables():
    """Create missing tables. Schema migrations are managed outside this service."""
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready (dialect: {engine.dialect.name})")


@app.exception_handler(TaskManagementError)
async def task_management_error_handler(request: Request, exc: TaskManagementError):
    """Translate core errors: NotFound -> 404, InvalidArgument/Conflict/Blocked -> 400."""
    content = {"detail": exc.message}
    if isinstance(exc, TaskBlockedError):
        content["reasons"] = exc.reasons
    logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# ============== Serialization Helpers ==============

def serialize_task(task: models.Task) -> dict:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "status": task.status.value,
        "priority": task.priority.value,
        "due_date": task.due_date,
        "completed_at": task.completed_at,
        "user_id": task.user_id,
        "user_name": task.user.name if task.user else None,
        "category_id": task.category_id,
        "category_name": task.category.name if task.category else None,
        "category_color": task.category.color if task.category else None,
        "is_overdue": is_overdue(task.due_date, task.status),
        "created_at": task.created_at,
        "updated_at": task.updated_at,
    }


def serialize_comment(comment: models.TaskComment) -> dict:
    return {
        "id": comment.id,
        "content": comment.content,
        "task_id": comment.task_id,
        "user_id": comment.user_id,
        "user_name": comment.user.name if comment.user else None,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


def serialize_activity(activity: models.TaskActivity) -> dict:
    return {
        "id": activity.id,
        "task_id": activity.task_id,
        "activity_type": activity.activity_type,
        "user_id": activity.user_id,
        "user_name": activity.user.name if activity.user else None,
        "description": activity.description,
        "old_value": activity.old_value,
        "new_value": activity.new_value,
        "created_at": activity.created_at,
    }


def serialize_dependency(edge: models.TaskDependency, dependency_type: Optional[models.DependencyType] = None) -> dict:
    data = {
        "id": edge.id,
        "blocking_task_id": edge.blocking_task_id,
        "blocked_task_id": edge.blocked_task_id,
        "blocking_task_title": edge.blocking_task.title,
        "blocking_task_status": edge.blocking_task.status.value,
        "blocked_task_title": edge.blocked_task.title,
        "blocked_task_status": edge.blocked_task.status.value,
        "created_by_user_id": edge.created_by_user_id,
        "created_at": edge.created_at,
    }
    if dependency_type is not None:
        data["dependency_type"] = dependency_type.value
    return data


def get_task_or_404(db: Session, task_id: int) -> models.Task:
    task = get_task(db, task_id)
    if not task:
        logger.info(f"Task {task_id} not found")
        raise HTTPException(status_code=404, detail=f"Task with ID {task_id} not found.")
    return task


def require_user_exists(db: Session, user_id: int) -> models.User:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        logger.info(f"User {user_id} not found")
        raise HTTPException(status_code=400, detail=f"User with ID {user_id} does not exist.")
    return user


def require_category_exists(db: Session, category_id: int) -> models.Category:
    category = db.query(models.Category).filter(models.Category.id == category_id).first()
    if not category:
        logger.info(f"Category {category_id} not found")
        raise HTTPException(status_code=400, detail=f"Category with ID {category_id} does not exist.")
    return category


# ============== Users ==============

@app.get("/api/users", response_model=List[schemas.User])
def list_users(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all users."""
    return db.query(models.User).order_by(models.User.id).all()


@app.post("/api/users", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
def create_user(
    user: schemas.UserCreate,
    current_user: models.User = Depends(require_role(models.UserRole.admin, models.UserRole.manager)),
    db: Session = Depends(get_db)
):
    """Create a user (admin or manager)."""
    logger.info(f"User {current_user.id} creating user {user.email}")

    existing = db.query(models.User).filter(models.User.email == user.email).first()
    if existing:
        logger.info(f"Email {user.email} already registered")
        raise HTTPException(status_code=400, detail=f"A user with email {user.email} already exists.")

    db_user = models.User(
        name=user.name,
        email=user.email,
        password_hash=hash_password(user.password),
        phone_number=user.phone_number,
        department=user.department,
        role=models.UserRole(user.role.value),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)

    logger.info(f"User {db_user.id} created")
    return db_user


@app.get("/api/users/email/{email}", response_model=schemas.User)
def get_user_by_email(
    email: str,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = db.query(models.User).filter(models.User.email == email).first()
    if not user:
        raise HTTPException(status_code=404, detail=f"User with email {email} not found.")
    return user


@app.get("/api/users/{user_id}", response_model=schemas.User)
def get_user(
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")
    return user


@app.put("/api/users/{user_id}", response_model=schemas.User)
def update_user(
    user_id: int,
    user_update: schemas.UserUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a user. Users may edit their own profile; role and account status need an admin."""
    logger.info(f"User {current_user.id} updating user {user_id}")

    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")

    is_admin = current_user.role == models.UserRole.admin
    if current_user.id != user_id and not is_admin:
        raise HTTPException(status_code=403, detail="You can only update your own profile")

    update_data = user_update.model_dump(exclude_unset=True)

    if ("role" in update_data or "account_status" in update_data) and not is_admin:
        raise HTTPException(status_code=403, detail="Only admins can change roles or account status")

    for field_name in ("name", "email", "role", "account_status"):
        if field_name in update_data and update_data[field_name] is None:
            raise HTTPException(status_code=400, detail=f"{field_name} cannot be null")

    if "email" in update_data and update_data["email"] != user.email:
        taken = db.query(models.User).filter(models.User.email == update_data["email"]).first()
        if taken:
            raise HTTPException(status_code=400, detail=f"A user with email {update_data['email']} already exists.")

    if "role" in update_data:
        update_data["role"] = models.UserRole(update_data["role"].value)
    if "account_status" in update_data:
        update_data["account_status"] = models.AccountStatus(update_data["account_status"].value)

    for key, value in update_data.items():
        setattr(user, key, value)

    db.commit()
    db.refresh(user)
    logger.info(f"User {user_id} updated")
    return user


@app.delete("/api/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    current_user: models.User = Depends(require_role(models.UserRole.admin)),
    db: Session = Depends(get_db)
):
    """Delete a user and the tasks and comments they own (admin only)."""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")

    user = db.query(models.User).filter(models.User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail=f"User with ID {user_id} not found.")

    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} deleted by {current_user.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Categories ==============

@app.get("/api/categories", response_model=List[schemas.Category])
def list_categories(
    active_only: bool = Query(False),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = db.query(models.Category)
    if active_only:
        query = query.filter(models.Category.is_active == True)
    return query.order_by(models.Category.name).all()


@app.post("/api/categories", response_model=schemas.Category, status_code=status.HTTP_201_CREATED)
def create_category(
    category: schemas.CategoryCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    logger.info(f"User {current_user.id} creating category '{category.name}'")
    db_category = models.Category(**category.model_dump())
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


@app.get("/api/categories/{category_id}", response_model=schemas.Category)
def get_category(
    category_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    category = db.query(models.Category).filter(models.Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=f"Category with ID {category_id} not found.")
    return category


@app.put("/api/categories/{category_id}", response_model=schemas.Category)
def update_category(
    category_id: int,
    category_update: schemas.CategoryUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    category = db.query(models.Category).filter(models.Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=f"Category with ID {category_id} not found.")

    update_data = category_update.model_dump(exclude_unset=True)
    for field_name in ("name", "color", "is_active"):
        if field_name in update_data and update_data[field_name] is None:
            raise HTTPException(status_code=400, detail=f"{field_name} cannot be null")

    for key, value in update_data.items():
        setattr(category, key, value)

    db.commit()
    db.refresh(category)
    logger.info(f"Category {category_id} updated")
    return category


@app.delete("/api/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a category; its tasks become uncategorized."""
    category = db.query(models.Category).filter(models.Category.id == category_id).first()
    if not category:
        raise HTTPException(status_code=404, detail=f"Category with ID {category_id} not found.")

    db.delete(category)
    db.commit()
    logger.info(f"Category {category_id} deleted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Tasks ==============

# Field -> (activity type, description) for the update trail
TASK_FIELD_ACTIVITIES = {
    "title": (models.ActivityType.title_changed, "Title changed"),
    "description": (models.ActivityType.description_changed, "Description changed"),
    "status": (models.ActivityType.status_changed, "Status changed"),
    "priority": (models.ActivityType.priority_changed, "Priority changed"),
    "user_id": (models.ActivityType.assignee_changed, "Assignee changed"),
    "category_id": (models.ActivityType.category_changed, "Category changed"),
    "due_date": (models.ActivityType.due_date_changed, "Due date changed"),
}

NON_NULLABLE_TASK_FIELDS = {"title", "status", "priority", "user_id"}


def activity_value(value) -> Optional[str]:
    """String form of a task field for the activity trail."""
    if value is None:
        return None
    if hasattr(value, "value"):
        return value.value
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")
    return str(value)


@app.get("/api/tasks", response_model=List[schemas.Task])
def list_tasks(
    user_id: Optional[int] = None,
    category_id: Optional[int] = None,
    status: Optional[schemas.TaskStatus] = None,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List tasks, optionally filtered by assignee, category and status."""
    logger.debug(f"Listing tasks: user_id={user_id}, category_id={category_id}, status={status}")

    query = db.query(models.Task).options(
        joinedload(models.Task.user),
        joinedload(models.Task.category)
    )
    if user_id is not None:
        query = query.filter(models.Task.user_id == user_id)
    if category_id is not None:
        query = query.filter(models.Task.category_id == category_id)
    if status is not None:
        query = query.filter(models.Task.status == models.TaskStatus(status.value))

    tasks = query.order_by(models.Task.id).all()
    logger.debug(f"Found {len(tasks)} task(s)")
    return [serialize_task(task) for task in tasks]


@app.post("/api/tasks", response_model=schemas.Task, status_code=status.HTTP_201_CREATED)
def create_task(
    task: schemas.TaskCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a task. The assignee defaults to the caller."""
    logger.info(f"User {current_user.id} creating task '{task.title}'")

    assignee_id = task.user_id if task.user_id is not None else current_user.id
    require_user_exists(db, assignee_id)
    if task.category_id is not None:
        require_category_exists(db, task.category_id)

    db_task = models.Task(
        title=task.title,
        description=task.description,
        priority=models.TaskPriority(task.priority.value),
        due_date=task.due_date,
        user_id=assignee_id,
        category_id=task.category_id,
    )
    # A new task has no dependencies, so any initial status is allowed
    db_task.status = models.TaskStatus.pending
    set_task_status(db, db_task, models.TaskStatus(task.status.value))

    db.add(db_task)
    db.commit()
    db.refresh(db_task)

    record_activity(
        db,
        task_id=db_task.id,
        actor_id=current_user.id,
        activity_type=models.ActivityType.created,
        description="Task created",
    )

    logger.info(f"Task {db_task.id} created")
    return serialize_task(db_task)


@app.get("/api/tasks/{task_id}", response_model=schemas.Task)
def get_task_detail(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return serialize_task(get_task_or_404(db, task_id))


@app.put("/api/tasks/{task_id}", response_model=schemas.Task)
@app.post("/api/tasks/{task_id}", response_model=schemas.Task)
def update_task(
    task_id: int,
    task_update: schemas.TaskUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update task fields.

    A status change must pass the dependency-aware transition rules first;
    a rejected transition leaves the task untouched and returns 400.
    """
    logger.info(f"User {current_user.id} updating task {task_id}")

    task = get_task_or_404(db, task_id)
    update_data = task_update.model_dump(exclude_unset=True)

    for field_name in NON_NULLABLE_TASK_FIELDS:
        if field_name in update_data and update_data[field_name] is None:
            raise HTTPException(status_code=400, detail=f"{field_name} cannot be null")

    if "user_id" in update_data:
        require_user_exists(db, update_data["user_id"])
    if update_data.get("category_id") is not None:
        require_category_exists(db, update_data["category_id"])

    if "status" in update_data:
        update_data["status"] = models.TaskStatus(update_data["status"].value)
    if "priority" in update_data:
        update_data["priority"] = models.TaskPriority(update_data["priority"].value)

    with graph_mutation_lock(db):
        # Validate against the committed row, not the copy loaded before the lock
        db.expire(task)
        task = get_task_or_404(db, task_id)

        # Track old values for the activity trail
        old_values = {key: activity_value(getattr(task, key)) for key in update_data.keys()}

        if "status" in update_data:
            validate_transition(db, task, update_data["status"])

        for key, value in update_data.items():
            if key == "status":
                set_task_status(db, task, value)
            else:
                setattr(task, key, value)

        db.commit()

    db.refresh(task)

    # One activity per field that actually changed
    for field_name, new_value in update_data.items():
        old_str = old_values[field_name]
        new_str = activity_value(new_value)
        if old_str == new_str:
            continue

        activity_type, description = TASK_FIELD_ACTIVITIES[field_name]
        if field_name == "description":
            # Descriptions are too long for the value columns
            old_str, new_str = None, None
        record_activity(
            db,
            task_id=task_id,
            actor_id=current_user.id,
            activity_type=activity_type,
            description=description,
            old_value=old_str,
            new_value=new_str,
        )
        logger.debug(f"Activity recorded for field '{field_name}': {old_str} -> {new_str}")

    logger.info(f"Task {task_id} updated successfully")
    return serialize_task(task)


@app.delete("/api/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a task together with its comments, activities and dependency edges."""
    task = get_task_or_404(db, task_id)

    with graph_mutation_lock(db):
        db.delete(task)
        db.commit()

    logger.info(f"Task {task_id} deleted by user {current_user.id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Comments ==============

def get_comment_or_404(db: Session, task_id: int, comment_id: int) -> models.TaskComment:
    comment = db.query(models.TaskComment)\
        .filter(models.TaskComment.id == comment_id, models.TaskComment.task_id == task_id)\
        .first()
    if not comment:
        raise HTTPException(status_code=404, detail=f"Comment with ID {comment_id} not found.")
    return comment


def require_comment_author(comment: models.TaskComment, current_user: models.User) -> None:
    if comment.user_id != current_user.id and current_user.role != models.UserRole.admin:
        logger.info(f"User {current_user.id} is not the author of comment {comment.id}")
        raise HTTPException(status_code=403, detail="Only the author can modify this comment")


@app.get("/api/tasks/{task_id}/comments", response_model=List[schemas.Comment])
def list_comments(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    get_task_or_404(db, task_id)
    comments = db.query(models.TaskComment)\
        .options(joinedload(models.TaskComment.user))\
        .filter(models.TaskComment.task_id == task_id)\
        .order_by(models.TaskComment.created_at, models.TaskComment.id)\
        .all()
    return [serialize_comment(c) for c in comments]


@app.post("/api/tasks/{task_id}/comments", response_model=schemas.Comment, status_code=status.HTTP_201_CREATED)
def create_comment(
    task_id: int,
    comment: schemas.CommentCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    get_task_or_404(db, task_id)

    db_comment = models.TaskComment(content=comment.content, task_id=task_id, user_id=current_user.id)
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)

    record_activity(
        db,
        task_id=task_id,
        actor_id=current_user.id,
        activity_type=models.ActivityType.commented,
        description="Comment added",
    )

    logger.info(f"Comment {db_comment.id} added to task {task_id}")
    return serialize_comment(db_comment)


@app.get("/api/tasks/{task_id}/comments/{comment_id}", response_model=schemas.Comment)
def get_comment(
    task_id: int,
    comment_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return serialize_comment(get_comment_or_404(db, task_id, comment_id))


@app.put("/api/tasks/{task_id}/comments/{comment_id}", response_model=schemas.Comment)
def update_comment(
    task_id: int,
    comment_id: int,
    comment_update: schemas.CommentUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = get_comment_or_404(db, task_id, comment_id)
    require_comment_author(comment, current_user)

    comment.content = comment_update.content
    db.commit()
    db.refresh(comment)
    return serialize_comment(comment)


@app.delete("/api/tasks/{task_id}/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    task_id: int,
    comment_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    comment = get_comment_or_404(db, task_id, comment_id)
    require_comment_author(comment, current_user)

    db.delete(comment)
    db.commit()
    logger.info(f"Comment {comment_id} deleted from task {task_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============== Activities ==============

@app.get("/api/tasks/{task_id}/activities", response_model=List[schemas.TaskActivity])
def get_task_activities(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Activity trail for a task, newest first."""
    get_task_or_404(db, task_id)
    return [serialize_activity(a) for a in list_activities(db, task_id)]


# ============== Dependencies ==============

@app.get("/api/tasks/{task_id}/dependencies", response_model=schemas.TaskDependencies)
def get_task_dependencies(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Blocking and blocked tasks, plus whether the task can start now."""
    logger.debug(f"Getting task dependencies for task_id={task_id}")
    get_task_or_404(db, task_id)

    blocked_by = [
        serialize_dependency(edge, models.DependencyType.blocked_by)
        for edge in get_dependencies_for(db, task_id)
    ]
    blocks = [
        serialize_dependency(edge, models.DependencyType.blocks)
        for edge in get_dependents_for(db, task_id)
    ]
    blocking_reasons = get_blocking_reasons(db, task_id)

    logger.info(f"Task {task_id}: {len(blocked_by)} blocker(s), {len(blocks)} dependent(s), can_start={not blocking_reasons}")
    return {
        "task_id": task_id,
        "blocked_by": blocked_by,
        "blocks": blocks,
        "can_start": can_start(db, task_id),
        "blocking_reasons": blocking_reasons,
    }


@app.get("/api/tasks/{task_id}/dependencies/can-start", response_model=bool)
def get_task_can_start(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    get_task_or_404(db, task_id)
    return can_start(db, task_id)


@app.get("/api/tasks/{task_id}/dependencies/blocking-reasons", response_model=List[str])
def get_task_blocking_reasons(
    task_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    get_task_or_404(db, task_id)
    return get_blocking_reasons(db, task_id)


@app.post("/api/taskdependencies", response_model=schemas.TaskDependency, status_code=status.HTTP_201_CREATED)
def add_task_dependency(
    dependency: schemas.TaskDependencyCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a dependency. blocked_by: task_id waits on dependent_task_id; blocks: the reverse."""
    logger.info(
        f"User {current_user.id} adding dependency: task {dependency.task_id} "
        f"{dependency.dependency_type.value} task {dependency.dependent_task_id}"
    )

    edge = create_dependency(
        db,
        task_id=dependency.task_id,
        dependent_task_id=dependency.dependent_task_id,
        dependency_type=models.DependencyType(dependency.dependency_type.value),
        creator_id=current_user.id,
    )
    return serialize_dependency(edge)


@app.get("/api/taskdependencies", response_model=List[schemas.TaskDependency])
def list_task_dependencies(
    task_id: int = Query(..., gt=0),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Every dependency touching task_id, in either direction."""
    if not task_exists(db, task_id):
        raise HTTPException(status_code=404, detail=f"Task with ID {task_id} not found.")
    return [serialize_dependency(edge) for edge in list_edges_for_task(db, task_id)]


@app.get("/api/taskdependencies/{dependency_id}", response_model=schemas.TaskDependency)
def get_task_dependency(
    dependency_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    edge = get_edge(db, dependency_id)
    if not edge:
        raise HTTPException(status_code=404, detail=f"Dependency with ID {dependency_id} not found.")
    return serialize_dependency(edge)


@app.delete("/api/taskdependencies/{dependency_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_task_dependency(
    dependency_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    delete_dependency(db, dependency_id, actor_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
