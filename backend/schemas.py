from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class UserRole(str, Enum):
    admin = "admin"
    manager = "manager"
    member = "member"
    viewer = "viewer"


class AccountStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    suspended = "suspended"
    pending_verification = "pending_verification"


class ActivityType(str, Enum):
    """
    Known activity kinds for the task trail.

    Note: the database stores activity_type as VARCHAR(50), so rows written
    by other tools may carry kinds not listed here.
    """
    created = "created"
    status_changed = "status_changed"
    priority_changed = "priority_changed"
    assignee_changed = "assignee_changed"
    due_date_changed = "due_date_changed"
    category_changed = "category_changed"
    title_changed = "title_changed"
    description_changed = "description_changed"
    commented = "commented"
    dependency_added = "dependency_added"
    dependency_removed = "dependency_removed"


class DependencyType(str, Enum):
    blocked_by = "blocked_by"
    blocks = "blocks"


HEX_COLOR_PATTERN = r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$"


# User schemas
class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone_number: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)


class UserCreate(UserBase):
    role: UserRole = UserRole.member
    password: str = Field(..., min_length=8, max_length=100)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    role: Optional[UserRole] = None
    account_status: Optional[AccountStatus] = None


class User(UserBase):
    id: int
    role: UserRole
    account_status: AccountStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Category schemas
class CategoryBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: str = Field("#007bff", pattern=HEX_COLOR_PATTERN)
    is_active: bool = True


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    color: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    is_active: Optional[bool] = None


class Category(CategoryBase):
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Comment schemas
class CommentBase(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentCreate(CommentBase):
    pass


class CommentUpdate(CommentBase):
    pass


class Comment(CommentBase):
    id: int
    task_id: int
    user_id: int
    user_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Task Activity schemas
class TaskActivity(BaseModel):
    id: int
    task_id: int
    activity_type: str
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    description: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


# Task schemas
class TaskBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[datetime] = None
    category_id: Optional[int] = Field(None, gt=0)


class TaskCreate(TaskBase):
    status: TaskStatus = TaskStatus.pending
    user_id: Optional[int] = Field(None, gt=0, description="Assignee; defaults to the caller")


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    user_id: Optional[int] = Field(None, gt=0)
    category_id: Optional[int] = Field(None, gt=0)


class Task(TaskBase):
    id: int
    status: TaskStatus
    user_id: int
    user_name: Optional[str] = None
    category_name: Optional[str] = None
    category_color: Optional[str] = None
    completed_at: Optional[datetime] = None
    is_overdue: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Task Dependency schemas
class TaskDependencyCreate(BaseModel):
    task_id: int
    dependent_task_id: int
    dependency_type: DependencyType = DependencyType.blocked_by


class TaskDependency(BaseModel):
    id: int
    blocking_task_id: int
    blocked_task_id: int
    blocking_task_title: Optional[str] = None
    blocking_task_status: Optional[TaskStatus] = None
    blocked_task_title: Optional[str] = None
    blocked_task_status: Optional[TaskStatus] = None
    created_by_user_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class TaskDependencyView(TaskDependency):
    """An edge as seen from one of its tasks; dependency_type is derived, never stored."""
    dependency_type: DependencyType


class TaskDependencies(BaseModel):
    task_id: int
    blocked_by: List[TaskDependencyView] = []  # Tasks that block this one
    blocks: List[TaskDependencyView] = []      # Tasks that this one blocks
    can_start: bool = True
    blocking_reasons: List[str] = []
