"""
Task management service.
Handles task creation, progress reporting (with KPI scoring) and soft deletion.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from kpi_tracker.models import Task, User
from kpi_tracker.schemas import TaskCreate, TaskUpdate
from kpi_tracker.repositories.task_repository import TaskRepository
from kpi_tracker.repositories.user_repository import UserRepository
from kpi_tracker.services.date_service import DateService
from kpi_tracker.services.scoring_service import (
    compute_earned_points, validate_completion_percent
)
from kpi_tracker.exceptions import (
    TaskNotFoundException, UserNotFoundException,
    PermissionDeniedException, ValidationException
)
from kpi_tracker.constants import (
    ROLE_ADMIN, TASK_STATUS_COMPLETED, MAX_COMPLETION_PERCENT,
    EMPLOYEE_UPDATABLE_FIELDS
)

logger = logging.getLogger("kpi_tracker.tasks")

# Columns that cannot be cleared through an update
NON_NULLABLE_FIELDS = ("title", "status", "priority", "points", "completion_percent")


class TaskService:
    """Service for task management"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()
        self.date_service = DateService()

    def get_task(self, task_id: int, company_id: int, actor: User) -> Task:
        """
        Get a task visible to the acting user.

        Raises:
            TaskNotFoundException: If the task is not in the company
            PermissionDeniedException: If an employee asks for someone else's task
        """
        task = self.task_repo.get_by_id(self.db, task_id, company_id)
        if not task:
            raise TaskNotFoundException(task_id)
        self._check_task_access(task, actor)
        return task

    def create_task(self, company_id: int, actor: User, task_data: TaskCreate) -> Task:
        """
        Create a new task (admin only).

        Raises:
            PermissionDeniedException: If actor is not an admin
            UserNotFoundException: If the assignee is not an active user of the company
            ValidationException: If grace_time is before end_time, or the task
                would start out completed
        """
        self._require_admin(actor, "only admins can create tasks")
        if task_data.status == TASK_STATUS_COMPLETED:
            raise ValidationException("status", "tasks are completed through a progress report")

        assignee = self.user_repo.get_by_id(self.db, task_data.assigned_to, company_id)
        if not assignee:
            raise UserNotFoundException(task_data.assigned_to)

        task = Task(**task_data.model_dump())
        task.company_id = company_id
        task.assigned_by = actor.id
        task.is_active = True
        task.completion_percent = 0
        task.completion_details = ""
        task.earned_points = 0
        task.start_date = self.date_service.to_naive_utc(task.start_date)
        task.end_time = self.date_service.to_naive_utc(task.end_time)
        task.grace_time = self.date_service.to_naive_utc(task.grace_time)
        self._check_deadlines(task.end_time, task.grace_time)

        task = self.task_repo.create(self.db, task)
        logger.info(f"Task created: {task.title} assigned to {assignee.email}")
        return task

    def update_task(
        self,
        task_id: int,
        company_id: int,
        actor: User,
        task_update: TaskUpdate,
        now: datetime
    ) -> Task:
        """
        Apply an update and rescore the task when progress is reported.

        Employees may only touch their own tasks, and only the progress
        fields; anything else they send is ignored. When completion_percent
        is supplied, earned_points is recomputed from scratch (it can go
        down). Reaching 100% marks the task completed and stamps
        completed_date the first time only. Setting status to completed
        without a progress report is scored as a 100% report.

        Args:
            task_id: Task to update
            company_id: Company of the acting user
            actor: Acting user
            task_update: Fields to change
            now: Instant of the update, used for scoring

        Returns:
            Updated task

        Raises:
            TaskNotFoundException: If the task is not in the company
            PermissionDeniedException: If an employee updates someone else's task
            ValidationException: On invalid deadlines or progress
        """
        task = self.task_repo.get_by_id(self.db, task_id, company_id)
        if not task:
            raise TaskNotFoundException(task_id)
        self._check_task_access(task, actor)

        update_data = task_update.model_dump(exclude_unset=True)
        if actor.role != ROLE_ADMIN:
            ignored = set(update_data) - set(EMPLOYEE_UPDATABLE_FIELDS)
            if ignored:
                logger.debug(f"Task {task_id}: employee update ignores {sorted(ignored)}")
            update_data = {
                key: value for key, value in update_data.items()
                if key in EMPLOYEE_UPDATABLE_FIELDS
            }

        for key in NON_NULLABLE_FIELDS:
            if key in update_data and update_data[key] is None:
                del update_data[key]

        completion_percent = update_data.pop("completion_percent", None)
        if completion_percent is not None:
            validate_completion_percent(completion_percent)

        if update_data.get("status") == TASK_STATUS_COMPLETED:
            if completion_percent is None and task.status != TASK_STATUS_COMPLETED:
                # Completing without a progress report counts as a 100% report
                completion_percent = MAX_COMPLETION_PERCENT
            elif completion_percent is not None and completion_percent < MAX_COMPLETION_PERCENT:
                raise ValidationException(
                    "status", "a completed task needs completion_percent of 100"
                )

        for key in ("end_time", "grace_time"):
            if key in update_data:
                update_data[key] = self.date_service.to_naive_utc(update_data[key])

        self._check_deadlines(
            update_data.get("end_time", task.end_time),
            update_data.get("grace_time", task.grace_time)
        )

        for key, value in update_data.items():
            setattr(task, key, value)

        if completion_percent is not None:
            now = self.date_service.to_naive_utc(now)
            task.completion_percent = completion_percent

            if completion_percent >= MAX_COMPLETION_PERCENT:
                task.status = TASK_STATUS_COMPLETED
                if not task.completed_date:
                    task.completed_date = now

            task.earned_points = compute_earned_points(task, completion_percent, now)

        task = self.task_repo.update(self.db, task)
        logger.info(f"Task updated: {task.title} by {actor.email}")
        return task

    def deactivate_task(self, task_id: int, company_id: int, actor: User) -> Task:
        """Soft-delete a task (admin only)"""
        self._require_admin(actor, "only admins can delete tasks")

        task = self.task_repo.get_by_id(self.db, task_id, company_id)
        if not task:
            raise TaskNotFoundException(task_id)

        task.is_active = False
        task = self.task_repo.update(self.db, task)
        logger.info(f"Task deleted: {task.title} by {actor.email}")
        return task

    def _check_task_access(self, task: Task, actor: User) -> None:
        if actor.role != ROLE_ADMIN and task.assigned_to != actor.id:
            raise PermissionDeniedException("you can only access your own tasks")

    def _require_admin(self, actor: User, reason: str) -> None:
        if actor.role != ROLE_ADMIN:
            raise PermissionDeniedException(reason)

    def _check_deadlines(
        self,
        end_time: Optional[datetime],
        grace_time: Optional[datetime]
    ) -> None:
        """grace_time may not precede end_time"""
        if end_time and grace_time and grace_time < end_time:
            raise ValidationException("grace_time", "must not be earlier than end_time")
