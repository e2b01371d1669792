"""
Daily progress service.
Buckets earned points of completed tasks by (employee, completion day).
"""
from datetime import date
from typing import Iterable, Mapping, Optional
from sqlalchemy.orm import Session

from kpi_tracker.models import Task
from kpi_tracker.schemas import DailyPointSample, DailySeries
from kpi_tracker.repositories.task_repository import TaskRepository
from kpi_tracker.repositories.user_repository import UserRepository
from kpi_tracker.services.date_service import DateService
from kpi_tracker.constants import TASK_STATUS_COMPLETED, UNKNOWN_USER_NAME


def effective_points(task: Task) -> int:
    """Earned points, or the full budget for legacy rows that never got a score"""
    if task.earned_points is not None and task.earned_points > 0:
        return task.earned_points
    return task.points or 0


def build_daily_series(
    tasks: Iterable[Task],
    today: date,
    user_names: Optional[Mapping[int, str]] = None
) -> DailySeries:
    """
    Sum completed-task points per employee per calendar day.

    The day comes from completed_date, falling back to updated_at.
    Tasks that are inactive, not completed, unassigned or carry neither
    timestamp are skipped.

    Args:
        tasks: Task snapshot for one company
        today: Range reported when there are no samples
        user_names: Display names by user ID

    Returns:
        DailySeries sorted by day, then user_id
    """
    user_names = user_names or {}
    buckets = {}

    for task in tasks:
        if task.is_active is False or task.status != TASK_STATUS_COMPLETED:
            continue
        if task.assigned_to is None:
            continue

        day = DateService.day_of(task.completed_date or task.updated_at)
        if day is None:
            continue

        key = (task.assigned_to, day)
        buckets[key] = buckets.get(key, 0) + effective_points(task)

    samples = [
        DailyPointSample(
            user_id=user_id,
            user_name=user_names.get(user_id, UNKNOWN_USER_NAME),
            date=day,
            points=points
        )
        for (user_id, day), points in buckets.items()
    ]
    samples.sort(key=lambda s: (s.date, s.user_id))

    if not samples:
        return DailySeries(start_date=today, end_date=today, data=[])

    return DailySeries(
        start_date=samples[0].date,
        end_date=samples[-1].date,
        data=samples
    )


class ProgressService:
    """Service for company-wide KPI progress"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()

    def get_company_progress(self, company_id: int, today: date) -> DailySeries:
        """Daily point series over the company's completed tasks"""
        tasks = self.task_repo.get_completed_for_company(self.db, company_id)
        user_names = {
            user.id: user.full_name()
            for user in self.user_repo.get_company_users(self.db, company_id)
        }
        return build_daily_series(tasks, today, user_names)
