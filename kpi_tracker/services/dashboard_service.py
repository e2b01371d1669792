"""
Dashboard service.
Summary counters for admins and employees, and per-employee KPI totals.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy.orm import Session

from kpi_tracker.schemas import (
    AdminDashboardResponse, EmployeeDashboardResponse, EmployeeKpiResponse
)
from kpi_tracker.repositories.task_repository import TaskRepository
from kpi_tracker.repositories.user_repository import UserRepository
from kpi_tracker.services.date_service import DateService
from kpi_tracker.services.scoring_service import round_half_up
from kpi_tracker.exceptions import UserNotFoundException, ValidationException
from kpi_tracker.constants import TASK_STATUS_COMPLETED


def completion_rate(completed: int, total: int) -> int:
    """Completed share as a whole percentage (0 when there is nothing to complete)"""
    if total <= 0:
        return 0
    return round_half_up(Decimal(completed) * 100 / Decimal(total))


class DashboardService:
    """Service for dashboard summaries"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()
        self.date_service = DateService()

    def get_admin_dashboard(self, company_id: int, now: datetime) -> AdminDashboardResponse:
        """
        Company-wide user and task counters.

        overdue_tasks counts unresolved tasks whose soft deadline passed before `now`.
        """
        total_tasks = self.task_repo.count_for_company(self.db, company_id)
        now = self.date_service.to_naive_utc(now)
        overdue_tasks = sum(
            1 for task in self.task_repo.get_active_for_company(self.db, company_id)
            if task.is_overdue(now)
        )
        completed_tasks = self.task_repo.count_for_company(
            self.db, company_id, TASK_STATUS_COMPLETED
        )
        return AdminDashboardResponse(
            total_users=self.user_repo.count_for_company(self.db, company_id),
            total_tasks=total_tasks,
            completed_tasks=completed_tasks,
            overdue_tasks=overdue_tasks,
            completion_rate=completion_rate(completed_tasks, total_tasks)
        )

    def get_employee_dashboard(self, user_id: int, company_id: int) -> EmployeeDashboardResponse:
        """
        Counters over an employee's active tasks.

        total_points sums earned_points of every active task, finished or not.
        """
        tasks = self.task_repo.get_active_for_employee(self.db, user_id, company_id)
        completed_tasks = sum(1 for t in tasks if t.status == TASK_STATUS_COMPLETED)

        return EmployeeDashboardResponse(
            total_tasks=len(tasks),
            completed_tasks=completed_tasks,
            total_points=sum(t.earned_points or 0 for t in tasks),
            completion_rate=completion_rate(completed_tasks, len(tasks))
        )

    def get_employee_kpi(
        self,
        user_id: int,
        company_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> EmployeeKpiResponse:
        """
        Earned points over an employee's completed tasks.

        When both dates are given, only tasks completed between them
        (inclusive, whole days) are counted.

        Raises:
            UserNotFoundException: If the user is not in the company
            ValidationException: If end_date is before start_date
        """
        user = self.user_repo.get_by_id(self.db, user_id, company_id)
        if not user:
            raise UserNotFoundException(user_id)

        start_time = end_time = None
        if start_date and end_date:
            if end_date < start_date:
                raise ValidationException("end_date", "must not be earlier than start_date")
            start_time, _ = self.date_service.get_day_range(start_date)
            _, end_time = self.date_service.get_day_range(end_date)

        tasks = self.task_repo.get_completed_for_employee(
            self.db, user_id, company_id, start_time, end_time
        )
        total_points = sum(t.earned_points or 0 for t in tasks)
        average_points = (
            round_half_up(Decimal(total_points) / Decimal(len(tasks))) if tasks else 0
        )

        return EmployeeKpiResponse(
            user_id=user.id,
            name=user.full_name(),
            email=user.email,
            total_points=total_points,
            completed_tasks=len(tasks),
            average_points=average_points,
            start_date=start_date if start_time else None,
            end_date=end_date if end_time else None
        )
