"""
Task repository - Data access layer for Task model.
Handles all database queries related to tasks.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from kpi_tracker.models import Task
from kpi_tracker.constants import TASK_STATUS_COMPLETED


class TaskRepository:
    """Repository for Task data access"""

    @staticmethod
    def get_by_id(db: Session, task_id: int, company_id: int) -> Optional[Task]:
        """Get task by ID within a company (soft-deleted tasks excluded)"""
        return db.query(Task).filter(
            and_(
                Task.id == task_id,
                Task.company_id == company_id,
                Task.is_active == True
            )
        ).first()

    @staticmethod
    def get_active_for_company(db: Session, company_id: int) -> List[Task]:
        """Get every active task of a company, in insertion order"""
        return db.query(Task).filter(
            and_(
                Task.company_id == company_id,
                Task.is_active == True
            )
        ).order_by(Task.id).all()

    @staticmethod
    def get_completed_for_company(db: Session, company_id: int) -> List[Task]:
        """Get active completed tasks of a company"""
        return db.query(Task).filter(
            and_(
                Task.company_id == company_id,
                Task.is_active == True,
                Task.status == TASK_STATUS_COMPLETED
            )
        ).order_by(Task.id).all()

    @staticmethod
    def get_active_for_employee(db: Session, user_id: int, company_id: int) -> List[Task]:
        """Get active tasks assigned to an employee"""
        return db.query(Task).filter(
            and_(
                Task.assigned_to == user_id,
                Task.company_id == company_id,
                Task.is_active == True
            )
        ).all()

    @staticmethod
    def get_completed_for_employee(
        db: Session,
        user_id: int,
        company_id: int,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None
    ) -> List[Task]:
        """Get completed tasks of an employee, optionally within [start_time, end_time)"""
        query = db.query(Task).filter(
            and_(
                Task.assigned_to == user_id,
                Task.company_id == company_id,
                Task.is_active == True,
                Task.status == TASK_STATUS_COMPLETED
            )
        )

        if start_time is not None:
            query = query.filter(Task.completed_date >= start_time)
        if end_time is not None:
            query = query.filter(Task.completed_date < end_time)

        return query.all()

    @staticmethod
    def count_for_company(db: Session, company_id: int, status: Optional[str] = None) -> int:
        """Count active tasks of a company, optionally by status"""
        query = db.query(Task).filter(
            and_(
                Task.company_id == company_id,
                Task.is_active == True
            )
        )

        if status is not None:
            query = query.filter(Task.status == status)

        return query.count()

    @staticmethod
    def create(db: Session, task: Task) -> Task:
        """Create a new task"""
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    @staticmethod
    def update(db: Session, task: Task) -> Task:
        """Update existing task"""
        db.commit()
        db.refresh(task)
        return task
