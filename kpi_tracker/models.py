from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, ForeignKey
from datetime import datetime

from kpi_tracker.database import Base
from kpi_tracker.constants import (
    TASK_STATUS_PENDING, TASK_STATUS_COMPLETED, TASK_STATUS_CANCELLED,
    DEFAULT_TASK_POINTS, DEFAULT_TASK_PRIORITY, DEFAULT_USER_NAME, ROLE_EMPLOYEE
)


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True, index=True)
    role = Column(String, default=ROLE_EMPLOYEE)  # admin, employee
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def full_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or DEFAULT_USER_NAME


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    project = Column(String, nullable=True)

    # Ownership and scoping
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    assigned_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    is_active = Column(Boolean, default=True, index=True)  # False = soft-deleted

    status = Column(String, default=TASK_STATUS_PENDING, index=True)  # pending, in-progress, review, completed, cancelled
    priority = Column(String, default=DEFAULT_TASK_PRIORITY)  # low, medium, high, critical

    # KPI points
    points = Column(Integer, default=DEFAULT_TASK_POINTS)   # Full budget (1-1000)
    completion_percent = Column(Integer, default=0)         # 0-100, reported by assignee
    completion_details = Column(String, default="")
    earned_points = Column(Integer, default=0)              # Recomputed on every progress report

    # Deadlines (naive UTC)
    end_time = Column(DateTime, nullable=True)    # Soft deadline
    grace_time = Column(DateTime, nullable=True)  # Hard deadline, >= end_time

    start_date = Column(DateTime, nullable=True)
    completed_date = Column(DateTime, nullable=True)  # Set once, first time progress hits 100

    estimated_hours = Column(Float, nullable=True)
    actual_hours = Column(Float, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def is_overdue(self, now: datetime) -> bool:
        """Task is unresolved and its soft deadline has passed"""
        if not self.end_time or self.status in (TASK_STATUS_COMPLETED, TASK_STATUS_CANCELLED):
            return False
        return now > self.end_time
