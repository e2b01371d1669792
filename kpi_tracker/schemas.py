from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List

from kpi_tracker.constants import (
    TASK_STATUSES, INITIAL_TASK_STATUSES, TASK_PRIORITIES,
    TASK_STATUS_PENDING, DEFAULT_TASK_PRIORITY
)


def choice_pattern(choices) -> str:
    """Regex matching exactly one of `choices`"""
    return "^(" + "|".join(choices) + ")$"


TASK_STATUS_PATTERN = choice_pattern(TASK_STATUSES)
INITIAL_TASK_STATUS_PATTERN = choice_pattern(INITIAL_TASK_STATUSES)
TASK_PRIORITY_PATTERN = choice_pattern(TASK_PRIORITIES)


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=3000)
    project: Optional[str] = Field(None, max_length=200)
    priority: str = Field(default=DEFAULT_TASK_PRIORITY, pattern=TASK_PRIORITY_PATTERN)
    points: int = Field(default=10, ge=1, le=1000)
    start_date: Optional[datetime] = None
    end_time: Optional[datetime] = None    # Soft deadline
    grace_time: Optional[datetime] = None  # Hard deadline
    estimated_hours: Optional[float] = Field(None, ge=0)


class TaskCreate(TaskBase):
    assigned_to: int
    status: str = Field(default=TASK_STATUS_PENDING, pattern=INITIAL_TASK_STATUS_PATTERN)


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = Field(None, max_length=3000)
    project: Optional[str] = Field(None, max_length=200)
    status: Optional[str] = Field(None, pattern=TASK_STATUS_PATTERN)
    priority: Optional[str] = Field(None, pattern=TASK_PRIORITY_PATTERN)
    points: Optional[int] = Field(None, ge=1, le=1000)
    end_time: Optional[datetime] = None
    grace_time: Optional[datetime] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    actual_hours: Optional[float] = Field(None, ge=0)

    # Progress report
    completion_percent: Optional[int] = Field(None, ge=0, le=100)
    completion_details: Optional[str] = Field(None, max_length=2000)


class TaskResponse(TaskBase):
    id: int
    company_id: int
    assigned_to: Optional[int]
    assigned_by: Optional[int] = None
    status: str
    completion_percent: int = 0
    completion_details: Optional[str] = ""
    earned_points: int = 0
    completed_date: Optional[datetime] = None
    actual_hours: Optional[float] = None
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Scoring
class PointsCalculationResult(BaseModel):
    points: int
    tier: str   # full, grace, late, in_flight
    ratio: float  # share of the budget awarded, display only; points use the exact Decimal


# Leaderboard
class LeaderboardRow(BaseModel):
    rank: int
    user_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    earned_points: int = 0
    total_points: int = 0
    pending_tasks: int = 0
    score: int = 0


class LeaderboardResponse(BaseModel):
    leaderboard: List[LeaderboardRow]


# Daily progress
class DailyPointSample(BaseModel):
    user_id: int
    user_name: str
    date: date
    points: int


class DailySeries(BaseModel):
    start_date: date
    end_date: date
    data: List[DailyPointSample]


# Dashboards
class EmployeeDashboardResponse(BaseModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    total_points: int = 0
    completion_rate: int = 0


class AdminDashboardResponse(BaseModel):
    total_users: int = 0
    total_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    completion_rate: int = 0


class EmployeeKpiResponse(BaseModel):
    user_id: int
    name: str
    email: str
    total_points: int = 0
    completed_tasks: int = 0
    average_points: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
