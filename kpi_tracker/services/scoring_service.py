"""
Points calculation service.
Converts a task's reported progress and deadlines into earned KPI points.
Does NOT touch the database or the clock (receives data via parameters).
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from kpi_tracker.models import Task
from kpi_tracker.schemas import PointsCalculationResult
from kpi_tracker.exceptions import InvalidRangeException, ValidationException
from kpi_tracker.services.date_service import DateService
from kpi_tracker.constants import (
    MIN_COMPLETION_PERCENT,
    MAX_COMPLETION_PERCENT,
    MIN_TASK_POINTS,
    FULL_CREDIT_RATIO,
    GRACE_CREDIT_RATIO,
    PARTIAL_CREDIT_RATIO,
    CREDIT_TIER_FULL,
    CREDIT_TIER_GRACE,
    CREDIT_TIER_LATE,
    CREDIT_TIER_IN_FLIGHT,
)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3)"""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_completion_percent(completion_percent) -> None:
    """
    Reject progress outside [0, 100].

    Out-of-range values are never clamped.

    Raises:
        ValidationException: If completion_percent is missing
        InvalidRangeException: If completion_percent is outside [0, 100]
    """
    if completion_percent is None:
        raise ValidationException("completion_percent", "value is required")
    if not MIN_COMPLETION_PERCENT <= completion_percent <= MAX_COMPLETION_PERCENT:
        raise InvalidRangeException(
            "completion_percent",
            completion_percent,
            MIN_COMPLETION_PERCENT,
            MAX_COMPLETION_PERCENT
        )


def calculate_task_points(
    points: Optional[int],
    completion_percent: int,
    end_time: Optional[datetime],
    grace_time: Optional[datetime],
    now: datetime
) -> PointsCalculationResult:
    """
    Calculate earned points for a progress report.

    Tiers, first match wins:
    - full:      100% done and now <= end_time           -> points
    - grace:     100% done and end_time < now <= grace_time -> points * 0.5
    - late:      now > grace_time (any progress)         -> points * progress * 0.3
    - in_flight: everything else, incl. no deadlines     -> points * progress * 0.3

    Late and in-flight share a formula but are reported as separate tiers.
    A task without end_time can never reach full or grace credit.

    Args:
        points: Full point budget of the task (>= 1)
        completion_percent: Reported progress (0-100)
        end_time: Soft deadline, or None
        grace_time: Hard deadline, or None
        now: Instant of the progress report

    Returns:
        PointsCalculationResult with rounded points, tier and awarded ratio

    Raises:
        ValidationException: If points is missing or below 1
        InvalidRangeException: If completion_percent is outside [0, 100]
    """
    if points is None or points < MIN_TASK_POINTS:
        raise ValidationException("points", f"must be at least {MIN_TASK_POINTS}")
    validate_completion_percent(completion_percent)

    now = DateService.to_naive_utc(now)
    end_time = DateService.to_naive_utc(end_time)
    grace_time = DateService.to_naive_utc(grace_time)

    progress = Decimal(str(completion_percent)) / Decimal(MAX_COMPLETION_PERCENT)
    finished = progress >= 1

    if finished and end_time is not None and now <= end_time:
        tier = CREDIT_TIER_FULL
        ratio = Decimal(FULL_CREDIT_RATIO)
    elif (
        finished
        and end_time is not None
        and grace_time is not None
        and end_time < now <= grace_time
    ):
        tier = CREDIT_TIER_GRACE
        ratio = Decimal(GRACE_CREDIT_RATIO)
    elif grace_time is not None and now > grace_time:
        tier = CREDIT_TIER_LATE
        ratio = progress * Decimal(PARTIAL_CREDIT_RATIO)
    else:
        tier = CREDIT_TIER_IN_FLIGHT
        ratio = progress * Decimal(PARTIAL_CREDIT_RATIO)

    return PointsCalculationResult(
        points=round_half_up(Decimal(points) * ratio),
        tier=tier,
        ratio=float(ratio)
    )


def compute_earned_points(task: Task, completion_percent: int, now: datetime) -> int:
    """
    Earned points for a task given a new progress report.

    The caller stores the result on the task and handles status and
    completed_date itself.
    """
    result = calculate_task_points(
        task.points,
        completion_percent,
        task.end_time,
        task.grace_time,
        now
    )
    return result.points
