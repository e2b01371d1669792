"""
Date calculation and manipulation service.
Handles UTC normalization and calendar-day bucketing of task timestamps.
"""
from datetime import datetime, timedelta, date, timezone
from typing import Optional


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def utc_now() -> datetime:
        """
        Current instant as naive UTC, the form every stored timestamp uses.

        Only route handlers call this; services receive `now` as a parameter.
        """
        return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def to_naive_utc(dt: Optional[datetime]) -> Optional[datetime]:
        """
        Normalize a datetime to naive UTC.

        Aware datetimes are converted to UTC first; naive ones are assumed
        to already be UTC.
        """
        if dt is None:
            return None
        if dt.tzinfo is not None:
            return dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt

    @staticmethod
    def day_of(dt: Optional[datetime]) -> Optional[date]:
        """Calendar day (UTC) of a timestamp"""
        if dt is None:
            return None
        return DateService.to_naive_utc(dt).date()

    @staticmethod
    def get_day_range(target_date: date) -> tuple[datetime, datetime]:
        """
        Get datetime range for a full day (midnight to midnight).

        Args:
            target_date: Date to get range for

        Returns:
            Tuple of (day_start, day_end) datetimes
        """
        day_start = datetime.combine(target_date, datetime.min.time())
        day_end = datetime.combine(target_date + timedelta(days=1), datetime.min.time())
        return day_start, day_end
