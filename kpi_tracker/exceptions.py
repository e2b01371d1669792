"""
Custom exceptions for the KPI tracker application.
Provides specific exception types for better error handling and recovery.
"""


class KpiTrackerException(Exception):
    """Base exception for KPI tracker application"""
    pass


class TaskNotFoundException(KpiTrackerException):
    """Raised when a task is not found"""
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class UserNotFoundException(KpiTrackerException):
    """Raised when a user is not found in the company"""
    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class PermissionDeniedException(KpiTrackerException):
    """Raised when the acting user may not perform an operation"""
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Permission denied: {reason}")


class ValidationException(KpiTrackerException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")


class InvalidRangeException(ValidationException):
    """Raised when a numeric input falls outside its allowed range"""
    def __init__(self, field: str, value, minimum, maximum):
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(field, f"{value} is outside [{minimum}, {maximum}]")
