"""
Application constants.
Scoring ratios, task statuses, roles and environment defaults.
"""
import os

# Task statuses
TASK_STATUS_PENDING = "pending"
TASK_STATUS_IN_PROGRESS = "in-progress"
TASK_STATUS_REVIEW = "review"
TASK_STATUS_COMPLETED = "completed"
TASK_STATUS_CANCELLED = "cancelled"

TASK_STATUSES = (
    TASK_STATUS_PENDING,
    TASK_STATUS_IN_PROGRESS,
    TASK_STATUS_REVIEW,
    TASK_STATUS_COMPLETED,
    TASK_STATUS_CANCELLED,
)

# Statuses a task may be created with; completion comes from a progress report
INITIAL_TASK_STATUSES = tuple(
    status for status in TASK_STATUSES if status != TASK_STATUS_COMPLETED
)

# Statuses counted as unresolved work on the leaderboard
PENDING_STATUSES = (
    TASK_STATUS_PENDING,
    TASK_STATUS_IN_PROGRESS,
    TASK_STATUS_REVIEW,
)

# Task priorities
TASK_PRIORITIES = ("low", "medium", "high", "critical")
DEFAULT_TASK_PRIORITY = "medium"

# User roles
ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"

# Task points budget
DEFAULT_TASK_POINTS = 10
MIN_TASK_POINTS = 1
MAX_TASK_POINTS = 1000

# Completion progress
MIN_COMPLETION_PERCENT = 0
MAX_COMPLETION_PERCENT = 100

# Credit tiers (share of the task budget)
FULL_CREDIT_RATIO = "1.0"      # completed on or before end_time
GRACE_CREDIT_RATIO = "0.5"     # completed between end_time and grace_time
PARTIAL_CREDIT_RATIO = "0.3"   # per unit of progress, late or still in flight

CREDIT_TIER_FULL = "full"
CREDIT_TIER_GRACE = "grace"
CREDIT_TIER_LATE = "late"
CREDIT_TIER_IN_FLIGHT = "in_flight"

# Leaderboard
PENDING_TASK_PENALTY = 5  # points deducted per unresolved task

# Daily progress
UNKNOWN_USER_NAME = "Unknown"
DEFAULT_USER_NAME = "User"

# Fields an employee may change on their own task
EMPLOYEE_UPDATABLE_FIELDS = (
    "status",
    "actual_hours",
    "completion_percent",
    "completion_details",
)

# Environment
DEFAULT_DATABASE_URL = "sqlite:///./kpi_tracker.db"
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/kpi-tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "app.log"
DEFAULT_API_KEY = "your-secret-key-change-me"

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "KPI_TRACKER_CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]
