from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
import logging
import os
from pathlib import Path

from kpi_tracker.database import engine, get_db, Base
from kpi_tracker import models  # Import all models to register them with Base
from kpi_tracker.schemas import (
    TaskCreate, TaskUpdate, TaskResponse,
    LeaderboardResponse, DailySeries,
    AdminDashboardResponse, EmployeeDashboardResponse, EmployeeKpiResponse
)
from kpi_tracker.auth import verify_api_key, get_current_user, require_admin
from kpi_tracker.exceptions import (
    KpiTrackerException, TaskNotFoundException, UserNotFoundException,
    PermissionDeniedException, ValidationException
)
from kpi_tracker.services.date_service import DateService
from kpi_tracker.services.task_service import TaskService
from kpi_tracker.services.leaderboard_service import LeaderboardService
from kpi_tracker.services.progress_service import ProgressService
from kpi_tracker.services.dashboard_service import DashboardService
from kpi_tracker.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, DEFAULT_LOG_FILE,
    CORS_ALLOWED_ORIGINS, ROLE_ADMIN
)

LOG_DIR = os.getenv("KPI_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("KPI_TRACKER_LOG_FILE", DEFAULT_LOG_FILE)

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()  # Also log to console
    ]
)

logger = logging.getLogger("kpi_tracker")

app = FastAPI(
    title="KPI Tracker API",
    description="Task KPI scoring, leaderboard and daily progress",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def to_http_exception(exc: KpiTrackerException) -> HTTPException:
    """Map a service exception to its HTTP status"""
    if isinstance(exc, (TaskNotFoundException, UserNotFoundException)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, PermissionDeniedException):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, ValidationException):
        return HTTPException(status_code=400, detail=str(exc))
    logger.error(f"Unhandled service error: {exc}")
    return HTTPException(status_code=500, detail="Internal error")


# Startup event
@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)
    logger.info(f"KPI Tracker API started. Logging to: {log_path}")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down KPI Tracker API")


# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "KPI Tracker API", "status": "active"}


# ===== TASK ENDPOINTS =====

@app.post("/api/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED, dependencies=[Depends(verify_api_key)])
def create_task(
    task: TaskCreate,
    user: models.User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a new task (admin only)"""
    try:
        return TaskService(db).create_task(user.company_id, user, task)
    except KpiTrackerException as e:
        raise to_http_exception(e)


@app.get("/api/tasks/kpi/{user_id}", response_model=EmployeeKpiResponse, dependencies=[Depends(verify_api_key)])
def get_employee_kpi(
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get an employee's earned points over completed tasks"""
    if user.role != ROLE_ADMIN and user.id != user_id:
        raise HTTPException(status_code=403, detail="You can only view your own KPI")
    try:
        return DashboardService(db).get_employee_kpi(
            user_id, user.company_id, start_date, end_date
        )
    except KpiTrackerException as e:
        raise to_http_exception(e)


@app.get("/api/tasks/{task_id}", response_model=TaskResponse, dependencies=[Depends(verify_api_key)])
def get_task(
    task_id: int,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get a specific task"""
    try:
        return TaskService(db).get_task(task_id, user.company_id, user)
    except KpiTrackerException as e:
        raise to_http_exception(e)


@app.patch("/api/tasks/{task_id}", response_model=TaskResponse, dependencies=[Depends(verify_api_key)])
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a task; reporting completion_percent rescores it"""
    try:
        return TaskService(db).update_task(
            task_id, user.company_id, user, task_update, DateService.utc_now()
        )
    except KpiTrackerException as e:
        raise to_http_exception(e)


@app.delete("/api/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(verify_api_key)])
def delete_task(
    task_id: int,
    user: models.User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Soft-delete a task (admin only)"""
    try:
        TaskService(db).deactivate_task(task_id, user.company_id, user)
    except KpiTrackerException as e:
        raise to_http_exception(e)


# ===== DASHBOARD ENDPOINTS =====

@app.get("/api/dashboard/admin", response_model=AdminDashboardResponse, dependencies=[Depends(verify_api_key)])
def get_admin_dashboard(
    user: models.User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Company-wide counters"""
    return DashboardService(db).get_admin_dashboard(user.company_id, DateService.utc_now())


@app.get("/api/dashboard/employee", response_model=EmployeeDashboardResponse, dependencies=[Depends(verify_api_key)])
def get_employee_dashboard(
    user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Counters for the calling employee"""
    return DashboardService(db).get_employee_dashboard(user.id, user.company_id)


@app.get("/api/dashboard/leaderboard", response_model=LeaderboardResponse, dependencies=[Depends(verify_api_key)])
def get_leaderboard(
    user: models.User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Ranked employees of the company"""
    leaderboard = LeaderboardService(db).get_leaderboard(user.company_id)
    return {"leaderboard": leaderboard}


# ===== PROGRESS ENDPOINTS =====

@app.get("/api/projects/kpi-progress", response_model=DailySeries, dependencies=[Depends(verify_api_key)])
def get_company_kpi_progress(
    user: models.User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Daily earned points per employee"""
    today = DateService.utc_now().date()
    return ProgressService(db).get_company_progress(user.company_id, today)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("kpi_tracker.main:app", host="0.0.0.0", port=8000, reload=False)
