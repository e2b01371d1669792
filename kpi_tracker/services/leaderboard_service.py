"""
Leaderboard service.
Ranks a company's employees by earned points minus a pending-task penalty.
"""
import logging
from typing import Iterable, List, Mapping, Optional
from sqlalchemy.orm import Session

from kpi_tracker.models import Task, User
from kpi_tracker.schemas import LeaderboardRow
from kpi_tracker.repositories.task_repository import TaskRepository
from kpi_tracker.repositories.user_repository import UserRepository
from kpi_tracker.constants import PENDING_STATUSES, PENDING_TASK_PENALTY

logger = logging.getLogger("kpi_tracker.leaderboard")


def build_leaderboard(
    tasks: Iterable[Task],
    users: Optional[Mapping[int, User]] = None
) -> List[LeaderboardRow]:
    """
    Group tasks by assignee and rank the groups.

    Per assignee:
        earned_points = sum of earned_points over all active tasks
        total_points  = sum of full budgets
        pending_tasks = tasks still pending, in progress or in review
        score         = earned_points - 5 * pending_tasks

    Rows are sorted by score, then earned_points, both descending. Full
    ties keep the order in which each assignee first appears in `tasks`.

    Args:
        tasks: Task snapshot for one company
        users: Known users by ID. When given, groups whose assignee is not
            in it are dropped with a warning.

    Returns:
        Ranked leaderboard rows (rank starts at 1)
    """
    groups = {}
    for task in tasks:
        if task.is_active is False or task.assigned_to is None:
            continue

        group = groups.get(task.assigned_to)
        if group is None:
            group = {"earned_points": 0, "total_points": 0, "pending_tasks": 0}
            groups[task.assigned_to] = group

        group["earned_points"] += task.earned_points or 0
        group["total_points"] += task.points or 0
        if task.status in PENDING_STATUSES:
            group["pending_tasks"] += 1

    entries = []
    for user_id, group in groups.items():
        user = None
        if users is not None:
            user = users.get(user_id)
            if user is None:
                logger.warning(
                    f"Leaderboard: tasks assigned to unknown user {user_id} skipped"
                )
                continue

        score = group["earned_points"] - group["pending_tasks"] * PENDING_TASK_PENALTY
        entries.append((user_id, user, group, score))

    # sorted() is stable, so full ties keep first-appearance order
    entries = sorted(entries, key=lambda e: (-e[3], -e[2]["earned_points"]))

    return [
        LeaderboardRow(
            rank=index + 1,
            user_id=user_id,
            first_name=user.first_name if user else None,
            last_name=user.last_name if user else None,
            email=user.email if user else None,
            earned_points=group["earned_points"],
            total_points=group["total_points"],
            pending_tasks=group["pending_tasks"],
            score=score
        )
        for index, (user_id, user, group, score) in enumerate(entries)
    ]


class LeaderboardService:
    """Service for the company leaderboard"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()

    def get_leaderboard(self, company_id: int) -> List[LeaderboardRow]:
        """Build the leaderboard from the company's current active tasks"""
        tasks = self.task_repo.get_active_for_company(self.db, company_id)
        users = {
            user.id: user
            for user in self.user_repo.get_company_users(self.db, company_id)
        }
        return build_leaderboard(tasks, users)
