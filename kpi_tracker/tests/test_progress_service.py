"""
Tests for the daily progress series.

Tests cover:
1. Bucketing by (employee, day)
2. Date range of the series
3. Fallbacks (updated_at for the day, budget for legacy rows)
4. Exclusions (unfinished, soft-deleted, unassigned)
5. Ordering and user names
"""
from datetime import date, datetime

from kpi_tracker.services.progress_service import (
    build_daily_series, effective_points, ProgressService
)
from kpi_tracker.tests.conftest import create_task

TODAY = date(2026, 4, 1)


class TestBucketing:
    """Tests for per-day sums"""

    def test_same_user_same_day_is_one_sample(self, db_session, company, employee):
        tasks = [
            create_task(db_session, company, employee, status="completed",
                        earned_points=10, completed_date=datetime(2026, 3, 5, 9, 0)),
            create_task(db_session, company, employee, status="completed",
                        earned_points=15, completed_date=datetime(2026, 3, 5, 17, 30)),
        ]

        series = build_daily_series(tasks, TODAY)

        assert len(series.data) == 1
        sample = series.data[0]
        assert sample.user_id == employee.id
        assert sample.date == date(2026, 3, 5)
        assert sample.points == 25

    def test_different_days_are_separate_samples(self, db_session, company, employee):
        tasks = [
            create_task(db_session, company, employee, status="completed",
                        earned_points=10, completed_date=datetime(2026, 3, 5, 23, 59)),
            create_task(db_session, company, employee, status="completed",
                        earned_points=15, completed_date=datetime(2026, 3, 6, 0, 1)),
        ]

        series = build_daily_series(tasks, TODAY)

        assert [(s.date, s.points) for s in series.data] == [
            (date(2026, 3, 5), 10),
            (date(2026, 3, 6), 15),
        ]

    def test_different_users_same_day_are_separate_samples(self, db_session, company, employee, second_employee):
        completed = datetime(2026, 3, 5, 12, 0)
        tasks = [
            create_task(db_session, company, employee, status="completed", earned_points=10, completed_date=completed),
            create_task(db_session, company, second_employee, status="completed", earned_points=20, completed_date=completed),
        ]

        series = build_daily_series(tasks, TODAY)

        assert len(series.data) == 2


class TestDateRange:
    """Tests for start_date / end_date"""

    def test_range_spans_first_and_last_day(self, db_session, company, employee):
        tasks = [
            create_task(db_session, company, employee, status="completed",
                        earned_points=5, completed_date=datetime(2026, 3, 9)),
            create_task(db_session, company, employee, status="completed",
                        earned_points=5, completed_date=datetime(2026, 3, 2)),
            create_task(db_session, company, employee, status="completed",
                        earned_points=5, completed_date=datetime(2026, 3, 5)),
        ]

        series = build_daily_series(tasks, TODAY)

        assert series.start_date == date(2026, 3, 2)
        assert series.end_date == date(2026, 3, 9)

    def test_empty_series_defaults_to_today(self):
        series = build_daily_series([], TODAY)

        assert series.start_date == TODAY
        assert series.end_date == TODAY
        assert series.data == []


class TestFallbacks:
    """Tests for legacy rows"""

    def test_updated_at_used_when_completed_date_missing(self, db_session, company, employee):
        task = create_task(db_session, company, employee, status="completed", earned_points=7,
                           completed_date=None, updated_at=datetime(2026, 2, 14, 8, 0))

        series = build_daily_series([task], TODAY)

        assert series.data[0].date == date(2026, 2, 14)

    def test_budget_used_when_earned_points_is_zero(self, db_session, company, employee):
        task = create_task(db_session, company, employee, status="completed", points=40,
                           earned_points=0, completed_date=datetime(2026, 3, 1))

        assert effective_points(task) == 40
        assert build_daily_series([task], TODAY).data[0].points == 40

    def test_earned_points_preferred_over_budget(self, db_session, company, employee):
        task = create_task(db_session, company, employee, status="completed", points=40,
                           earned_points=12, completed_date=datetime(2026, 3, 1))

        assert effective_points(task) == 12


class TestExclusions:
    """Tests for tasks that never reach the series"""

    def test_only_completed_tasks_count(self, db_session, company, employee):
        when = datetime(2026, 3, 1)
        tasks = [
            create_task(db_session, company, employee, status="in-progress", earned_points=9, completed_date=when),
            create_task(db_session, company, employee, status="cancelled", earned_points=9, completed_date=when),
            create_task(db_session, company, employee, status="completed", earned_points=3, completed_date=when),
        ]

        series = build_daily_series(tasks, TODAY)

        assert series.data[0].points == 3

    def test_soft_deleted_tasks_are_ignored(self, db_session, company, employee):
        task = create_task(db_session, company, employee, status="completed", earned_points=9,
                           completed_date=datetime(2026, 3, 1), is_active=False)

        series = build_daily_series([task], TODAY)

        assert series.data == []
        assert series.start_date == TODAY

    def test_unassigned_tasks_are_ignored(self, db_session, company):
        task = create_task(db_session, company, None, status="completed", earned_points=9,
                           completed_date=datetime(2026, 3, 1))

        assert build_daily_series([task], TODAY).data == []


class TestOrderingAndNames:
    """Tests for sort order and display names"""

    def test_sorted_by_day_then_user(self, db_session, company, employee, second_employee):
        tasks = [
            create_task(db_session, company, second_employee, status="completed",
                        earned_points=1, completed_date=datetime(2026, 3, 2)),
            create_task(db_session, company, second_employee, status="completed",
                        earned_points=1, completed_date=datetime(2026, 3, 1)),
            create_task(db_session, company, employee, status="completed",
                        earned_points=1, completed_date=datetime(2026, 3, 2)),
        ]

        series = build_daily_series(tasks, TODAY)

        assert [(s.date, s.user_id) for s in series.data] == [
            (date(2026, 3, 1), second_employee.id),
            (date(2026, 3, 2), employee.id),
            (date(2026, 3, 2), second_employee.id),
        ]

    def test_unresolved_user_is_unknown(self, db_session, company, employee):
        task = create_task(db_session, company, employee, status="completed",
                           earned_points=1, completed_date=datetime(2026, 3, 2))

        series = build_daily_series([task], TODAY, {})

        assert series.data[0].user_name == "Unknown"


class TestProgressService:
    """Tests for the database-backed series"""

    def test_resolves_names_and_scopes_company(self, db_session, company, other_company, employee, outsider):
        create_task(db_session, company, employee, status="completed",
                    earned_points=10, completed_date=datetime(2026, 3, 2))
        create_task(db_session, other_company, outsider, status="completed",
                    earned_points=99, completed_date=datetime(2026, 3, 2))

        series = ProgressService(db_session).get_company_progress(company.id, TODAY)

        assert len(series.data) == 1
        assert series.data[0].user_name == "Eve Worker"
        assert series.data[0].points == 10

    def test_no_completed_tasks(self, db_session, company, employee):
        create_task(db_session, company, employee, status="pending")

        series = ProgressService(db_session).get_company_progress(company.id, TODAY)

        assert series.data == []
        assert series.start_date == series.end_date == TODAY
