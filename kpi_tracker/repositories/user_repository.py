"""
User repository - Data access layer for User model.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_

from kpi_tracker.models import User


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int, company_id: int) -> Optional[User]:
        """Get an active user by ID within a company"""
        return db.query(User).filter(
            and_(
                User.id == user_id,
                User.company_id == company_id,
                User.is_active == True
            )
        ).first()

    @staticmethod
    def get_company_users(db: Session, company_id: int) -> List[User]:
        """Get every user of a company, active or not"""
        return db.query(User).filter(User.company_id == company_id).all()

    @staticmethod
    def count_for_company(db: Session, company_id: int) -> int:
        """Count users of a company"""
        return db.query(User).filter(User.company_id == company_id).count()
