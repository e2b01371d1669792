from fastapi import Depends, Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session
from typing import Optional
import os

from kpi_tracker.constants import DEFAULT_API_KEY, ROLE_ADMIN
from kpi_tracker.database import get_db
from kpi_tracker.models import User
from kpi_tracker.repositories.user_repository import UserRepository

# In production keep the key in the environment or a secret store
API_KEY = os.getenv("KPI_TRACKER_API_KEY", DEFAULT_API_KEY)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: str = Security(api_key_header)):
    """Verify API key for authentication"""
    if not api_key or api_key != API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key


def get_current_user(
    x_user_id: Optional[int] = Header(None),
    x_company_id: Optional[int] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the acting user from the identity headers set by the gateway.

    The user must exist, be active and belong to the given company.
    """
    if x_user_id is None or x_company_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id or X-Company-Id header"
        )

    user = UserRepository.get_by_id(db, x_user_id, x_company_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists or is inactive"
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow only company admins"""
    if user.role != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user
