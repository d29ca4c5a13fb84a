# app/utils/auth.py
"""
Request identity dependencies.

Login and sessions live outside this service: the calling frontend passes
the authenticated user's id in the X-User-Id header. Cron endpoints are
authenticated with a shared bearer secret instead.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.user import User


def get_current_user(x_user_id: Optional[int] = Header(None), db: Session = Depends(get_db)) -> User:
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    user = db.query(User).filter(User.id == x_user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


def verify_cron_secret(authorization: Optional[str] = Header(None)):
    """Cron jobs send 'Authorization: Bearer <CRON_SECRET>'. No secret configured → cron disabled."""
    if not settings.CRON_SECRET or authorization != f"Bearer {settings.CRON_SECRET}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
