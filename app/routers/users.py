# app/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.schemas.user import UserOut
from app.utils.auth import get_current_user, require_admin

router = APIRouter()


@router.get("/users/me", response_model=UserOut, summary="The calling user")
def who_am_i(user: User = Depends(get_current_user)):
    return user


@router.get("/admin/users", response_model=list[UserOut], dependencies=[Depends(require_admin)])
def list_users(role: str = None, db: Session = Depends(get_db)):
    q = db.query(User)
    if role:
        q = q.filter(User.role == role)
    return q.order_by(User.created_at.desc()).all()
