# app/routers/plans.py
"""
Study plans. Creating a plan runs the recommendation engine: the response
carries warnings about the chosen location and, when there are any,
up to three quieter/emptier alternatives nearby.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.location import Location
from app.models.study_plan import StudyPlan
from app.models.user import User
from app.schemas.study_plan import (
    StudyPlanBookingOut, StudyPlanCreate, StudyPlanOut, StudyPlanUpdate,
)
from app.services import plan_service
from app.services.location_service import annotate_location, get_location
from app.utils.auth import get_current_user

router = APIRouter()


def _get_own_plan_or_404(db: Session, plan_id: int, user: User) -> StudyPlan:
    plan = db.query(StudyPlan).filter(StudyPlan.id == plan_id, StudyPlan.user_id == user.id).first()
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


def _with_location_status(plan: StudyPlan) -> StudyPlan:
    annotate_location(plan.location)
    return plan


@router.get("/plans", response_model=list[StudyPlanOut], summary="My study plans by start time")
def list_plans(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    plans = (
        db.query(StudyPlan)
        .filter(StudyPlan.user_id == user.id)
        .order_by(StudyPlan.start_time.asc())
        .all()
    )
    return [_with_location_status(p) for p in plans]


@router.post("/plans", response_model=StudyPlanBookingOut, status_code=status.HTTP_201_CREATED,
             summary="Book a study session (with warnings + alternatives)")
def create_plan(body: StudyPlanCreate, user: User = Depends(get_current_user),
                db: Session = Depends(get_db)):
    # Time range first: an invalid request never reaches the recommendation engine
    plan_service.validate_time_range(body.start_time, body.end_time)

    location = get_location(db, body.location_id)
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")

    booking = plan_service.create_plan(db, user.id, location, body.start_time,
                                       body.end_time, body.notes)
    recommendation = booking.recommendation
    return {
        "plan": _with_location_status(booking.plan),
        "warnings": recommendation.warnings,
        "alternatives": recommendation.alternatives or None,
    }


@router.get("/plans/{plan_id}", response_model=StudyPlanOut)
def get_plan(plan_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _with_location_status(_get_own_plan_or_404(db, plan_id, user))


@router.put("/plans/{plan_id}", response_model=StudyPlanOut)
def update_plan(plan_id: int, body: StudyPlanUpdate, user: User = Depends(get_current_user),
                db: Session = Depends(get_db)):
    plan = _get_own_plan_or_404(db, plan_id, user)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    if "location_id" in changes and not db.query(Location).filter(Location.id == changes["location_id"]).first():
        raise HTTPException(status_code=404, detail="Location not found")
    plan = plan_service.update_plan(db, plan, changes)
    return _with_location_status(plan)


@router.delete("/plans/{plan_id}")
def delete_plan(plan_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    plan = _get_own_plan_or_404(db, plan_id, user)
    db.delete(plan)
    db.commit()
    return {"success": True}
