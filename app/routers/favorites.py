# app/routers/favorites.py
"""Current user's favorite locations."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.favorite import Favorite
from app.models.location import Location
from app.models.user import User
from app.schemas.favorite import FavoriteCreate, FavoriteOut
from app.services.location_service import annotate_location
from app.utils.auth import get_current_user

router = APIRouter()


@router.get("/favorites", response_model=list[FavoriteOut], summary="My favorites, newest first")
def list_favorites(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    favorites = (
        db.query(Favorite)
        .filter(Favorite.user_id == user.id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        .all()
    )
    for fav in favorites:
        annotate_location(fav.location)
    return favorites


@router.post("/favorites", response_model=FavoriteOut, status_code=status.HTTP_201_CREATED)
def add_favorite(body: FavoriteCreate, user: User = Depends(get_current_user),
                 db: Session = Depends(get_db)):
    location = db.query(Location).filter(Location.id == body.location_id).first()
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")

    existing = db.query(Favorite).filter(
        Favorite.user_id == user.id, Favorite.location_id == body.location_id
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="Location already in favorites")

    favorite = Favorite(user_id=user.id, location_id=location.id)
    db.add(favorite)
    db.commit()
    db.refresh(favorite)
    annotate_location(favorite.location)
    return favorite


@router.delete("/favorites", summary="Remove a favorite by location_id")
def remove_favorite(location_id: int, user: User = Depends(get_current_user),
                    db: Session = Depends(get_db)):
    favorite = db.query(Favorite).filter(
        Favorite.user_id == user.id, Favorite.location_id == location_id
    ).first()
    if not favorite:
        raise HTTPException(status_code=404, detail="Favorite not found")
    db.delete(favorite)
    db.commit()
    return {"success": True}
