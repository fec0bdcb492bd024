from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.models.user import User as UserModel, Profile
from app.schemas.user import User as UserSchema, ProfileUpdate
from app.auth.security import get_current_user

router = APIRouter()


def get_user_or_404(db: Session, user_id: int) -> UserModel:
    db_user = db.query(UserModel).options(joinedload(UserModel.profile)).filter(UserModel.id == user_id).first()
    if db_user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return db_user

# --------------------------------------------------------------------
# Get a user's public profile -> GET /users/{user_id}
# --------------------------------------------------------------------
@router.get("/{user_id}", response_model=UserSchema)
def read_user(user_id: int, db: Session = Depends(get_db)):
    return get_user_or_404(db, user_id)

# --------------------------------------------------------------------
# Update own profile -> PUT /users/{user_id}/profile
# --------------------------------------------------------------------
@router.put("/{user_id}/profile", response_model=UserSchema)
def update_profile(
    user_id: int,
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    db_user = get_user_or_404(db, user_id)
    if current_user.id != user_id:
        raise HTTPException(status_code=403, detail="Not enough permissions")

    update_data = profile.model_dump(exclude_unset=True)
    if "full_name" in update_data:
        db_user.full_name = update_data.pop("full_name")

    if db_user.profile is None:
        db_user.profile = Profile()
    for field, value in update_data.items():
        setattr(db_user.profile, field, value)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
