import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.crop import Crop
from app.models.user import User as UserModel, Profile, ADMIN_ROLES
from app.schemas.user import User as UserSchema, AdminUserCreate, AdminUserUpdate
from app.auth.security import is_admin, get_password_hash
from app.auth.policy import enforce, ensure_assignable_role
from app.api.users import get_user_or_404
from app.utils.images import delete_crop_image

router = APIRouter()
public_router = APIRouter()
logger = logging.getLogger(__name__)

# --------------------------------------------------------------------
# Public list of administrators -> GET /admins
# --------------------------------------------------------------------
@public_router.get("", response_model=List[UserSchema])
def read_admins(db: Session = Depends(get_db)):
    return (
        db.query(UserModel)
        .filter(UserModel.role.in_(ADMIN_ROLES))
        .order_by(UserModel.full_name)
        .all()
    )

# --------------------------------------------------------------------
# Get all users (admin only) -> GET /admin/users
# --------------------------------------------------------------------
@router.get("/users", response_model=List[UserSchema])
def read_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(is_admin)
):
    enforce(current_user.role, "user:list")
    return (
        db.query(UserModel)
        .order_by(*UserModel.newest_first())
        .offset(skip)
        .limit(limit)
        .all()
    )

# --------------------------------------------------------------------
# Create a new user (admin only) -> POST /admin/users
# --------------------------------------------------------------------
@router.post("/users", response_model=UserSchema)
def create_user(
    user: AdminUserCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(is_admin)
):
    ensure_assignable_role(user.user_type)
    enforce(current_user.role, "user:create", user.user_type,
            detail="Only a super admin can create admin accounts")

    existing_user = db.query(UserModel).filter(UserModel.email == user.email).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="User already exists")

    db_user = UserModel(
        email=user.email,
        hashed_password=get_password_hash(user.password),
        full_name=user.full_name,
        role=user.user_type,
        profile=Profile(),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("User %s created %s account %s", current_user.id, db_user.role, db_user.id)
    return db_user

# --------------------------------------------------------------------
# Update user (admin only) -> PUT /admin/users/{user_id}
# --------------------------------------------------------------------
@router.put("/users/{user_id}", response_model=UserSchema)
def update_user(
    user_id: int,
    user: AdminUserUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(is_admin)
):
    db_user = get_user_or_404(db, user_id)
    enforce(current_user.role, "user:update", db_user.role)

    update_data = user.model_dump(exclude_unset=True, exclude_none=True)

    if "user_type" in update_data:
        new_role = update_data.pop("user_type")
        ensure_assignable_role(new_role)
        enforce(current_user.role, "user:update", new_role,
                detail="Only a super admin can grant the admin role")
        db_user.role = new_role

    if "email" in update_data and update_data["email"] != db_user.email:
        taken = db.query(UserModel).filter(UserModel.email == update_data["email"], UserModel.id != user_id).first()
        if taken:
            raise HTTPException(status_code=400, detail="User already exists")

    if "password" in update_data:
        update_data["hashed_password"] = get_password_hash(update_data.pop("password"))

    for field, value in update_data.items():
        setattr(db_user, field, value)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("User %s updated account %s", current_user.id, db_user.id)
    return db_user

# --------------------------------------------------------------------
# Delete user (admin only) -> DELETE /admin/users/{user_id}
# --------------------------------------------------------------------
@router.delete("/users/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(is_admin)
):
    db_user = get_user_or_404(db, user_id)
    enforce(current_user.role, "user:delete", db_user.role)

    # Crops go with the user through the FK cascade; their files do not
    image_urls = [
        url for (url,) in db.query(Crop.image_url)
        .filter(Crop.farmer_id == user_id, Crop.image_url.isnot(None))
    ]

    db.delete(db_user)
    db.commit()
    for image_url in image_urls:
        delete_crop_image(image_url)
    logger.info("User %s deleted account %s", current_user.id, user_id)
    return {"ok": True, "message": "User deleted successfully"}
