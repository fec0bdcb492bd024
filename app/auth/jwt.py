import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.user import User, Profile
from app.schemas.user import UserWithToken, RegisterRequest, LoginRequest, User as UserSchema
from app.auth.security import (
    get_password_hash,
    verify_password,
    create_user_token,
    get_current_user,
)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def _with_token(user: User) -> UserWithToken:
    return UserWithToken(
        user=UserSchema.model_validate(user),
        access_token=create_user_token(user),
        token_type="bearer"
    )

# REGISTER: self-service accounts are farmers or buyers only
@router.post("/register", response_model=UserWithToken)
def register_user(user_data: RegisterRequest, db: Session = Depends(get_db)):
    existing_user = db.query(User).filter(User.email == user_data.email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists"
        )

    db_user = User(
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        role=user_data.user_type,
        profile=Profile(),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Registered %s account id=%s", db_user.role, db_user.id)

    return _with_token(db_user)

# LOGIN: returns user + token (frontend-friendly)
@router.post("/login", response_model=UserWithToken)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    user = _authenticate(db, credentials.email, credentials.password)
    return _with_token(user)

# TOKEN-ONLY: OAuth2 compatibility (for Swagger/OAuth2PasswordBearer); username is the email
@router.post("/token")
def login_token_only(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = _authenticate(db, form_data.username, form_data.password)
    return {"access_token": create_user_token(user), "token_type": "bearer"}


@router.get("/me", response_model=UserSchema)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
