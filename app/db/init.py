import logging

from app.core.config import settings
from app.db.session import engine, Base, SessionLocal
from app.models.user import User, Profile
from app.models.crop import Crop
from app.models.order import Order
from app.models.message import Message
from app.models.agroplan import AgroPlanRecord
from app.auth.security import get_password_hash

logger = logging.getLogger(__name__)


def init_db():
    # Create all tables
    Base.metadata.create_all(bind=engine)
    settings.crop_upload_dir.mkdir(parents=True, exist_ok=True)
    db = SessionLocal()
    try:
        seed_super_admin(db)
    finally:
        db.close()


def seed_super_admin(db, email: str = None, password: str = None, full_name: str = None):
    """Create the configured super_admin account unless one already exists."""
    email = email or settings.SUPER_ADMIN_EMAIL
    password = password or settings.SUPER_ADMIN_PASSWORD
    if not email or not password:
        return None

    existing = db.query(User).filter(User.role == "super_admin").first()
    if existing:
        return existing

    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name or settings.SUPER_ADMIN_NAME,
        role="super_admin",
        profile=Profile(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Seeded super_admin account %s", email)
    return user
