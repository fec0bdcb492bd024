from sqlalchemy import Column, String, Enum, Float, Integer, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.db.session import Base

ROLES = ('farmer', 'buyer', 'admin', 'super_admin')
ADMIN_ROLES = ('admin', 'super_admin')
# super_admin only ever comes from configuration
ASSIGNABLE_ROLES = ('farmer', 'buyer', 'admin')

class User(BaseModel):
    __tablename__ = "users"
    
    email = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(100))
    role = Column(Enum(*ROLES, name='user_roles'), nullable=False)

    profile = relationship("Profile", uselist=False, back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def _profile_field(self, name):
        return getattr(self.profile, name) if self.profile else None

    @property
    def avatar_url(self):
        return self._profile_field("avatar_url")

    @property
    def location(self):
        return self._profile_field("location")

    @property
    def phone(self):
        return self._profile_field("phone")

    @property
    def rating(self):
        return self._profile_field("rating")

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), primary_key=True)
    avatar_url = Column(String(255))
    location = Column(String(255))
    phone = Column(String(30))
    rating = Column(Float, default=0)

    user = relationship("User", back_populates="profile")
