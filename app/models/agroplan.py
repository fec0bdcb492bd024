from sqlalchemy import Column, String, Text, Integer, JSON, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

class AgroPlanRecord(BaseModel):
    __tablename__ = "agroplan_data"

    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    soil_type = Column(String(50))
    location = Column(String(255))
    previous_crops = Column(Text)
    recommendations = Column(JSON)
    sustainability_score = Column(Integer)

    user = relationship("User")
