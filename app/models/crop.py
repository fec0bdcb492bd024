from sqlalchemy import Column, String, Text, Float, Date, Enum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

CROP_STATUSES = ('available', 'reserved', 'sold')

class Crop(BaseModel):
    __tablename__ = "crops"
    
    farmer_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    quantity = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    price_per_unit = Column(Float, nullable=False)
    harvest_date = Column(Date)
    location = Column(String(255))
    image_url = Column(String(255))
    status = Column(Enum(*CROP_STATUSES, name='crop_status'), nullable=False, default='available')
    
    farmer = relationship("User")

    @property
    def farmer_name(self):
        return self.farmer.full_name if self.farmer else None
