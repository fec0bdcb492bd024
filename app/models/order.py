from sqlalchemy import Column, Enum, Float, String, Date, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

ORDER_STATUSES = ('pending', 'confirmed', 'delivered', 'cancelled')

class Order(BaseModel):
    __tablename__ = "orders"
    
    crop_id = Column(Integer, ForeignKey('crops.id', ondelete='CASCADE'), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    quantity = Column(Float, nullable=False)
    # Snapshot of quantity * price_per_unit when the row was inserted
    total_price = Column(Float, nullable=False)
    buyer_contact = Column(String(255))
    status = Column(Enum(*ORDER_STATUSES, name='order_status'), nullable=False, default='pending')
    delivery_date = Column(Date)
    approved_by = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'))
    
    crop = relationship("Crop")
    buyer = relationship("User", foreign_keys=[buyer_id])
    approver = relationship("User", foreign_keys=[approved_by])

    @property
    def crop_name(self):
        return self.crop.name if self.crop else None

    @property
    def image_url(self):
        return self.crop.image_url if self.crop else None

    @property
    def farmer_id(self):
        return self.crop.farmer_id if self.crop else None

    @property
    def buyer_name(self):
        return self.buyer.full_name if self.buyer else None

    @property
    def approver_name(self):
        return self.approver.full_name if self.approver else None
