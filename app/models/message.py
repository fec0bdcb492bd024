from sqlalchemy import Column, Text, Boolean, ForeignKey, Integer
from sqlalchemy.orm import relationship
from app.models.base import BaseModel

class Message(BaseModel):
    __tablename__ = "messages"
    
    sender_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    
    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    @property
    def sender_name(self):
        return self.sender.full_name if self.sender else None

    @property
    def receiver_name(self):
        return self.receiver.full_name if self.receiver else None
