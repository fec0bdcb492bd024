from datetime import datetime
from typing import Optional
from pydantic import Field
from app.schemas.base import BaseSchema, RequestSchema

class MessageCreate(RequestSchema):
    sender_id: int = Field(..., alias="senderId")
    receiver_id: int = Field(..., alias="receiverId")
    content: str

class MessageRead(RequestSchema):
    user_id: int = Field(..., alias="userId")

class Message(BaseSchema):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    read: bool
    created_at: datetime
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None
