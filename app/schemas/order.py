from datetime import date
from typing import Optional, List
from pydantic import BaseModel, Field
from app.schemas.base import TimestampSchema

class OrderItemCreate(BaseModel):
    crop_id: int
    quantity: float = Field(..., gt=0)

class OrderCreate(BaseModel):
    # Optional here so a missing buyer or empty cart maps to "Invalid order payload"
    buyer_id: Optional[int] = None
    buyer_contact: Optional[str] = None
    items: List[OrderItemCreate] = []

class Order(TimestampSchema):
    id: int
    crop_id: int
    buyer_id: int
    quantity: float
    total_price: float
    buyer_contact: Optional[str] = None
    status: str
    delivery_date: Optional[date] = None
    approved_by: Optional[int] = None
    crop_name: Optional[str] = None
    image_url: Optional[str] = None
    farmer_id: Optional[int] = None
    buyer_name: Optional[str] = None
    approver_name: Optional[str] = None

class OrderBatch(BaseModel):
    created: List[Order]
