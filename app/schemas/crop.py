from datetime import date
from typing import Optional, List
from app.schemas.base import BaseSchema, TimestampSchema

class Crop(TimestampSchema):
    id: int
    farmer_id: int
    farmer_name: Optional[str] = None
    name: str
    description: Optional[str] = None
    quantity: float
    unit: str
    price_per_unit: float
    harvest_date: Optional[date] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    status: str

class CropList(BaseSchema):
    crops: List[Crop]
    total: int
