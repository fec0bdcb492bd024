from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel
from app.schemas.base import BaseSchema

class CropRecommendation(BaseModel):
    crop: str
    suitability: str
    reasoning: str
    best_planting_season: Optional[str] = None
    expected_yield: Optional[str] = None
    sustainability_notes: Optional[str] = None

class RotationEntry(BaseModel):
    season: str
    crops: List[str] = []
    benefits: Optional[str] = None

class AgroPlanResult(BaseModel):
    recommendations: List[CropRecommendation] = []
    rotation_schedule: List[RotationEntry] = []
    sustainability_score: int = 0
    sustainability_notes: Optional[str] = None
    source: str = "ai"

class AgroPlanRecord(BaseSchema):
    id: int
    user_id: int
    soil_type: Optional[str] = None
    location: Optional[str] = None
    previous_crops: Optional[str] = None
    recommendations: Optional[dict] = None
    sustainability_score: Optional[int] = None
    created_at: datetime
