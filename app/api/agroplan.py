import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.agroplan import AgroPlanRecord
from app.models.user import User
from app.schemas.agroplan import AgroPlanResult, AgroPlanRecord as AgroPlanRecordSchema
from app.services.recommendations import RecommendationAdapter, get_recommendation_adapter
from app.utils.images import has_upload, validate_image

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/analyze", response_model=AgroPlanResult)
def analyze(
    soil_type: Optional[str] = Form(None, alias="soilType"),
    location: Optional[str] = Form(None),
    previous_crops: Optional[str] = Form(None, alias="previousCrops"),
    user_id: Optional[int] = Form(None, alias="userId"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    adapter: RecommendationAdapter = Depends(get_recommendation_adapter)
):
    """
    Crop-planning advice for a soil type and location.

    An optional field photo is checked like any upload but not stored.
    When `userId` names a known user the result is kept in their history.
    """
    if not soil_type or not location:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Soil type and location are required")
    if has_upload(image):
        validate_image(image)

    result = adapter.analyze(soil_type, location, previous_crops)

    if user_id is not None and db.query(User).filter(User.id == user_id).first():
        db.add(AgroPlanRecord(
            user_id=user_id,
            soil_type=soil_type,
            location=location,
            previous_crops=previous_crops,
            recommendations=result,
            sustainability_score=result.get("sustainability_score"),
        ))
        db.commit()
        logger.info("Stored agroplan analysis for user %s", user_id)
    return result


@router.get("/history", response_model=List[AgroPlanRecordSchema])
def read_history(user_id: int = Query(..., alias="userId"), db: Session = Depends(get_db)):
    return (
        db.query(AgroPlanRecord)
        .filter(AgroPlanRecord.user_id == user_id)
        .order_by(*AgroPlanRecord.newest_first())
        .all()
    )
