import logging
from datetime import date
from typing import Optional, Literal

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form, Query, status
from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload

from app.db.session import get_db
from app.models.crop import Crop
from app.models.user import User
from app.schemas.crop import Crop as CropSchema, CropList
from app.auth.security import get_current_user
from app.auth.policy import enforce
from app.utils.images import has_upload, save_crop_image, delete_crop_image

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
CropStatus = Literal["available", "reserved", "sold"]


def get_crop_or_404(db: Session, crop_id: int) -> Crop:
    db_crop = db.query(Crop).options(joinedload(Crop.farmer)).filter(Crop.id == crop_id).first()
    if db_crop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Crop not found")
    return db_crop


@router.get(
    "",
    response_model=CropList,
    summary="List crops",
    description="Paginated crop listings, newest first."
)
def read_crops(
    farmer_id: Optional[int] = Query(None, alias="farmerId", description="Only this farmer's listings"),
    q: Optional[str] = Query(None, description="Search in name, description and location"),
    crop_status: Optional[CropStatus] = Query(None, alias="status", description="Filter by status"),
    page: int = Query(1, description="Page number starting from 1"),
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Items per page, capped at 100"),
    db: Session = Depends(get_db)
):
    """
    Search crop listings.

    - **farmerId**: restrict to one farmer
    - **q**: case-insensitive substring over name, description and location
    - **status**: available, reserved or sold
    - **page** / **limit**: pagination; `total` counts every matching row
    """
    query = db.query(Crop)

    if farmer_id is not None:
        query = query.filter(Crop.farmer_id == farmer_id)

    if crop_status:
        query = query.filter(Crop.status == crop_status)

    if q:
        pattern = f"%{q}%"
        query = query.filter(or_(
            Crop.name.ilike(pattern),
            Crop.description.ilike(pattern),
            Crop.location.ilike(pattern)
        ))

    # Out-of-range paging falls back to the defaults rather than failing
    if page < 1:
        page = 1
    page_size = min(limit, MAX_PAGE_SIZE) if limit >= 1 else DEFAULT_PAGE_SIZE
    total_count = query.count()

    crops = (
        query.options(joinedload(Crop.farmer))
        .order_by(*Crop.newest_first())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {"crops": crops, "total": total_count}


@router.get("/{crop_id}", response_model=CropSchema)
def read_crop(crop_id: int, db: Session = Depends(get_db)):
    return get_crop_or_404(db, crop_id)


@router.post(
    "",
    response_model=CropSchema,
    summary="Create a crop listing",
    description="Multipart form with an optional image. The caller becomes the owner."
)
def create_crop(
    name: str = Form(..., min_length=1),
    description: Optional[str] = Form(None),
    quantity: float = Form(..., gt=0),
    unit: str = Form(..., min_length=1),
    price_per_unit: float = Form(..., gt=0, alias="pricePerUnit"),
    harvest_date: Optional[date] = Form(None, alias="harvestDate"),
    location: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    enforce(current_user.role, "crop:create", detail="Only farmers can list crops")

    image_url = save_crop_image(image) if has_upload(image) else None

    db_crop = Crop(
        farmer_id=current_user.id,
        name=name,
        description=description,
        quantity=quantity,
        unit=unit,
        price_per_unit=price_per_unit,
        harvest_date=harvest_date,
        location=location,
        image_url=image_url,
        status="available",
    )
    db.add(db_crop)
    db.commit()
    db.refresh(db_crop)
    logger.info("Farmer %s listed crop %s", current_user.id, db_crop.id)
    return db_crop


@router.put("/{crop_id}", response_model=CropSchema)
def update_crop(
    crop_id: int,
    name: str = Form(..., min_length=1),
    description: Optional[str] = Form(None),
    quantity: float = Form(..., gt=0),
    unit: str = Form(..., min_length=1),
    price_per_unit: float = Form(..., gt=0, alias="pricePerUnit"),
    harvest_date: Optional[date] = Form(None, alias="harvestDate"),
    location: Optional[str] = Form(None),
    crop_status: Optional[CropStatus] = Form(None, alias="status"),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Replace the mutable fields of a listing.

    Status is kept unless a new one is sent. A new image replaces the old
    file, which is removed from disk.
    """
    db_crop = get_crop_or_404(db, crop_id)
    enforce(current_user.role, "crop:update", is_owner=db_crop.farmer_id == current_user.id)

    old_image_url = None
    if has_upload(image):
        old_image_url = db_crop.image_url
        db_crop.image_url = save_crop_image(image)

    db_crop.name = name
    db_crop.description = description
    db_crop.quantity = quantity
    db_crop.unit = unit
    db_crop.price_per_unit = price_per_unit
    db_crop.harvest_date = harvest_date
    db_crop.location = location
    if crop_status:
        db_crop.status = crop_status
    # Every update bumps the timestamp, even when no field changed
    db_crop.updated_at = func.now()

    db.add(db_crop)
    db.commit()
    db.refresh(db_crop)

    if old_image_url:
        delete_crop_image(old_image_url)
    return db_crop


@router.delete("/{crop_id}")
def delete_crop(
    crop_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    db_crop = get_crop_or_404(db, crop_id)
    enforce(current_user.role, "crop:delete", is_owner=db_crop.farmer_id == current_user.id)

    image_url = db_crop.image_url
    db.delete(db_crop)
    db.commit()
    delete_crop_image(image_url)
    logger.info("Crop %s deleted by user %s", crop_id, current_user.id)
    return {"ok": True, "message": "Crop deleted successfully"}
