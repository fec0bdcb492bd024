from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.models.user import User
from app.schemas.order import Order as OrderSchema, OrderCreate, OrderBatch
from app.auth.security import get_current_user
from app.services import orders as order_service

router = APIRouter()


@router.post("", response_model=OrderBatch)
def create_orders(payload: OrderCreate, db: Session = Depends(get_db)):
    """
    Place one pending order per cart line.

    Each line is priced from the crop's current price and committed on its
    own; an unknown crop stops the batch without undoing earlier lines.
    """
    return {"created": order_service.create_orders(db, payload)}


@router.get("", response_model=List[OrderSchema])
def read_orders(
    farmer_id: Optional[int] = Query(None, alias="farmerId"),
    buyer_id: Optional[int] = Query(None, alias="buyerId"),
    db: Session = Depends(get_db)
):
    return order_service.list_orders(db, farmer_id=farmer_id, buyer_id=buyer_id)


@router.get("/{order_id}", response_model=OrderSchema)
def read_order(order_id: int, db: Session = Depends(get_db)):
    return order_service.get_order(db, order_id)


@router.put("/{order_id}/approve", response_model=OrderSchema)
def approve_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return order_service.approve_order(db, order_id, current_user)
