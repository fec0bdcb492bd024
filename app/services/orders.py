"""Order ledger and the approval workflow.

Orders are created in batches from a cart checkout, one committed row per
item, in the order the items were supplied. A failure on a later item does
not undo earlier rows. ``total_price`` is computed from the crop's price at
insertion time and never recalculated.

Approval is the only status transition: pending -> confirmed, by an admin or
super_admin, followed by a notice to the farmer who owns the crop.
"""
import logging
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.crop import Crop
from app.models.message import Message
from app.models.order import Order
from app.models.user import User
from app.schemas.order import OrderCreate
from app.auth.policy import enforce

logger = logging.getLogger(__name__)


def _order_query(db: Session):
    return db.query(Order).options(
        joinedload(Order.crop),
        joinedload(Order.buyer),
        joinedload(Order.approver),
    )


def create_orders(db: Session, payload: OrderCreate) -> List[Order]:
    if not payload.buyer_id or not payload.items:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid order payload")

    buyer = db.query(User).filter(User.id == payload.buyer_id).first()
    if buyer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Buyer not found")

    created = []
    for item in payload.items:
        crop = db.query(Crop).filter(Crop.id == item.crop_id).first()
        if crop is None:
            # Rows already committed for this batch stay in place
            logger.warning(
                "Order batch for buyer %s stopped at crop %s after %d rows",
                buyer.id, item.crop_id, len(created)
            )
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Crop not found: {item.crop_id}"
            )

        quantity = float(item.quantity)
        db_order = Order(
            crop_id=crop.id,
            buyer_id=buyer.id,
            quantity=quantity,
            total_price=quantity * crop.price_per_unit,
            buyer_contact=payload.buyer_contact or None,
            status="pending",
        )
        db.add(db_order)
        db.commit()
        created.append(db_order.id)

    logger.info("Created %d orders for buyer %s", len(created), buyer.id)
    orders = _order_query(db).filter(Order.id.in_(created)).all()
    by_id = {order.id: order for order in orders}
    return [by_id[order_id] for order_id in created]


def list_orders(db: Session, farmer_id: Optional[int] = None, buyer_id: Optional[int] = None) -> List[Order]:
    query = _order_query(db)
    if farmer_id is not None:
        query = query.join(Crop, Order.crop_id == Crop.id).filter(Crop.farmer_id == farmer_id)
    if buyer_id is not None:
        query = query.filter(Order.buyer_id == buyer_id)
    return query.order_by(*Order.newest_first()).all()


def get_order(db: Session, order_id: int) -> Order:
    db_order = _order_query(db).filter(Order.id == order_id).first()
    if db_order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return db_order


def approval_notice(order: Order, approver: User) -> str:
    approver_name = approver.full_name or approver.email
    return (
        f"Order #{order.id} for {order.crop.name} "
        f"({order.quantity:g} {order.crop.unit}) has been approved by {approver_name}."
    )


def approve_order(db: Session, order_id: int, approver: User) -> Order:
    enforce(approver.role, "order:approve")

    db_order = get_order(db, order_id)
    if db_order.status != "pending":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only pending orders can be approved"
        )

    db_order.status = "confirmed"
    db_order.approved_by = approver.id
    db_order.updated_at = func.now()
    db.commit()
    logger.info("Order %s approved by user %s", db_order.id, approver.id)

    # Separate statement: a failed notice does not revert the approval
    try:
        db.add(Message(
            sender_id=approver.id,
            receiver_id=db_order.crop.farmer_id,
            content=approval_notice(db_order, approver),
            read=False,
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not notify farmer about approved order %s", db_order.id)

    db.expire_all()
    return get_order(db, order_id)
