from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.message import Message as MessageSchema, MessageCreate, MessageRead
from app.services import messaging

router = APIRouter()


@router.get("", response_model=List[MessageSchema])
def read_messages(user_id: int = Query(..., alias="userId"), db: Session = Depends(get_db)):
    return messaging.list_messages(db, user_id)


@router.get("/unread-count")
def read_unread_count(user_id: int = Query(..., alias="userId"), db: Session = Depends(get_db)):
    return {"count": messaging.count_unread(db, user_id)}


@router.post("", response_model=MessageSchema)
def send_message(message: MessageCreate, db: Session = Depends(get_db)):
    return messaging.send_message(db, message.sender_id, message.receiver_id, message.content)


@router.put("/{message_id}/read", response_model=MessageSchema)
def mark_message_read(message_id: int, body: MessageRead, db: Session = Depends(get_db)):
    return messaging.mark_read(db, message_id, body.user_id)
