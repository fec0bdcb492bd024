import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.models.message import Message
from app.models.user import User
from app.auth.policy import enforce

logger = logging.getLogger(__name__)


def _get_user_or_404(db: Session, user_id: int, label: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return user


def send_message(db: Session, sender_id: int, receiver_id: int, content: str) -> Message:
    content = (content or "").strip()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message content is required")

    sender = _get_user_or_404(db, sender_id, "Sender")
    receiver = _get_user_or_404(db, receiver_id, "Receiver")
    enforce(sender.role, "message:send", receiver.role, detail="Messages must involve an administrator")

    db_message = Message(sender_id=sender.id, receiver_id=receiver.id, content=content, read=False)
    db.add(db_message)
    db.commit()
    db.refresh(db_message)
    logger.info("Message %s sent from user %s to user %s", db_message.id, sender.id, receiver.id)
    return db_message


def list_messages(db: Session, user_id: int) -> List[Message]:
    return (
        db.query(Message)
        .options(joinedload(Message.sender), joinedload(Message.receiver))
        .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
        .order_by(*Message.newest_first())
        .all()
    )


def count_unread(db: Session, user_id: int) -> int:
    return db.query(Message).filter(Message.receiver_id == user_id, Message.read.is_(False)).count()


def mark_read(db: Session, message_id: int, user_id: int) -> Message:
    db_message = db.query(Message).filter(Message.id == message_id).first()
    if db_message is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")

    enforce(None, "message:read", is_owner=db_message.receiver_id == user_id,
            detail="Only the receiver can mark a message as read")

    db_message.read = True
    db.commit()
    db.refresh(db_message)
    return db_message
