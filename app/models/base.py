from sqlalchemy import Column, Integer, TIMESTAMP
from sqlalchemy.sql import func
from app.db.session import Base

class BaseModel(Base):
    __abstract__ = True
    
    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now(), nullable=False)

    @classmethod
    def newest_first(cls):
        # created_at has one-second resolution on SQLite; id breaks the tie
        return (cls.created_at.desc(), cls.id.desc())
