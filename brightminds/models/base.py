"""Base Models and Mixins"""

import uuid
from sqlalchemy import Column, DateTime, String, func

from brightminds.database import Base


def new_id() -> str:
    """Store-generated identifier for classrooms, games, assignments and attempts"""
    return str(uuid.uuid4())


class BaseModel(Base):
    """
    Base model class for entities whose id is generated by the store.

    Provides:
    - string UUID primary key
    """
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=new_id)


class TimestampMixin:
    """
    Server-assigned timestamps.

    Provides:
    - created_at (set by the database on insert, never written again)
    - updated_at (set by the database on insert and on every update)
    """
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
