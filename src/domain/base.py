"""Base domain model shared by all SQLModel entities"""

import uuid
from sqlmodel import SQLModel


def generate_uuid() -> str:
    """Generate a string UUID primary key"""
    return str(uuid.uuid4())


class BaseModel(SQLModel):
    """Base class for persisted domain entities"""
    pass
