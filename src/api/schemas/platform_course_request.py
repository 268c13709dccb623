"""Request schemas for Platform Course API"""

from typing import Optional
from pydantic import BaseModel, Field
from src.domain.enrollment import AccessMethod


class PlatformEnrollmentSchema(BaseModel):
    user_id: str = Field(..., min_length=1)
    access_method: Optional[AccessMethod] = None


class UserCourseSchema(BaseModel):
    user_id: str = Field(..., min_length=1)
