from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from coaching.models.user import UserRole


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str
    role: UserRole
    enrolled_course_ids: list[str] = []
    created_at: Optional[datetime] = None
