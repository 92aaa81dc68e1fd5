from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from coaching.models.course import CourseStatus


class CourseCreate(BaseModel):
    title: str
    description: Optional[str] = None
    date: datetime
    meet_link: str
    instructor_name: str
    price: float = Field(default=0, ge=0)
    duration: Optional[str] = None
    status: CourseStatus = CourseStatus.ACTIVE


class CourseUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    meet_link: Optional[str] = None
    instructor_name: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration: Optional[str] = None
    status: Optional[CourseStatus] = None


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: Optional[str] = None
    date: datetime
    # None unless the caller may join the session
    meet_link: Optional[str] = None
    instructor_name: str
    price: float
    duration: Optional[str] = None
    status: CourseStatus
