import enum

from sqlalchemy import Column, DateTime, Enum, Float, String, Text
from sqlalchemy.sql import func

from coaching.core.database import Base


class CourseStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)  # session start
    meet_link = Column(String(1024), nullable=False)
    instructor_name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False, default=0)  # USD
    duration = Column(String(64), nullable=True)  # free text, e.g. "4 weeks"
    status = Column(Enum(CourseStatus), default=CourseStatus.ACTIVE, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
