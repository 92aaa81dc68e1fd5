import enum

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.sql import func

from coaching.core.database import Base


class MaterialType(str, enum.Enum):
    PDF = "PDF"
    SLIDE = "SLIDE"
    DOC = "DOC"
    VIDEO = "VIDEO"


class Material(Base):
    __tablename__ = "materials"

    id = Column(String(36), primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    type = Column(Enum(MaterialType), nullable=False)
    url = Column(String(2048), nullable=False)
    size = Column(String(32), nullable=True)  # display string, e.g. "2.4 MB"
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())
