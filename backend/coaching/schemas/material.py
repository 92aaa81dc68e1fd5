from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from coaching.models.material import MaterialType


class MaterialCreate(BaseModel):
    title: str
    type: MaterialType
    url: str
    size: Optional[str] = None


class MaterialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    type: MaterialType
    url: str
    size: Optional[str] = None
    uploaded_at: Optional[datetime] = None
