import uuid
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from coaching.core.auth import Capability, get_optional_user, has_capability, require_capability
from coaching.core.deps import get_db
from coaching.models.material import Material
from coaching.models.user import User
from coaching.schemas.material import MaterialCreate, MaterialResponse

router = APIRouter()


@router.get("", response_model=list[MaterialResponse])
def list_materials(db: Session = Depends(get_db), user: Optional[User] = Depends(get_optional_user)):
    """Study materials unlock with any enrollment; others get an empty list."""
    if user is None:
        return []
    if not (has_capability(user.role, Capability.UPLOAD_MATERIALS) or user.enrolled_course_ids):
        return []
    return db.query(Material).order_by(Material.uploaded_at.desc()).all()


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
def create_material(
    body: MaterialCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_capability(Capability.UPLOAD_MATERIALS)),
):
    """Register a material by URL; files are hosted elsewhere."""
    material = Material(id=str(uuid.uuid4()), **body.model_dump())
    db.add(material)
    db.commit()
    db.refresh(material)
    return material
