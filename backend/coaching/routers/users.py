from fastapi import APIRouter, Depends, HTTPException

from coaching.core.auth import Capability, require_capability
from coaching.core.deps import get_identity_store
from coaching.core.errors import UpdateNotFound
from coaching.models.user import User
from coaching.schemas.user import UserResponse
from coaching.services.identity_store import IdentityStore

router = APIRouter()


@router.get("", response_model=list[UserResponse])
def list_users(
    store: IdentityStore = Depends(get_identity_store),
    admin: User = Depends(require_capability(Capability.MANAGE_USERS)),
):
    return store.list_users()


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    store: IdentityStore = Depends(get_identity_store),
    admin: User = Depends(require_capability(Capability.MANAGE_USERS)),
):
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Cannot delete your own account")
    try:
        store.delete(user_id)
    except UpdateNotFound:
        raise HTTPException(status_code=404, detail="User not found")
    return {"ok": True, "message": "User deleted"}
