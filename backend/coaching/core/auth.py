import enum
from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from coaching.core.deps import get_db
from coaching.core.security import decode_access_token
from coaching.models.user import User, UserRole

security = HTTPBearer(auto_error=False)


class Capability(str, enum.Enum):
    ENROLL = "enroll"
    MANAGE_COURSES = "manage_courses"
    UPLOAD_MATERIALS = "upload_materials"
    SEND_NOTIFICATIONS = "send_notifications"
    MANAGE_USERS = "manage_users"
    VIEW_TRANSACTIONS = "view_transactions"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.STUDENT: frozenset({Capability.ENROLL}),
    UserRole.INSTRUCTOR: frozenset(
        {
            Capability.MANAGE_COURSES,
            Capability.UPLOAD_MATERIALS,
            Capability.SEND_NOTIFICATIONS,
        }
    ),
    UserRole.ADMIN: frozenset(Capability),
}


def has_capability(role: UserRole, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())


def _resolve_user(token: str, db: Session) -> User:
    payload = decode_access_token(token)
    # OTP verification tickets are signed with the same key but are not sessions
    if not payload or "sub" not in payload or payload.get("purpose"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = db.query(User).filter(User.id == payload["sub"]).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _resolve_user(credentials.credentials, db)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """The caller if a Bearer token was sent, else None. A bad token is still a 401."""
    if not credentials or not credentials.credentials:
        return None
    return _resolve_user(credentials.credentials, db)


def require_capability(capability: Capability) -> Callable[..., User]:
    """Dependency factory: the current user, if their role grants `capability`."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        if not has_capability(user.role, capability):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not permitted for this role",
            )
        return user

    return dependency
