"""Identity persistence: user records and their enrollment sets."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coaching.core.errors import DuplicateIdentity, UpdateNotFound
from coaching.models.user import Enrollment, User, UserRole

logger = logging.getLogger(__name__)


class IdentityStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email_or_phone(self, identifier: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(or_(func.lower(User.email) == identifier.lower(), User.phone == identifier))
            .first()
        )

    def find_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def find_by_phone(self, phone: str) -> Optional[User]:
        return self.db.query(User).filter(User.phone == phone).first()

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at, User.name).all()

    def create(
        self,
        name: str,
        email: str,
        phone: str,
        password: str,
        role: UserRole = UserRole.STUDENT,
    ) -> User:
        """Insert a new identity. Raises DuplicateIdentity naming the first conflicting field."""
        if self.find_by_email(email):
            raise DuplicateIdentity("email")
        if self.find_by_phone(phone):
            raise DuplicateIdentity("phone")
        user = User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            phone=phone,
            password=password,
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration
            self.db.rollback()
            field = "email" if self.find_by_email(email) else "phone"
            raise DuplicateIdentity(field)
        self.db.refresh(user)
        logger.info("Registered %s %s (%s)", user.role.value, user.id, user.email)
        return user

    def append_enrollment(self, user_id: str, course_id: str) -> User:
        """Add `course_id` to the user's enrollment set; a repeat call changes nothing."""
        user = self.get(user_id)
        if not user:
            raise UpdateNotFound("User not found")
        if course_id in user.enrolled_course_ids:
            return user
        user.enrollments.append(Enrollment(id=str(uuid.uuid4()), course_id=course_id))
        try:
            self.db.commit()
        except IntegrityError:
            # Same enrollment committed concurrently; the set already holds it
            self.db.rollback()
        self.db.refresh(user)
        return user

    def set_password(self, user_id: str, password: str) -> User:
        user = self.get(user_id)
        if not user:
            raise UpdateNotFound("User not found")
        user.password = password
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete(self, user_id: str) -> None:
        user = self.get(user_id)
        if not user:
            raise UpdateNotFound("User not found")
        self.db.delete(user)
        self.db.commit()
        logger.info("Deleted user %s", user_id)
