import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coaching.core.auth import Capability, get_optional_user, has_capability, require_capability
from coaching.core.deps import get_db
from coaching.models.course import Course
from coaching.models.user import User
from coaching.schemas.course import CourseCreate, CourseResponse, CourseUpdate

router = APIRouter()


def _can_join(user: Optional[User], course: Course) -> bool:
    if user is None:
        return False
    return has_capability(user.role, Capability.MANAGE_COURSES) or course.id in user.enrolled_course_ids


@router.get("", response_model=list[CourseResponse])
def list_courses(db: Session = Depends(get_db), user: Optional[User] = Depends(get_optional_user)):
    """
    Public catalog, soonest session first.

    The join link is only included for enrolled students and course managers.
    """
    courses = []
    for course in db.query(Course).order_by(Course.date).all():
        item = CourseResponse.model_validate(course)
        if not _can_join(user, course):
            item = item.model_copy(update={"meet_link": None})
        courses.append(item)
    return courses


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    body: CourseCreate,
    db: Session = Depends(get_db),
    user: User = Depends(require_capability(Capability.MANAGE_COURSES)),
):
    course = Course(id=str(uuid.uuid4()), **body.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.put("/{course_id}", response_model=CourseResponse)
def update_course(
    course_id: str,
    body: CourseUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_capability(Capability.MANAGE_COURSES)),
):
    """Partial update; archiving is `{"status": "ARCHIVED"}`."""
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(course, field, value)
    db.commit()
    db.refresh(course)
    return course
