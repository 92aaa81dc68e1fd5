from coaching.core.database import Base
from coaching.models.user import Enrollment, User, UserRole
from coaching.models.course import Course, CourseStatus
from coaching.models.material import Material, MaterialType
from coaching.models.transaction import PaymentMethod, Transaction

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Enrollment",
    "Course",
    "CourseStatus",
    "Material",
    "MaterialType",
    "Transaction",
    "PaymentMethod",
]
