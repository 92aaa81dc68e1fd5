import logging
from typing import List

from coaching.services.identity_store import IdentityStore

logger = logging.getLogger(__name__)


class EnrollmentRecorder:
    """Grants course access once the payment collaborator has reported success."""

    def __init__(self, store: IdentityStore):
        self.store = store

    def confirm(self, user_id: str, course_id: str) -> List[str]:
        # UpdateNotFound from the store propagates untouched
        user = self.store.append_enrollment(user_id, course_id)
        logger.info("User %s enrolled in course %s", user_id, course_id)
        return user.enrolled_course_ids
