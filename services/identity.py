"""Caller identity passed explicitly into every lifecycle and grading operation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from models import STUDENT_ROLE, TEACHER_ROLE
from services.errors import Unauthorized


@dataclass(frozen=True)
class Identity:
    role: str
    name: str
    user_id: Optional[int] = None

    @property
    def is_teacher(self) -> bool:
        return self.role == TEACHER_ROLE

    @property
    def is_student(self) -> bool:
        return self.role == STUDENT_ROLE


def identity_for(user) -> Optional[Identity]:
    """Build an identity from a Flask-Login user; teachers win over students."""
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    names = user.role_names
    if TEACHER_ROLE in names:
        role = TEACHER_ROLE
    elif STUDENT_ROLE in names:
        role = STUDENT_ROLE
    else:
        return None
    return Identity(role=role, name=user.display_name, user_id=user.id)


def require_role(identity: Optional[Identity], role: str) -> Identity:
    if identity is None or identity.role != role:
        raise Unauthorized(f"This action requires the {role} role.")
    return identity
