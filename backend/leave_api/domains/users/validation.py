from __future__ import annotations

import re
from typing import List, Optional

from leave_api.core.errors import FieldViolation

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 10
MAX_NAME_LENGTH = 30


def validate_user(
    email: str,
    firstname: str,
    surname: str,
    role_id: Optional[int],
    password: Optional[str] = None,
    require_password: bool = False,
) -> List[FieldViolation]:
    violations: List[FieldViolation] = []

    if require_password or password is not None:
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            violations.append(
                FieldViolation("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
            )
    if not firstname or not firstname.strip():
        violations.append(FieldViolation("firstname", "First name is required"))
    elif len(firstname) > MAX_NAME_LENGTH:
        violations.append(FieldViolation("firstname", f"First name cannot exceed {MAX_NAME_LENGTH} characters"))
    if not surname or not surname.strip():
        violations.append(FieldViolation("surname", "Surname is required"))
    elif len(surname) > MAX_NAME_LENGTH:
        violations.append(FieldViolation("surname", f"Surname cannot exceed {MAX_NAME_LENGTH} characters"))
    if not email or not EMAIL_PATTERN.match(email.strip()):
        violations.append(FieldViolation("email", "Must be a valid email address"))
    if role_id is None:
        violations.append(FieldViolation("roleID", "Role is required"))

    return violations
