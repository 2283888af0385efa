from typing import List

from leave_api.core.errors import FieldViolation
from leave_api.models.role import RoleName

MAX_ROLE_NAME_LENGTH = 30


def validate_role_name(name: str) -> List[FieldViolation]:
    if not name or not name.strip():
        return [FieldViolation("name", "Name cannot be empty or whitespace")]
    violations: List[FieldViolation] = []
    if len(name) > MAX_ROLE_NAME_LENGTH:
        violations.append(FieldViolation("name", f"Name must be {MAX_ROLE_NAME_LENGTH} characters or less"))
    if name not in {r.value for r in RoleName}:
        violations.append(FieldViolation("name", "Invalid role - not specified in backend program."))
    return violations
