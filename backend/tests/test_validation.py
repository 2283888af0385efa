from datetime import date

import pytest

from leave_api.core.errors import ValidationError
from leave_api.domains.leave_requests.entities import LeaveRequestRecord
from leave_api.domains.leave_requests.validation import parse_date, validate_leave_request
from leave_api.domains.roles.validation import validate_role_name
from leave_api.domains.users.validation import validate_user


def _record(**overrides) -> LeaveRequestRecord:
    values = dict(employee_id=1, start_date=date(2024, 1, 1), end_date=date(2024, 1, 2))
    values.update(overrides)
    return LeaveRequestRecord(**values)


def test_valid_leave_request_has_no_violations():
    assert validate_leave_request(_record(reason="x" * 128)) == []


def test_leave_request_violations_are_reported_per_field():
    violations = validate_leave_request(_record(leave_type="  ", reason="x" * 129, status="Archived"))

    assert {v.field for v in violations} == {"leave_type", "reason", "status"}


def test_leave_type_length_limit():
    assert validate_leave_request(_record(leave_type="L" * 50)) == []

    violations = validate_leave_request(_record(leave_type="L" * 51))

    assert [(v.field, v.message) for v in violations] == [
        ("leave_type", "Leave type cannot exceed 50 characters")
    ]


def test_parse_date_accepts_iso_strings():
    assert parse_date("2024-02-29", "start_date") == date(2024, 2, 29)


def test_parse_date_rejects_garbage():
    with pytest.raises(ValidationError) as exc:
        parse_date("next tuesday", "end_date")

    assert exc.value.violations[0].field == "end_date"


def test_user_validation_collects_every_violation():
    violations = validate_user(
        email="not-an-email",
        firstname="A" * 31,
        surname="",
        role_id=None,
        password="short",
        require_password=True,
    )

    assert [v.field for v in violations] == ["password", "firstname", "surname", "email", "roleID"]


def test_user_validation_skips_password_on_update():
    assert validate_user("ada@example.com", "Ada", "Lovelace", 1) == []


def test_role_name_validation():
    assert validate_role_name("Manager") == []
    assert validate_role_name(" ")[0].message == "Name cannot be empty or whitespace"
    assert validate_role_name("Overlord")[0].message == "Invalid role - not specified in backend program."
