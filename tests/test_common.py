from __future__ import annotations

from datetime import datetime

import pytest

from conftest import make_user
from crm_system.common.datetime_utils import parse_iso_datetime, parse_optional_datetime
from crm_system.common.pagination import Page, PageRequest
from crm_system.common.resolvers import resolve_machine, resolve_user, to_identifier
from crm_system.common.validators import require_int_in_range, require_number
from crm_system.core.enums import Role
from crm_system.core.exceptions import NotFoundError, ValidationError


@pytest.mark.parametrize(
    "page, limit, expected",
    [(None, None, (1, 10)), ("3", "20", (3, 20)), ("abc", "0", (1, 10)), ("-2", "5", (1, 5))],
)
def test_page_request_from_query(page, limit, expected):
    request = PageRequest.from_query(page, limit)
    assert (request.page, request.limit) == expected


def test_page_metadata():
    page = Page(items=[1, 2], total=21, request=PageRequest(page=3, limit=10))

    assert PageRequest(page=3, limit=10).offset == 20
    assert page.pagination() == {"total": 21, "pages": 3, "currentPage": 3, "limit": 10}


def test_resolve_user_by_id_or_name(users_repo):
    assert resolve_user(users_repo, 5).name == "Ana"
    assert resolve_user(users_repo, "5").name == "Ana"
    assert resolve_user(users_repo, "Ana", role=Role.MANAGER).user_id == 5

    with pytest.raises(NotFoundError, match="User not found"):
        resolve_user(users_repo, "Ghost")
    with pytest.raises(NotFoundError):
        resolve_user(users_repo, "Ben", role=Role.MANAGER)


def test_resolve_machine_by_id_or_name(machines_repo):
    assert resolve_machine(machines_repo, 2).name == "Lathe B"
    assert resolve_machine(machines_repo, "Press A").machine_id == 1

    with pytest.raises(NotFoundError, match="Machine not found"):
        resolve_machine(machines_repo, 42)


@pytest.mark.parametrize("value", [None, True, "  ", 3.5, []])
def test_to_identifier_rejects_non_identifiers(value):
    with pytest.raises(ValidationError):
        to_identifier(value, "assignedTo")


def test_parse_iso_datetime():
    assert parse_iso_datetime("2026-03-02", "deadline") == datetime(2026, 3, 2)
    assert parse_iso_datetime("2026-03-02T08:15:00", "deadline") == datetime(2026, 3, 2, 8, 15)
    assert parse_iso_datetime("2026-03-02T08:15:00Z", "deadline").tzinfo is None
    assert parse_optional_datetime("", "deadline") is None

    with pytest.raises(ValidationError):
        parse_iso_datetime("02/03/2026", "deadline")


def test_resolve_user_with_role_skips_same_named_user_of_other_role(users_repo):
    users_repo.rows[3] = make_user(3, "Dana", Role.EMPLOYEE)
    users_repo.rows[4] = make_user(4, "Dana", Role.MANAGER, email="dana.m@crm.local")

    assert resolve_user(users_repo, "Dana", role=Role.MANAGER).user_id == 4
    assert resolve_user(users_repo, "Dana").user_id == 3
    with pytest.raises(NotFoundError):
        resolve_user(users_repo, 3, role=Role.MANAGER)


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "Infinity", 10**400, 2.5])
def test_require_int_in_range_rejects_non_integers(value):
    with pytest.raises(ValidationError, match="must be an integer"):
        require_int_in_range(value, "Progress", 0, 100)


def test_require_int_in_range_accepts_whole_numbers():
    assert require_int_in_range(40.0, "Progress", 0, 100) == 40
    assert require_int_in_range("75", "Progress", 0, 100) == 75


@pytest.mark.parametrize("value", [float("inf"), float("nan"), "-Infinity"])
def test_require_number_rejects_non_finite(value):
    with pytest.raises(ValidationError, match="must be a number"):
        require_number(value, "Cost", minimum=0)
