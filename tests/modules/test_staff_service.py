"""User registration and the bootstrap rule."""

from decimal import Decimal
from uuid import uuid4

import pytest

from gp_kernel.domain.actor import Actor, Role
from gp_modules._command_helpers import CommandStatus
from gp_modules.staff.models import User
from gp_modules.staff.service import StaffService


@pytest.fixture
def service(store):
    return StaffService(store)


def test_first_user_needs_no_actor(service):
    result = service.register_user(None, "Harper", "department_head", "3000", "2500")
    assert result.is_success
    assert result.entity.role is Role.DEPARTMENT_HEAD
    assert result.entity.daily_rate == Decimal("3000")


def test_anonymous_registration_closed_after_bootstrap(service):
    service.register_user(None, "Harper", "department_head")
    result = service.register_user(None, "Mallory", "department_head")
    assert result.status is CommandStatus.INVALID_TRANSITION


def test_only_head_registers(service):
    head = service.register_user(None, "Harper", "department_head").entity
    pm = service.register_user(Actor(head.id, head.role), "Morgan", Role.PROJECT_MANAGER).entity

    result = service.register_user(Actor(pm.id, pm.role), "Eli", "employee")
    assert result.status is CommandStatus.INVALID_TRANSITION


@pytest.mark.parametrize("kwargs, field", [
    (dict(name="", role="employee"), "name"),
    (dict(name="Eli", role="auditor"), "role"),
    (dict(name="Eli", role="employee", daily_rate="-1"), "daily_rate"),
])
def test_validation(service, kwargs, field):
    result = service.register_user(None, **kwargs)
    assert result.status is CommandStatus.VALIDATION_FAILED
    assert field in result.message


def test_duplicate_id_rejected(service, store):
    user_id = uuid4()
    service.register_user(None, "Harper", "department_head", user_id=user_id)
    head = Actor(user_id, Role.DEPARTMENT_HEAD)
    result = service.register_user(head, "Again", "employee", user_id=user_id)
    assert result.status is CommandStatus.VALIDATION_FAILED
    assert len(store.list(User)) == 1
