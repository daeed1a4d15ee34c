import pytest
from django.contrib.auth.models import AnonymousUser

from api.v1.permissions import IsAdmin, IsManagerOrAdmin, ReadOnlyOrAdmin, ReadOnlyOrManager


class DummyRequest:
    def __init__(self, user, method="GET"):
        self.user = user
        self.method = method


@pytest.mark.django_db
@pytest.mark.parametrize(
    "permission, method, expected",
    [
        (IsAdmin(), "GET", {"admin": True, "manager": False, "employee": False}),
        (IsManagerOrAdmin(), "POST", {"admin": True, "manager": True, "employee": False}),
        (ReadOnlyOrManager(), "GET", {"admin": True, "manager": True, "employee": True}),
        (ReadOnlyOrManager(), "DELETE", {"admin": True, "manager": True, "employee": False}),
        (ReadOnlyOrAdmin(), "GET", {"admin": True, "manager": True, "employee": True}),
        (ReadOnlyOrAdmin(), "PATCH", {"admin": True, "manager": False, "employee": False}),
    ],
)
def test_role_matrix(permission, method, expected, admin_user, manager_user, employee_user):
    users = {"admin": admin_user, "manager": manager_user, "employee": employee_user}

    granted = {
        name: permission.has_permission(DummyRequest(user, method), view=None)
        for name, user in users.items()
    }

    assert granted == expected


@pytest.mark.parametrize("permission", [IsAdmin(), IsManagerOrAdmin(), ReadOnlyOrManager(), ReadOnlyOrAdmin()])
def test_anonymous_is_always_refused(permission):
    assert permission.has_permission(DummyRequest(AnonymousUser()), view=None) is False


@pytest.mark.django_db
def test_superuser_counts_as_admin_whatever_the_role(employee_user):
    employee_user.is_superuser = True

    assert IsAdmin().has_permission(DummyRequest(employee_user, "DELETE"), view=None) is True
