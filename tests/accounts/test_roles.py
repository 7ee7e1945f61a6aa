import pytest
from django.contrib.auth.models import AnonymousUser

from accounts.models import User
from accounts.roles import RoleRequired, has_role, require_admin, require_role, require_vendor


@pytest.mark.django_db
def test_require_admin_returns_user(admin_user):
    assert require_admin(admin_user) is admin_user


@pytest.mark.django_db
def test_wrong_role_is_rejected(customer_user, vendor_user):
    with pytest.raises(RoleRequired):
        require_admin(customer_user)
    with pytest.raises(RoleRequired):
        require_admin(vendor_user)
    with pytest.raises(RoleRequired):
        require_vendor(customer_user)


def test_anonymous_user_is_rejected():
    with pytest.raises(RoleRequired) as excinfo:
        require_role(AnonymousUser(), User.Role.ADMIN)
    assert excinfo.value.status_code == 401


@pytest.mark.django_db
def test_inactive_user_is_rejected(admin_user):
    admin_user.is_active = False
    assert not has_role(admin_user, User.Role.ADMIN)


def test_require_role_needs_roles():
    with pytest.raises(ValueError):
        require_role(AnonymousUser())


@pytest.mark.django_db
def test_manager_helpers(admin_user, vendor_user, customer_user):
    assert set(User.objects.vendors()) == {vendor_user}
    assert set(User.objects.customers()) == {customer_user}
    assert admin_user.is_admin and vendor_user.is_vendor and customer_user.is_customer
