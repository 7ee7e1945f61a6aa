import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import exceptions

from accounts.roles import RoleRequired
from core import exceptions as exceptions_module
from core.exceptions import GENERIC_ERROR_MESSAGE, DomainError, api_exception_handler


class DummyView:
    pass


CONTEXT = {"view": DummyView()}


def test_domain_error_is_a_400_with_details():
    response = api_exception_handler(DomainError("Nope", details={"status": ["bad"]}), CONTEXT)

    assert response.status_code == 400
    assert response.data == {"success": False, "error": "Nope", "details": {"status": ["bad"]}}


def test_validation_errors_share_one_shape():
    drf = api_exception_handler(exceptions.ValidationError({"days": ["A valid integer is required."]}), CONTEXT)
    django = api_exception_handler(DjangoValidationError({"days": ["Too large."]}), CONTEXT)

    assert drf.status_code == django.status_code == 400
    assert drf.data["error"] == django.data["error"] == "Invalid request"
    assert drf.data["details"] == {"days": ["A valid integer is required."]}
    assert django.data["details"] == {"days": ["Too large."]}


def test_role_failure_is_a_401():
    response = api_exception_handler(RoleRequired(), CONTEXT)

    assert response.status_code == 401
    assert response.data == {"success": False, "error": "Unauthorized"}


def test_not_found():
    response = api_exception_handler(Http404(), CONTEXT)

    assert response.status_code == 404
    assert response.data == {"success": False, "error": "Not found"}


def test_unexpected_errors_become_generic_500(monkeypatch):
    logged = []
    monkeypatch.setattr(exceptions_module.logger, "exception", lambda *args, **kwargs: logged.append(args))

    response = api_exception_handler(RuntimeError("connection reset"), CONTEXT)

    assert response.status_code == 500
    assert response.data == {"success": False, "error": GENERIC_ERROR_MESSAGE}
    assert "connection reset" not in str(response.data)
    assert logged and "DummyView" in logged[0]


@pytest.mark.parametrize("exc", [DomainError("Nope"), RuntimeError("boom")])
def test_failed_requests_roll_back_their_writes(monkeypatch, exc):
    rollbacks = []
    monkeypatch.setattr(exceptions_module, "set_rollback", lambda: rollbacks.append(True))
    monkeypatch.setattr(exceptions_module.logger, "exception", lambda *args, **kwargs: None)

    api_exception_handler(exc, CONTEXT)

    assert rollbacks == [True]
