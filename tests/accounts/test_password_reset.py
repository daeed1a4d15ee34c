import json
from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.models import PasswordReset
from accounts.services import purge_stale_password_resets

AUTH_URL = "/api/v1/auth/"
GENERIC_ANSWER = {"message": "If the email exists, a verification code has been sent"}


def _post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


@pytest.mark.django_db
def test_forgot_password_mails_a_six_digit_code(client, employee_user, mailoutbox):
    response = _post_json(client, f"{AUTH_URL}forgot-password/", {"email": employee_user.email})

    assert response.status_code == 200
    assert response.json() == GENERIC_ANSWER
    reset = PasswordReset.objects.get(email=employee_user.email)
    assert len(reset.code) == 6 and reset.code.isdigit()
    assert not reset.is_used
    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == [employee_user.email]
    assert reset.code in mailoutbox[0].body


@pytest.mark.django_db
def test_unknown_email_gets_the_same_answer(client, mailoutbox):
    response = _post_json(client, f"{AUTH_URL}forgot-password/", {"email": "ghost@test.com"})

    assert response.status_code == 200
    assert response.json() == GENERIC_ANSWER
    assert not PasswordReset.objects.exists()
    assert mailoutbox == []


@pytest.mark.django_db
def test_new_request_supersedes_previous_code(client, employee_user):
    _post_json(client, f"{AUTH_URL}forgot-password/", {"email": employee_user.email})
    _post_json(client, f"{AUTH_URL}forgot-password/", {"email": employee_user.email})

    assert PasswordReset.objects.filter(email=employee_user.email, is_used=False).count() == 1


@pytest.mark.django_db
def test_verify_code(client, employee_user):
    reset = PasswordReset.objects.create(email=employee_user.email, code="123456")

    response = _post_json(
        client, f"{AUTH_URL}verify-reset-code/", {"email": reset.email, "code": "123456"},
    )
    assert response.status_code == 200
    assert response.json() == {"message": "Code verified successfully"}

    response = _post_json(
        client, f"{AUTH_URL}verify-reset-code/", {"email": reset.email, "code": "654321"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid or expired verification code"

    response = _post_json(
        client, f"{AUTH_URL}verify-reset-code/", {"email": reset.email, "code": "12ab"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "code: Code must be 6 digits."


@pytest.mark.django_db
def test_expired_code_is_rejected(client, employee_user):
    PasswordReset.objects.create(
        email=employee_user.email,
        code="123456",
        expires_at=timezone.now() - timedelta(minutes=1),
    )

    response = _post_json(
        client, f"{AUTH_URL}verify-reset-code/", {"email": employee_user.email, "code": "123456"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Verification code has expired"


@pytest.mark.django_db
def test_reset_password_consumes_the_code(client, employee_user):
    PasswordReset.objects.create(email=employee_user.email, code="123456")
    payload = {"email": employee_user.email, "code": "123456", "new_password": "Brandnew456"}

    response = _post_json(client, f"{AUTH_URL}reset-password/", payload)

    assert response.status_code == 200
    assert response.json() == {"message": "Password has been reset successfully"}
    employee_user.refresh_from_db()
    assert employee_user.check_password("Brandnew456")
    assert PasswordReset.objects.get().is_used

    again = _post_json(client, f"{AUTH_URL}reset-password/", payload)
    assert again.status_code == 400


@pytest.mark.django_db
def test_reset_password_enforces_strength(client, employee_user):
    PasswordReset.objects.create(email=employee_user.email, code="123456")

    short = _post_json(client, f"{AUTH_URL}reset-password/", {
        "email": employee_user.email, "code": "123456", "new_password": "Ab1",
    })
    assert short.status_code == 400
    assert short.json()["error"] == "new_password: Password must be at least 8 characters long"

    weak = _post_json(client, f"{AUTH_URL}reset-password/", {
        "email": employee_user.email, "code": "123456", "new_password": "lowercase99",
    })
    assert weak.status_code == 400
    assert weak.json()["error"] == "Password must contain uppercase, lowercase, and numbers"
    assert not PasswordReset.objects.get().is_used


@pytest.mark.django_db
def test_purge_removes_used_and_expired_codes(employee_user):
    live = PasswordReset.objects.create(email=employee_user.email, code="111111")
    PasswordReset.objects.create(email=employee_user.email, code="222222", is_used=True)
    PasswordReset.objects.create(
        email=employee_user.email,
        code="333333",
        expires_at=timezone.now() - timedelta(hours=1),
    )

    assert purge_stale_password_resets() == 2
    assert list(PasswordReset.objects.all()) == [live]
