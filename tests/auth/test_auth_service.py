from dataclasses import replace

import pytest
from werkzeug.security import check_password_hash

from src.time_tracker.time_tracker.auth.tokens import OTP_EXPIRED
from src.time_tracker.time_tracker.core.enums import AccountStatus, AuthEvent, Role
from src.time_tracker.time_tracker.core.exceptions import AuthenticationError, ValidationError
from tests.fakes import RecordingMailer, add_account, build_test_container


@pytest.fixture
def events(container):
    seen = []
    container.auth_events.subscribe(lambda event, auth: seen.append(event))
    return seen


@pytest.fixture
def sam(container):
    return add_account(container, email="sam@example.com", password="secret1", name="Sam", role=Role.STUDENT)


def test_sign_in_builds_session(container, sam, events):
    auth = container.auth_service.sign_in_with_password(" SAM@example.com ", "secret1")
    assert auth.student_id == sam.id
    assert auth.role == Role.STUDENT
    assert auth.name == "Sam"
    assert container.auth_users_repo.sign_ins == [sam.auth_user_id]
    assert events == [AuthEvent.SIGNED_IN]


def test_sign_in_wrong_password(container, sam):
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.sign_in_with_password("sam@example.com", "nope")
    assert exc.value.code == AuthenticationError.INVALID_CREDENTIALS


def test_sign_in_inactive_account(container, sam):
    container.students_repo.set_status(sam.id, AccountStatus.INACTIVE)
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.sign_in_with_password("sam@example.com", "secret1")
    assert exc.value.code == AuthenticationError.ACCOUNT_INACTIVE


def test_sign_in_unconfirmed_email(container):
    container.auth_service.sign_up("new@example.com", "secret1", name="New", email_confirmed=False)
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.sign_in_with_password("new@example.com", "secret1")
    assert exc.value.code == AuthenticationError.EMAIL_NOT_CONFIRMED


def test_sign_in_requires_fields(container):
    with pytest.raises(ValidationError):
        container.auth_service.sign_in_with_password("", "")


def test_reset_mail_contains_working_link(container, sam, events):
    service = container.auth_service
    service.reset_password_for_email("sam@example.com")

    message = container.mailer.sent[-1]
    assert message.to == "sam@example.com"
    link = next(line for line in message.body.splitlines() if line.startswith("http://testserver/reset-password?"))
    token = link.split("token=", 1)[1].split("&", 1)[0]

    auth = service.exchange_recovery_token(token)
    assert auth.recovery is True
    assert auth.student_id == sam.id
    assert events == [AuthEvent.PASSWORD_RECOVERY]

    service.update_user_password(auth, "NewPass123", "NewPass123")
    assert events[-1] == AuthEvent.USER_UPDATED
    assert service.sign_in_with_password("sam@example.com", "NewPass123").student_id == sam.id

    # the old link dies with the old password
    with pytest.raises(AuthenticationError):
        service.exchange_recovery_token(token)


def test_reset_for_unknown_address_is_silent(container):
    container.auth_service.reset_password_for_email("ghost@example.com")
    assert container.mailer.sent == []


def test_reset_mail_failure_is_reported(tmp_path):
    container = build_test_container(tmp_path, mailer=RecordingMailer(fail_for=["sam@example.com"]))
    add_account(container, email="sam@example.com", password="secret1", name="Sam", role=Role.STUDENT)
    with pytest.raises(ValidationError):
        container.auth_service.reset_password_for_email("sam@example.com")


def test_expired_token(tmp_path):
    container = build_test_container(tmp_path, RESET_TOKEN_MAX_AGE=-1)
    add_account(container, email="sam@example.com", password="secret1", name="Sam", role=Role.STUDENT)
    container.auth_service.reset_password_for_email("sam@example.com")
    token = container.mailer.sent[-1].body.split("token=", 1)[1].split("&", 1)[0]

    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.exchange_recovery_token(token)
    assert exc.value.code == AuthenticationError.RECOVERY_LINK_INVALID
    assert str(exc.value) == OTP_EXPIRED


def test_tampered_token(container):
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.exchange_recovery_token("garbage.token")
    assert exc.value.code == AuthenticationError.RECOVERY_LINK_INVALID


@pytest.mark.parametrize(
    "password, message",
    [
        ("Short1", "at least 8"),
        ("alllower123", "uppercase"),
        ("ALLUPPER123", "lowercase"),
        ("NoDigitsHere", "number"),
    ],
)
def test_reset_password_strength(container, sam, password, message):
    auth = replace(container.auth_service.sign_in_with_password("sam@example.com", "secret1"), recovery=True)
    with pytest.raises(ValidationError, match=message):
        container.auth_service.update_user_password(auth, password, password)


def test_reset_password_confirmation_must_match(container, sam):
    auth = replace(container.auth_service.sign_in_with_password("sam@example.com", "secret1"), recovery=True)
    with pytest.raises(ValidationError, match="do not match"):
        container.auth_service.update_user_password(auth, "NewPass123", "NewPass124")


def test_reset_without_session(container):
    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.update_user_password(None, "NewPass123", "NewPass123")
    assert exc.value.code == AuthenticationError.NO_SESSION


def test_reset_refuses_a_normal_session(container, sam):
    auth = container.auth_service.sign_in_with_password("sam@example.com", "secret1")

    with pytest.raises(AuthenticationError) as exc:
        container.auth_service.update_user_password(auth, "Hijack123", "Hijack123")

    assert exc.value.code == AuthenticationError.NO_SESSION
    user = container.auth_users_repo.get_by_email("sam@example.com")
    assert check_password_hash(user.password_hash, "secret1")


def test_change_password_clears_first_login(container, events):
    add_account(container, email="new@example.com", password="secret1", name="New", role=Role.STUDENT, first_login=True)
    service = container.auth_service
    auth = service.sign_in_with_password("new@example.com", "secret1")
    assert auth.first_login is True

    with pytest.raises(ValidationError, match="Current password is incorrect"):
        service.change_password(auth, current_password="wrong", new_password="better1", confirm_password="better1")
    with pytest.raises(ValidationError, match="do not match"):
        service.change_password(auth, current_password="secret1", new_password="better1", confirm_password="better2")
    with pytest.raises(ValidationError):
        service.change_password(auth, current_password="secret1", new_password="abc", confirm_password="abc")

    service.change_password(auth, current_password="secret1", new_password="better1", confirm_password="better1")
    assert container.students_repo.get_by_id(auth.student_id).first_login is False
    assert service.sign_in_with_password("new@example.com", "better1").first_login is False
    assert AuthEvent.USER_UPDATED in events


def test_sign_out_and_stale_session(container, sam, events):
    service = container.auth_service
    auth = service.sign_in_with_password("sam@example.com", "secret1")
    service.sign_out(auth)
    assert events[-1] == AuthEvent.SIGNED_OUT

    container.auth_users_repo.delete(sam.auth_user_id)
    assert service.get_session(auth) is None
    assert service.get_session(None) is None


def test_session_follows_profile_changes(container, sam):
    service = container.auth_service
    auth = service.sign_in_with_password("sam@example.com", "secret1")

    container.students_repo.set_role(sam.id, Role.ADMIN)
    assert service.get_session(auth).role == Role.ADMIN

    container.students_repo.set_status(sam.id, AccountStatus.INACTIVE)
    assert service.get_session(auth) is None
