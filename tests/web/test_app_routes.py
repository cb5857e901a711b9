import io

import pandas as pd
import pytest
from werkzeug.security import check_password_hash

from src.time_tracker.time_tracker.auth.messages import EXPIRED_LINK_MESSAGE
from src.time_tracker.time_tracker.core.enums import AccountStatus, Role
from src.time_tracker.time_tracker.main import create_app
from tests.fakes import add_account, build_test_container


@pytest.fixture
def web(tmp_path):
    container = build_test_container(tmp_path)
    app = create_app(settings_module="config.testing", container=container)
    add_account(container, email="admin@example.com", password="Admin123", name="Admin", role=Role.ADMIN)
    add_account(container, email="hr@example.com", password="Hr123456", name="Helga", role=Role.HR)
    add_account(container, email="sam@example.com", password="Student1", name="Sam", role=Role.STUDENT)
    return app.test_client(), container


def login(client, email, password):
    return client.post("/login", data={"email": email, "password": password})


@pytest.mark.parametrize(
    "email,password,target",
    [
        ("admin@example.com", "Admin123", "/admin"),
        ("hr@example.com", "Hr123456", "/hr"),
        ("sam@example.com", "Student1", "/student"),
    ],
)
def test_login_redirects_by_role(web, email, password, target):
    client, _ = web
    response = login(client, email, password)
    assert response.status_code == 302
    assert response.headers["Location"].endswith(target)
    with client.session_transaction() as sess:
        assert sess["active_view"] == target.strip("/")


def test_wrong_password_stays_on_login(web):
    client, _ = web
    response = login(client, "admin@example.com", "nope")
    assert response.status_code == 200
    assert b"Invalid email or password" in response.data


def test_protected_page_needs_login(web):
    client, _ = web
    response = client.get("/admin")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")


def test_student_cannot_open_hr_area(web):
    client, _ = web
    login(client, "sam@example.com", "Student1")
    assert client.get("/hr").status_code == 403


def test_expired_reset_link_lands_on_reset_screen(web):
    client, _ = web
    response = client.get("/?error=access_denied&error_code=otp_expired")
    assert response.status_code == 302
    assert "/reset-password" in response.headers["Location"]

    page = client.get(response.headers["Location"])
    assert EXPIRED_LINK_MESSAGE.encode() in page.data


def test_logout_clears_view(web):
    client, _ = web
    login(client, "admin@example.com", "Admin123")
    response = client.get("/logout")
    assert response.headers["Location"].endswith("/login")
    with client.session_transaction() as sess:
        assert "auth_user_id" not in sess
        assert sess.get("active_view") in (None, "login")


def _recipient_file():
    out = io.BytesIO()
    pd.DataFrame(
        [["max@example.com", "DE", "Du", "Max"], ["anna@example.com", "EN", "Sie", "Anna"]],
        columns=["Mailadresse", "Sprache", "Anrede", "Name"],
    ).to_excel(out, index=False)
    out.seek(0)
    return out


def test_hr_upload_confirm_and_send(web):
    client, container = web
    login(client, "hr@example.com", "Hr123456")

    response = client.post(
        "/hr/upload",
        data={"file": (_recipient_file(), "bewerber.xlsx")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 302

    unconfirmed = client.post("/hr/send", data={})
    assert unconfirmed.status_code == 200
    assert "Möchten Sie wirklich 2 E-Mails versenden?".encode() in unconfirmed.data
    assert container.mailer.sent == []

    client.post("/hr/send", data={"confirmed_count": "2"})
    assert [m.to for m in container.mailer.sent] == ["max@example.com", "anna@example.com"]
    assert container.rejection_email_service.history_size() == 2

    results = client.get("/hr/results.xlsx")
    assert results.status_code == 200
    assert "rejection_emails_" in results.headers["Content-Disposition"]


def test_admin_downloads_csv(web):
    client, _ = web
    login(client, "admin@example.com", "Admin123")
    response = client.get("/admin/reports/entries.csv")
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert response.data.decode("utf-8-sig").startswith('"Student"')


def test_demoted_admin_loses_admin_pages(web):
    client, container = web
    login(client, "admin@example.com", "Admin123")
    admin = container.students_repo.get_by_email("admin@example.com")

    container.students_repo.set_role(admin.id, Role.STUDENT)

    assert client.get("/admin").status_code == 403
    with client.session_transaction() as sess:
        assert sess["role"] == "student"


def test_deactivated_student_is_signed_out(web):
    client, container = web
    login(client, "sam@example.com", "Student1")
    sam = container.students_repo.get_by_email("sam@example.com")

    container.students_repo.set_status(sam.id, AccountStatus.INACTIVE)

    response = client.get("/student")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/login")
    with client.session_transaction() as sess:
        assert "auth_user_id" not in sess


def test_deleted_user_is_signed_out(web):
    client, container = web
    login(client, "hr@example.com", "Hr123456")
    container.auth_users_repo.delete("uid-hr@example.com")

    assert client.get("/hr").headers["Location"].endswith("/login")


def _issued_token(client, container):
    client.post("/forgot-password", data={"email": "sam@example.com"})
    body = container.mailer.sent[-1].body
    return body.split("token=", 1)[1].split("&", 1)[0].split()[0]


def test_recovery_link_end_to_end(web):
    client, container = web
    token = _issued_token(client, container)

    response = client.get(f"/reset-password?token={token}&type=recovery")
    assert response.status_code == 302
    assert response.headers["Location"].endswith("/reset-password")
    with client.session_transaction() as sess:
        assert sess["recovery"] is True
        assert sess["active_view"] == "reset-password"

    form = client.get("/reset-password")
    assert form.status_code == 200
    assert b'name="confirm_password"' in form.data
    assert b"reset session has expired" not in form.data

    done = client.post("/reset-password", data={"password": "NewPass123", "confirm_password": "NewPass123"})
    assert done.status_code == 302
    assert done.headers["Location"].endswith("/login")
    with client.session_transaction() as sess:
        assert "auth_user_id" not in sess
        assert sess.get("active_view") == "login"

    assert login(client, "sam@example.com", "NewPass123").headers["Location"].endswith("/student")


def test_recovery_without_token_shows_expired_session(web):
    client, _ = web
    page = client.get("/reset-password?type=recovery")
    assert page.status_code == 200
    assert b"Your reset session has expired. Please request a new link." in page.data


def test_reset_form_refuses_a_normal_session(web):
    client, container = web
    login(client, "sam@example.com", "Student1")

    page = client.post("/reset-password", data={"password": "Hijack123", "confirm_password": "Hijack123"})

    assert page.status_code == 200
    user = container.auth_users_repo.get_by_email("sam@example.com")
    assert check_password_hash(user.password_hash, "Student1")
    assert not check_password_hash(user.password_hash, "Hijack123")
