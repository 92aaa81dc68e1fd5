import pytest

from coaching.core.errors import UpdateNotFound
from coaching.models.transaction import Transaction
from coaching.models.user import Enrollment, UserRole
from coaching.services.enrollment import EnrollmentRecorder
from tests.conftest import auth_headers, make_course, make_user


@pytest.fixture
def student(session_factory):
    db = session_factory()
    user = make_user(db)
    db.close()
    return user


@pytest.fixture
def course(session_factory):
    db = session_factory()
    course = make_course(db, id="c1", price=49.99)
    db.close()
    return course


def _checkout(client, user, **overrides):
    body = {"course_id": "c1", "amount": 4199, "currency": "INR", "payment_method": "CARD"}
    body.update(overrides)
    return client.post("/api/payments/checkout", json=body, headers=auth_headers(user))


def test_quote_converts_usd_to_inr(client, course):
    response = client.get("/api/payments/quote/c1")

    assert response.status_code == 200
    assert response.json() == {"course_id": "c1", "price": 49.99, "amount": 4199, "currency": "INR"}


def test_quote_unknown_course(client):
    assert client.get("/api/payments/quote/nope").status_code == 404


def test_checkout_records_transaction_and_enrolls(client, student, course, session_factory):
    response = _checkout(client, student)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["enrolled_course_ids"] == ["c1"]
    assert data["transaction_ref"].startswith("txn_")

    db = session_factory()
    txn = db.query(Transaction).one()
    assert txn.destination_account == "9661778393@ikwik"
    assert txn.upi_id is None
    assert txn.owner_account_credited is True
    db.close()


def test_checkout_twice_enrolls_once(client, student, course, session_factory):
    _checkout(client, student)
    response = _checkout(client, student)

    assert response.json()["enrolled_course_ids"] == ["c1"]
    db = session_factory()
    assert db.query(Enrollment).count() == 1
    assert db.query(Transaction).count() == 2
    db.close()


def test_upi_checkout_keeps_payer_id(client, student, course, session_factory):
    response = _checkout(client, student, payment_method="UPI", upi_id="asha@okbank")

    assert response.status_code == 200
    db = session_factory()
    assert db.query(Transaction).one().upi_id == "asha@okbank"
    db.close()


def test_failed_payment_commits_nothing(client, student, course, session_factory):
    response = _checkout(client, student, payment_method="UPI", upi_id="not-a-upi-id")

    assert response.status_code == 402
    assert response.json()["detail"] == "Invalid UPI ID format"
    db = session_factory()
    assert db.query(Transaction).count() == 0
    assert db.query(Enrollment).count() == 0
    db.close()


def test_amount_is_not_checked_against_price(client, student, course):
    response = _checkout(client, student, amount=1)

    assert response.status_code == 200


def test_checkout_requires_student(client, course, session_factory):
    db = session_factory()
    instructor = make_user(db, role=UserRole.INSTRUCTOR)
    db.close()

    assert _checkout(client, instructor).status_code == 403
    assert client.post("/api/payments/checkout", json={}).status_code == 401


def test_transactions_visible_to_admin_only(client, student, course, session_factory):
    db = session_factory()
    admin = make_user(db, role=UserRole.ADMIN)
    db.close()
    _checkout(client, student)

    as_admin = client.get("/api/payments/transactions", headers=auth_headers(admin))
    as_student = client.get("/api/payments/transactions", headers=auth_headers(student))

    assert as_admin.status_code == 200
    assert len(as_admin.json()) == 1
    assert as_student.status_code == 403


def test_enrollment_failure_rolls_back_payment(client, student, course, session_factory, monkeypatch):
    def fail(self, user_id, course_id):
        raise UpdateNotFound("User not found")

    monkeypatch.setattr(EnrollmentRecorder, "confirm", fail)

    response = _checkout(client, student)

    assert response.status_code == 404
    db = session_factory()
    assert db.query(Transaction).count() == 0
    assert db.query(Enrollment).count() == 0
    db.close()


def test_enrolled_student_sees_join_link_after_checkout(client, student, course):
    before = client.get("/api/courses", headers=auth_headers(student)).json()
    _checkout(client, student)
    after = client.get("/api/courses", headers=auth_headers(student)).json()

    assert before[0]["meet_link"] is None
    assert after[0]["meet_link"] == "https://meet.example.com/abc"
