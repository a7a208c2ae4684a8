import uuid

from studymate.main import app
from tests.http_client import SyncASGIClient, signed_up_client


def _email() -> str:
    return f"user_{uuid.uuid4().hex[:10]}@example.com"


def test_signup_login_session_and_logout():
    client = SyncASGIClient(app)
    email = _email()

    created = client.post("/v1/auth/signup", json={"email": email, "password": "secret123", "grade": "12"})
    assert created.status_code == 200
    body = created.json()
    assert body["email"] == email
    assert body["userId"].startswith("usr_")
    assert body["tokenType"] == "bearer"

    login = client.post("/v1/auth/login", json={"email": email.upper(), "password": "secret123"})
    assert login.status_code == 200
    client.token = login.json()["accessToken"]

    session = client.get("/v1/auth/session")
    assert session.status_code == 200
    assert session.json()["userId"] == body["userId"]

    logout = client.post("/v1/auth/logout")
    assert logout.status_code == 200
    assert client.get("/v1/auth/session").status_code == 401


def test_signup_validation_and_conflicts():
    client = SyncASGIClient(app)
    email = _email()

    assert client.post("/v1/auth/signup", json={"email": "nope", "password": "secret123"}).status_code == 422
    assert client.post("/v1/auth/signup", json={"email": email, "password": "123"}).status_code == 422
    bad_grade = client.post("/v1/auth/signup", json={"email": email, "password": "secret123", "grade": "9"})
    assert bad_grade.status_code == 422

    assert client.post("/v1/auth/signup", json={"email": email, "password": "secret123"}).status_code == 200
    duplicate = client.post("/v1/auth/signup", json={"email": email, "password": "secret123"})
    assert duplicate.status_code == 409


def test_wrong_password_is_unauthorized():
    client = SyncASGIClient(app)
    email = _email()
    client.post("/v1/auth/signup", json={"email": email, "password": "secret123"})

    resp = client.post("/v1/auth/login", json={"email": email, "password": "wrong-pass"})

    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid email or password"


def test_profile_requires_session():
    client = SyncASGIClient(app)

    assert client.get("/v1/profile").status_code == 401
    client.token = "not-a-token"
    assert client.get("/v1/profile").status_code == 401


def test_profile_read_and_update():
    client = signed_up_client(app, grade="10")

    profile = client.get("/v1/profile")
    assert profile.status_code == 200
    assert profile.json()["grade"] == "10"
    assert profile.json()["isPremium"] is False

    patched = client.patch("/v1/profile", json={"phone": " 9876543210 ", "grade": "11"})
    assert patched.status_code == 200
    assert patched.json()["phone"] == "9876543210"
    assert patched.json()["grade"] == "11"

    assert client.patch("/v1/profile", json={"grade": "13"}).status_code == 422


def test_payment_flow_marks_profile_premium():
    client = signed_up_client(app)

    settings = client.get("/v1/payments/settings")
    assert settings.status_code == 200
    price = settings.json()["price"]
    assert settings.json()["qrCodeUrl"].startswith("https://example.com/qr")

    blank = client.post("/v1/payments/transactions", json={"transactionNumber": "   "})
    assert blank.status_code == 422

    created = client.post("/v1/payments/transactions", json={"transactionNumber": " UPI-12345 "})
    assert created.status_code == 200
    body = created.json()
    assert body["transactionId"].startswith("txn_")
    assert body["transactionNumber"] == "UPI-12345"
    assert body["amount"] == price

    assert client.get("/v1/profile").json()["isPremium"] is True

    listed = client.get("/v1/payments/transactions")
    assert listed.status_code == 200
    assert [(t["transactionId"], t["transactionNumber"]) for t in listed.json()["items"]] == [
        (body["transactionId"], "UPI-12345")
    ]


def test_transaction_list_is_per_user_and_requires_login():
    assert SyncASGIClient(app).get("/v1/payments/transactions").status_code == 401

    payer = signed_up_client(app)
    payer.post("/v1/payments/transactions", json={"transactionNumber": "UPI-1"})
    other = signed_up_client(app)

    assert other.get("/v1/payments/transactions").json() == {"items": []}
