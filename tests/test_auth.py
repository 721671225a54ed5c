"""
Authentication and role boundary tests.

Guards against:
1. Sign-up escalating to a privileged role
2. Credentials leaking (password hash in any response)
3. Tokens surviving their user or carrying a stale role
4. Password changes going through the profile route
"""
from datetime import datetime, timedelta

from jose import jwt

from app.config import get_settings
from app.models.user import User, ROLE_ADMIN, ROLE_CUSTOMER, ROLE_AGENT


# ---------------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------------

def test_register_creates_customer_and_returns_token(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Amina", "email": "Amina@Example.com", "password": "longenough"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "success"
    assert body["token"]
    user = body["data"]["user"]
    assert user["role"] == ROLE_CUSTOMER
    assert user["email"] == "amina@example.com"
    assert "password" not in user and "passwordHash" not in user


def test_register_ignores_requested_role(client, db):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Mallory", "email": "m@example.com", "password": "longenough", "role": "admin"},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["role"] == ROLE_CUSTOMER
    assert db.query(User).filter(User.email == "m@example.com").one().role == ROLE_CUSTOMER


def test_register_rejects_short_password(client):
    resp = client.post("/api/auth/register", json={"name": "A", "email": "a@example.com", "password": "short"})
    assert resp.status_code == 400
    assert resp.json()["status"] == "fail"


def test_register_rejects_duplicate_email(client, customer):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "JANE@example.com", "password": "longenough"},
    )
    assert resp.status_code == 400


def test_register_missing_field_is_400(client):
    resp = client.post("/api/auth/register", json={"email": "x@example.com"})
    assert resp.status_code == 400
    assert resp.json()["status"] == "fail"


def test_login_returns_token_for_valid_credentials(client, customer):
    resp = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "password123"})
    assert resp.status_code == 200
    token = resp.json()["token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["id"] == customer.id


def test_login_wrong_password_and_unknown_email_look_the_same(client, customer):
    wrong = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "nope-nope"})
    unknown = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "nope-nope"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json()["message"] == unknown.json()["message"]


def test_login_missing_fields_is_400(client):
    resp = client.post("/api/auth/login", json={"email": "jane@example.com"})
    assert resp.status_code == 400


# ---------------------------------------------------------------------------
# Token handling
# ---------------------------------------------------------------------------

def test_missing_token_is_401(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json() == {
        "status": "fail",
        "message": "You are not logged in. Please log in to get access.",
    }


def test_garbage_token_is_401(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_expired_token_is_401(client, customer):
    settings = get_settings()
    token = jwt.encode(
        {"sub": str(customer.id), "exp": datetime.utcnow() - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_for_deleted_user_is_401(client, db, customer, auth_for):
    headers = auth_for(customer)
    db.delete(customer)
    db.commit()
    resp = client.get("/api/auth/me", headers=headers)
    assert resp.status_code == 401
    assert "no longer exists" in resp.json()["message"]


def test_role_is_read_from_database_not_token(client, db, customer, auth_for):
    headers = auth_for(customer)
    assert client.get("/api/shipments", headers=headers).status_code == 403

    customer.role = ROLE_ADMIN
    db.commit()
    assert client.get("/api/shipments", headers=headers).status_code == 200


# ---------------------------------------------------------------------------
# Role boundary
# ---------------------------------------------------------------------------

ADMIN_ROUTES = [
    ("get", "/api/shipments"),
    ("get", "/api/shipments/summary"),
    ("get", "/api/customers"),
    ("get", "/api/agents"),
    ("get", "/api/agents/list"),
    ("get", "/api/payments"),
    ("get", "/api/payments/chart-data"),
    ("get", "/api/messages"),
    ("get", "/api/settings"),
    ("get", "/api/dashboard/stats"),
]


def test_customer_gets_403_on_admin_routes(client, customer_headers):
    for method, path in ADMIN_ROUTES:
        resp = getattr(client, method)(path, headers=customer_headers)
        assert resp.status_code == 403, path
        assert resp.json()["status"] == "fail"


def test_agent_gets_403_on_admin_routes(client, make_user, auth_for):
    headers = auth_for(make_user(ROLE_AGENT))
    for method, path in ADMIN_ROUTES:
        assert getattr(client, method)(path, headers=headers).status_code == 403, path


def test_admin_gets_403_on_customer_dashboard(client, admin_headers):
    assert client.get("/api/customer-dashboard/stats", headers=admin_headers).status_code == 403


def test_admin_routes_need_a_token(client):
    for method, path in ADMIN_ROUTES:
        assert getattr(client, method)(path).status_code == 401, path


# ---------------------------------------------------------------------------
# Self-service
# ---------------------------------------------------------------------------

def test_update_password_requires_current_password(client, customer_headers):
    resp = client.patch(
        "/api/auth/update-password",
        headers=customer_headers,
        json={"passwordCurrent": "wrong-one", "password": "brand-new-pass"},
    )
    assert resp.status_code == 401


def test_update_password_issues_working_token(client, customer_headers):
    resp = client.patch(
        "/api/auth/update-password",
        headers=customer_headers,
        json={"passwordCurrent": "password123", "password": "brand-new-pass"},
    )
    assert resp.status_code == 200
    token = resp.json()["token"]
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200

    relogin = client.post("/api/auth/login", json={"email": "jane@example.com", "password": "brand-new-pass"})
    assert relogin.status_code == 200


def test_tokens_issued_before_password_change_are_rejected(client, customer):
    settings = get_settings()
    issued = datetime.utcnow() - timedelta(minutes=5)
    old_token = jwt.encode(
        {"sub": str(customer.id), "iat": issued, "exp": datetime.utcnow() + timedelta(hours=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    old_headers = {"Authorization": f"Bearer {old_token}"}
    assert client.get("/api/auth/me", headers=old_headers).status_code == 200

    resp = client.patch(
        "/api/auth/update-password",
        headers=old_headers,
        json={"passwordCurrent": "password123", "password": "brand-new-pass"},
    )
    assert resp.status_code == 200
    new_headers = {"Authorization": f"Bearer {resp.json()['token']}"}

    stale = client.get("/api/auth/me", headers=old_headers)
    assert stale.status_code == 401
    assert "changed password" in stale.json()["message"]
    assert client.get("/api/auth/me", headers=new_headers).status_code == 200


def test_update_me_changes_profile_but_not_role(client, customer_headers):
    resp = client.patch(
        "/api/auth/update-me",
        headers=customer_headers,
        json={"name": "Jane W.", "phone": "+254700000000", "role": "admin"},
    )
    assert resp.status_code == 200
    user = resp.json()["data"]["user"]
    assert user["name"] == "Jane W."
    assert user["phone"] == "+254700000000"
    assert user["role"] == ROLE_CUSTOMER


def test_update_me_rejects_password(client, customer_headers):
    resp = client.patch("/api/auth/update-me", headers=customer_headers, json={"password": "sneaky-pass"})
    assert resp.status_code == 400
    assert "/update-password" in resp.json()["message"]


def test_update_me_rejects_taken_email(client, make_user, customer_headers):
    make_user(email="taken@example.com")
    resp = client.patch("/api/auth/update-me", headers=customer_headers, json={"email": "taken@example.com"})
    assert resp.status_code == 400
