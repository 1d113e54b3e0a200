"""
Integration tests for authentication and role gating over HTTP.
"""
from datetime import timedelta

from hms.core.security import create_access_token
from hms.models.patient import Patient
from hms.models.user import User, UserRole


def _register(client, email="a@x.com", password="p", **extra):
    return client.post("/auth/register", json={"email": email, "password": password, **extra})


class TestRegister:
    def test_role_defaults_to_patient(self, client):
        resp = _register(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["role"] == "patient"
        assert body["email"] == "a@x.com"
        assert "hashed_password" not in body
        assert "password" not in body

    def test_duplicate_email_any_case_conflicts(self, client):
        assert _register(client, email="a@x.com").status_code == 201
        resp = _register(client, email="  A@X.COM ")
        assert resp.status_code == 409
        assert resp.json() == {"error": "User with that email already exists"}

    def test_email_is_normalized(self, client, session_factory):
        _register(client, email="  Mixed.Case@Example.ORG ")
        with session_factory() as db:
            assert db.query(User).filter(User.email == "mixed.case@example.org").count() == 1

    def test_patient_record_created_with_account(self, client, session_factory):
        user_id = _register(client, name="Ann Patient").json()["id"]
        with session_factory() as db:
            patient = db.query(Patient).filter(Patient.user_id == user_id).one()
            assert patient.name == "Ann Patient"

    def test_missing_password_is_400(self, client):
        resp = client.post("/auth/register", json={"email": "a@x.com"})
        assert resp.status_code == 400
        assert "password" in resp.json()["error"]

    def test_non_patient_role_needs_admin(self, client):
        resp = _register(client, role="admin")
        assert resp.status_code == 403

    def test_admin_can_register_doctor(self, client, admin_headers, session_factory):
        resp = client.post(
            "/auth/register",
            json={"email": "doc@x.com", "password": "p", "role": "doctor"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json()["role"] == "doctor"
        with session_factory() as db:
            assert db.query(Patient).filter(Patient.user_id == resp.json()["id"]).count() == 0

    def test_doctor_cannot_register_admin(self, client, auth_headers):
        _, headers = auth_headers(UserRole.DOCTOR)
        resp = client.post(
            "/auth/register", json={"email": "boss@x.com", "password": "p", "role": "admin"}, headers=headers
        )
        assert resp.status_code == 403


class TestLogin:
    def test_wrong_password_is_401_without_user_data(self, client):
        _register(client)
        resp = client.post("/auth/login", json={"email": "a@x.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}
        assert resp.headers["www-authenticate"] == "Bearer"

    def test_unknown_email_is_401(self, client):
        resp = client.post("/auth/login", json={"email": "ghost@x.com", "password": "p"})
        assert resp.status_code == 401
        assert "user" not in resp.json()

    def test_login_then_me_returns_same_user(self, client):
        user_id = _register(client).json()["id"]
        resp = client.post("/auth/login", json={"email": "A@x.com", "password": "p"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["id"] == user_id
        assert body["token_type"] == "bearer"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == user_id

    def test_disabled_account_is_403(self, client, make_user):
        make_user(email="off@x.com", password="p", is_active=False)
        resp = client.post("/auth/login", json={"email": "off@x.com", "password": "p"})
        assert resp.status_code == 403


class TestBearerAuth:
    def test_missing_header_is_401(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Missing Authorization header"}

    def test_garbage_token_is_401(self, client):
        resp = client.get("/rooms", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401

    def test_expired_token_is_401(self, client, make_user):
        user_id = make_user()
        token = create_access_token(
            {"id": user_id, "email": "x@x.com", "role": "patient"}, expires_delta=timedelta(minutes=-1)
        )
        resp = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_non_admin_cannot_mutate_rooms(self, client, auth_headers):
        for role in (UserRole.DOCTOR, UserRole.STAFF, UserRole.PATIENT):
            _, headers = auth_headers(role)
            resp = client.post("/rooms", json={"room_number": "101"}, headers=headers)
            assert resp.status_code == 403
            assert resp.json() == {"error": "Forbidden: insufficient role"}

    def test_admin_passes_clinical_gate(self, client, admin_headers):
        assert client.get("/patients", headers=admin_headers).status_code == 200

    def test_users_endpoint_is_admin_only(self, client, auth_headers, admin_headers):
        _, doctor_headers = auth_headers(UserRole.DOCTOR)
        assert client.get("/users", headers=doctor_headers).status_code == 403
        assert client.get("/users", headers=admin_headers).status_code == 200


class TestPasswordChange:
    def test_change_password(self, client):
        _register(client)
        token = client.post("/auth/login", json={"email": "a@x.com", "password": "p"}).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        bad = client.put("/auth/password", json={"current_password": "x", "new_password": "q"}, headers=headers)
        assert bad.status_code == 400

        ok = client.put("/auth/password", json={"current_password": "p", "new_password": "q"}, headers=headers)
        assert ok.status_code == 204
        assert client.post("/auth/login", json={"email": "a@x.com", "password": "q"}).status_code == 200
        assert client.post("/auth/login", json={"email": "a@x.com", "password": "p"}).status_code == 401


class TestAccountRecheck:
    def test_disabled_account_token_is_403(self, client, auth_headers, admin_headers):
        user_id, headers = auth_headers(UserRole.DOCTOR)
        assert client.get("/rooms", headers=headers).status_code == 200

        resp = client.put(f"/users/{user_id}", json={"is_active": False}, headers=admin_headers)
        assert resp.status_code == 200

        resp = client.get("/rooms", headers=headers)
        assert resp.status_code == 403
        assert resp.json() == {"error": "Account is disabled"}

    def test_demoted_admin_loses_admin_routes(self, client, auth_headers, admin_headers):
        demoted_id, demoted_headers = auth_headers(UserRole.ADMIN)
        resp = client.put(f"/users/{demoted_id}", json={"role": "patient"}, headers=admin_headers)
        assert resp.status_code == 200

        resp = client.post("/rooms", json={"room_number": "101"}, headers=demoted_headers)
        assert resp.status_code == 403
        assert client.get("/users", headers=demoted_headers).status_code == 403

    def test_promoted_user_gets_new_role_without_new_token(self, client, auth_headers, admin_headers):
        user_id, headers = auth_headers(UserRole.PATIENT)
        assert client.get("/patients", headers=headers).status_code == 403

        client.put(f"/users/{user_id}", json={"role": "doctor"}, headers=admin_headers)
        assert client.get("/patients", headers=headers).status_code == 200

    def test_deleted_account_token_is_401(self, client, auth_headers, admin_headers):
        user_id, headers = auth_headers(UserRole.STAFF)
        assert client.delete(f"/users/{user_id}", headers=admin_headers).status_code == 204

        resp = client.get("/rooms", headers=headers)
        assert resp.status_code == 401
        assert client.get("/auth/me", headers=headers).status_code == 401

    def test_disabled_admin_cannot_register_staff(self, client, auth_headers, admin_headers):
        admin_id, headers = auth_headers(UserRole.ADMIN)
        client.put(f"/users/{admin_id}", json={"is_active": False}, headers=admin_headers)
        resp = client.post(
            "/auth/register", json={"email": "s@x.com", "password": "p", "role": "staff"}, headers=headers
        )
        assert resp.status_code == 403
