"""Tests for the bootstrap admin seeder."""
import pytest

import hms.seed as seed
from hms.core.config import settings
from hms.core.security import verify_password
from hms.models.user import User, UserRole


@pytest.fixture()
def seeded_db(monkeypatch, session_factory):
    """Point the seeder at the per-test database."""
    monkeypatch.setattr(seed, "SessionLocal", session_factory)
    monkeypatch.setattr(settings, "ADMIN_EMAIL", "  Root@Hospital.test ")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "bootstrap")
    db = session_factory()
    yield db
    db.close()


class TestSeedAdmin:
    def test_creates_admin_user(self, seeded_db):
        seed.seed_admin()
        admin = seeded_db.query(User).filter(User.email == "root@hospital.test").first()
        assert admin is not None
        assert admin.role == UserRole.ADMIN.value
        assert admin.is_active

    def test_password_is_hashed(self, seeded_db):
        seed.seed_admin()
        admin = seeded_db.query(User).filter(User.email == "root@hospital.test").one()
        assert admin.hashed_password != "bootstrap"
        assert verify_password("bootstrap", admin.hashed_password)

    def test_idempotent(self, seeded_db):
        seed.seed_admin()
        seed.seed_admin()
        assert seeded_db.query(User).filter(User.email == "root@hospital.test").count() == 1

    def test_existing_account_left_untouched(self, seeded_db, make_user):
        make_user(role=UserRole.DOCTOR, email="root@hospital.test", password="original")
        seed.seed_admin()
        user = seeded_db.query(User).filter(User.email == "root@hospital.test").one()
        assert user.role == UserRole.DOCTOR.value
        assert verify_password("original", user.hashed_password)

    def test_skipped_without_credentials(self, seeded_db, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", None)
        seed.seed_admin()
        assert seeded_db.query(User).count() == 0

    def test_seeded_admin_can_log_in(self, seeded_db, client):
        seed.seed_admin()
        resp = client.post("/auth/login", json={"email": "root@hospital.test", "password": "bootstrap"})
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "admin"
