"""Shared fixtures: an isolated SQLite database per test and a wired TestClient."""
import os
import tempfile

# Settings are read at import time; point them at a throwaway database first
_TMP_DIR = tempfile.mkdtemp(prefix="hms-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "default.db")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from hms.core.security import create_access_token, get_password_hash  # noqa: E402
from hms.main import app  # noqa: E402
from hms.models.base import Base, build_engine, generate_uuid, get_db  # noqa: E402
from hms.models.medicine import Medicine  # noqa: E402
from hms.models.patient import Patient  # noqa: E402
from hms.models.room import Room  # noqa: E402
from hms.models.user import User, UserRole  # noqa: E402


@pytest.fixture()
def engine(tmp_path):
    """A file-backed SQLite engine so worker threads can share the database."""
    test_engine = build_engine(f"sqlite:///{tmp_path / 'hms.db'}")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def client(session_factory):
    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ── Data helpers ─────────────────────────────────────────────────────────────
# Each helper commits in its own short session and returns plain ids, so no
# transaction is left open while a request or worker thread runs.

@pytest.fixture()
def make_user(session_factory):
    def _make(role=UserRole.PATIENT, email=None, password="secret", name=None, is_active=True):
        user_id = generate_uuid()
        email = email or f"{role.value}-{user_id[:8]}@hospital.test"
        with session_factory() as db:
            db.add(User(
                id=user_id,
                name=name or role.value.title(),
                email=email,
                hashed_password=get_password_hash(password),
                role=role.value,
                is_active=is_active,
            ))
            db.commit()
        return user_id
    return _make


@pytest.fixture()
def auth_headers(make_user):
    """Return ``(user_id, headers)`` for a fresh user of the given role."""
    def _headers(role=UserRole.ADMIN, **kwargs):
        user_id = make_user(role=role, **kwargs)
        token = create_access_token({"id": user_id, "email": f"{user_id}@hospital.test", "role": role})
        return user_id, {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture()
def admin_headers(auth_headers):
    return auth_headers(UserRole.ADMIN)[1]


@pytest.fixture()
def make_patient(session_factory):
    def _make(name="Jane Roe", user_id=None):
        patient_id = generate_uuid()
        with session_factory() as db:
            db.add(Patient(id=patient_id, name=name, user_id=user_id))
            db.commit()
        return patient_id
    return _make


@pytest.fixture()
def make_room(session_factory):
    def _make(room_number=None, ward="General"):
        room_id = generate_uuid()
        with session_factory() as db:
            db.add(Room(id=room_id, room_number=room_number or room_id[:6], ward=ward))
            db.commit()
        return room_id
    return _make


@pytest.fixture()
def make_medicine(session_factory):
    def _make(quantity=10, name="Paracetamol", min_threshold=0):
        medicine_id = generate_uuid()
        with session_factory() as db:
            db.add(Medicine(id=medicine_id, name=name, quantity=quantity, min_threshold=min_threshold))
            db.commit()
        return medicine_id
    return _make
