from datetime import timedelta

import pytest
from jose import jwt

from hms.core.config import settings
from hms.core.errors import Unauthenticated
from hms.core.permissions import CLINICAL_ROLES, parse_role, role_allowed
from hms.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from hms.models.user import UserRole


class TestPasswordHashing:
    def test_hash_is_salted_and_verifies(self):
        h1 = get_password_hash("p")
        h2 = get_password_hash("p")
        assert h1 != h2
        assert h1.startswith("$2")
        assert verify_password("p", h1)
        assert verify_password("p", h2)

    def test_wrong_password_rejected(self):
        assert not verify_password("wrong", get_password_hash("right"))

    def test_missing_or_garbage_hash_never_verifies(self):
        assert not verify_password("p", None)
        assert not verify_password("p", "")
        assert not verify_password("p", "not-a-bcrypt-hash")


class TestTokens:
    def _claims(self, role=UserRole.DOCTOR):
        return {"id": "user-1", "email": "doc@hospital.test", "role": role}

    def test_round_trip_claims(self):
        claims = verify_token(create_access_token(self._claims()))
        assert claims.id == "user-1"
        assert claims.email == "doc@hospital.test"
        assert claims.role is UserRole.DOCTOR

    def test_role_accepts_plain_string(self):
        claims = verify_token(create_access_token(self._claims(role="staff")))
        assert claims.role is UserRole.STAFF

    def test_expired_token_rejected(self):
        token = create_access_token(self._claims(), expires_delta=timedelta(seconds=-5))
        with pytest.raises(Unauthenticated):
            verify_token(token)

    def test_tampered_token_rejected(self):
        token = create_access_token(self._claims())
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])
        with pytest.raises(Unauthenticated):
            verify_token(tampered)

    def test_token_signed_with_other_secret_rejected(self):
        forged = jwt.encode({"sub": "x", "role": "admin"}, "another-secret", algorithm=settings.ALGORITHM)
        with pytest.raises(Unauthenticated):
            verify_token(forged)

    def test_malformed_token_rejected(self):
        with pytest.raises(Unauthenticated):
            verify_token("not.a.jwt")

    def test_unknown_role_rejected(self):
        token = create_access_token({"id": "u", "email": "e@x.com", "role": "superuser"})
        with pytest.raises(Unauthenticated):
            verify_token(token)


class TestRoleGate:
    def test_admin_satisfies_every_check(self):
        assert role_allowed(UserRole.ADMIN, {UserRole.DOCTOR})
        assert role_allowed("admin", set())

    def test_membership(self):
        assert role_allowed(UserRole.DOCTOR, CLINICAL_ROLES)
        assert role_allowed("staff", CLINICAL_ROLES)
        assert not role_allowed(UserRole.PATIENT, CLINICAL_ROLES)

    def test_no_substring_matching(self):
        """Partial or decorated role names are not roles."""
        assert not role_allowed("admi", {UserRole.DOCTOR})
        assert not role_allowed("administrator", {UserRole.DOCTOR})
        assert not role_allowed("Admin", {UserRole.DOCTOR})
        assert not role_allowed("doctor,admin", {UserRole.STAFF})

    def test_unknown_or_missing_role(self):
        assert parse_role(None) is None
        assert not role_allowed(None, CLINICAL_ROLES)
        assert not role_allowed("", CLINICAL_ROLES)
