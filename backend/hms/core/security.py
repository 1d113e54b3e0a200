"""
Credential hashing, bearer tokens and the FastAPI auth dependencies.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .config import settings
from .errors import Forbidden, NotFound, Unauthenticated
from .permissions import parse_role, role_allowed
from ..models.base import get_db
from ..models.user import User, UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class TokenClaims:
    id: str
    email: str
    role: UserRole


# ── Passwords ────────────────────────────────────────────────────────────────

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    # Accounts without a local password can never log in with one
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash is not a recognised bcrypt hash")
        return False


# ── Tokens ───────────────────────────────────────────────────────────────────

def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT for ``{id, email, role}`` claims."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    role = claims["role"]
    to_encode = {
        "sub": str(claims["id"]),
        "email": claims["email"],
        "role": role.value if isinstance(role, UserRole) else role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Return the raw payload, or None if the token is invalid or expired."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_token(token: str) -> TokenClaims:
    payload = decode_access_token(token)
    if payload is None:
        raise Unauthenticated("Invalid or expired token")
    user_id = payload.get("sub")
    role = parse_role(payload.get("role"))
    if not user_id or role is None:
        raise Unauthenticated("Invalid or expired token")
    return TokenClaims(id=user_id, email=payload.get("email", ""), role=role)


# ── Dependencies ─────────────────────────────────────────────────────────────

def _account_claims(db: Session, claims: TokenClaims) -> TokenClaims:
    """Re-read the account behind a token; the stored role wins over the claim."""
    user = db.query(User).filter(User.id == claims.id).first()
    if user is None:
        raise Unauthenticated("Account no longer exists")
    if not user.is_active:
        raise Forbidden("Account is disabled")
    role = parse_role(user.role)
    if role is None:
        raise Forbidden()
    if role is not claims.role:
        logger.info(
            "Role of user %s changed since token issue (%s -> %s)",
            user.id, claims.role.value, role.value,
        )
    return TokenClaims(id=user.id, email=user.email, role=role)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> TokenClaims:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Missing Authorization header")
    return _account_claims(db, verify_token(credentials.credentials))


def get_optional_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[TokenClaims]:
    """Claims for an optional bearer token; a bad token is still rejected."""
    if credentials is None:
        return None
    return _account_claims(db, verify_token(credentials.credentials))


def require_role(*roles: UserRole):
    """Dependency factory: admit the given roles (admin is always admitted)."""
    allowed = frozenset(UserRole(r) for r in roles)

    def _check(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if not role_allowed(claims.role, allowed):
            raise Forbidden()
        return claims

    return _check


def get_current_user(
    claims: TokenClaims = Depends(get_current_claims),
    db: Session = Depends(get_db),
) -> User:
    user = db.query(User).filter(User.id == claims.id).first()
    if user is None:
        raise NotFound("User not found")
    return user
