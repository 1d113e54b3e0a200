"""Authentication endpoints: register, login, me, change password."""
from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, status
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from ..core.errors import Conflict, Forbidden, InvalidInput, Unauthenticated
from ..core.security import (
    TokenClaims,
    create_access_token,
    get_current_user,
    get_optional_claims,
    get_password_hash,
    pwd_context,
    verify_password,
)
from ..models.base import generate_uuid, get_db
from ..models.patient import Patient
from ..models.user import User, UserRole
from ..services.repository import commit_or_conflict

router = APIRouter(prefix="/auth", tags=["auth"])


def normalize_email(value: str) -> str:
    email = str(value).strip().lower()
    if not email or "@" not in email:
        raise ValueError("a valid email address is required")
    return email


Email = Annotated[str, AfterValidator(normalize_email)]


# ── Request / Response schemas ──────────────────────────────────────────────

class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Email
    password: str = Field(min_length=1)
    role: Optional[UserRole] = None


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        return str(v).strip().lower()


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str]
    email: str
    role: str
    is_active: bool
    created_at: datetime


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserResponse


# ── Endpoints ────────────────────────────────────────────────────────────────

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    db: Session = Depends(get_db),
    caller: Optional[TokenClaims] = Depends(get_optional_claims),
):
    """Create a user. Anyone may register as a patient; other roles need an admin."""
    role = req.role or UserRole.PATIENT
    if role is not UserRole.PATIENT and (caller is None or caller.role is not UserRole.ADMIN):
        raise Forbidden("Only an admin can create non-patient accounts")

    if db.query(User).filter(User.email == req.email).first():
        raise Conflict("User with that email already exists")

    user = User(
        id=generate_uuid(),
        name=req.name,
        email=req.email,
        hashed_password=get_password_hash(req.password),
        role=role.value,
    )
    db.add(user)
    db.flush()
    if role is UserRole.PATIENT:
        # Patient accounts get their clinical record in the same transaction
        db.add(Patient(id=generate_uuid(), user_id=user.id, name=req.name or req.email, email=req.email))
    commit_or_conflict(db, "User with that email already exists")
    db.refresh(user)
    return user


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return a bearer token with the safe user profile."""
    if not req.email or not req.password:
        raise InvalidInput("Email and password are required")

    user = db.query(User).filter(User.email == req.email).first()
    if user is None:
        # Keep response time independent of whether the email exists
        pwd_context.dummy_verify()
        raise Unauthenticated("Invalid credentials")
    if not verify_password(req.password, user.hashed_password):
        raise Unauthenticated("Invalid credentials")
    if not user.is_active:
        raise Forbidden("Account is disabled")

    token = create_access_token({"id": user.id, "email": user.email, "role": user.role})
    return LoginResponse(token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Return the currently authenticated user's profile."""
    return current_user


@router.put("/password", status_code=status.HTTP_204_NO_CONTENT)
def change_password(
    req: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Change the current user's password."""
    if not verify_password(req.current_password, current_user.hashed_password):
        raise InvalidInput("Current password is incorrect")
    current_user.hashed_password = get_password_hash(req.new_password)
    db.commit()
