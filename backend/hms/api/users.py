"""User management endpoints (admin only)."""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..core.errors import Conflict
from ..core.security import get_password_hash, require_role
from ..models.base import get_db
from ..models.user import User, UserRole
from ..services.repository import Repository
from .auth import Email, UserResponse

router = APIRouter(prefix="/users", tags=["users"])

users = Repository(User, "User")


class UserCreate(BaseModel):
    name: Optional[str] = None
    email: Email
    password: Optional[str] = Field(default=None, min_length=1)
    role: UserRole = UserRole.PATIENT


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[Email] = None
    password: Optional[str] = Field(default=None, min_length=1)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


def _ensure_email_free(db: Session, email: str, user_id: Optional[str] = None) -> None:
    q = db.query(User).filter(User.email == email)
    if user_id:
        q = q.filter(User.id != user_id)
    if q.first():
        raise Conflict("User with that email already exists")


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[UserRole] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    return users.list(db, {"role": role.value if role else None}, skip=skip, limit=limit)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    return users.get_or_404(db, user_id)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    """Create an account of any role. Without a password it cannot log in."""
    _ensure_email_free(db, user_in.email)
    return users.create(db, {
        "name": user_in.name,
        "email": user_in.email,
        "hashed_password": get_password_hash(user_in.password) if user_in.password else None,
        "role": user_in.role.value,
    })


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    changes = user_in.model_dump(exclude_unset=True, exclude={"password", "role"})
    if user_in.email:
        _ensure_email_free(db, user_in.email, user_id)
    if user_in.password:
        changes["hashed_password"] = get_password_hash(user_in.password)
    if user_in.role:
        changes["role"] = user_in.role.value
    return users.update(db, user_id, changes)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    users.delete(db, user_id)
