from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.security import get_current_claims, require_role
from ..models.base import get_db
from ..models.staff import Staff
from ..models.user import User, UserRole
from ..services.repository import Repository, require_references

router = APIRouter(prefix="/staff", tags=["staff"])

staff_members = Repository(Staff, "Staff member")


class StaffCreate(BaseModel):
    user_id: Optional[str] = None
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None


class StaffUpdate(BaseModel):
    user_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None


class StaffResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str]
    name: str
    email: Optional[str]
    phone: Optional[str]
    role: Optional[str]
    department: Optional[str]
    created_at: datetime


@router.get("", response_model=List[StaffResponse])
def list_staff(
    department: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    return staff_members.list(db, {"department": department}, skip=skip, limit=limit)


@router.get("/{staff_id}", response_model=StaffResponse)
def get_staff_member(staff_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return staff_members.get_or_404(db, staff_id)


@router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff_member(
    staff_in: StaffCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    require_references(db, user_id=(User, staff_in.user_id))
    return staff_members.create(db, staff_in.model_dump())


@router.put("/{staff_id}", response_model=StaffResponse)
def update_staff_member(
    staff_id: str,
    staff_in: StaffUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    require_references(db, user_id=(User, staff_in.user_id))
    return staff_members.update(db, staff_id, staff_in.model_dump(exclude_unset=True))


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_staff_member(staff_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    staff_members.delete(db, staff_id)
