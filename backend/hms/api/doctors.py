from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.security import get_current_claims, require_role
from ..models.base import get_db
from ..models.doctor import Doctor
from ..models.user import User, UserRole
from ..services.repository import Repository, require_references

router = APIRouter(prefix="/doctors", tags=["doctors"])

doctors = Repository(Doctor, "Doctor")


class DoctorCreate(BaseModel):
    user_id: Optional[str] = None
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    specialty: Optional[str] = None
    qualifications: Optional[str] = None
    bio: Optional[str] = None


class DoctorUpdate(BaseModel):
    user_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    specialty: Optional[str] = None
    qualifications: Optional[str] = None
    bio: Optional[str] = None


class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str]
    name: str
    email: Optional[str]
    phone: Optional[str]
    specialty: Optional[str]
    qualifications: Optional[str]
    bio: Optional[str]
    created_at: datetime


@router.get("", response_model=List[DoctorResponse])
def list_doctors(
    specialty: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    return doctors.list(db, {"specialty": specialty}, skip=skip, limit=limit)


@router.get("/{doctor_id}", response_model=DoctorResponse)
def get_doctor(doctor_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return doctors.get_or_404(db, doctor_id)


@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
def create_doctor(
    doctor_in: DoctorCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    require_references(db, user_id=(User, doctor_in.user_id))
    return doctors.create(db, doctor_in.model_dump())


@router.put("/{doctor_id}", response_model=DoctorResponse)
def update_doctor(
    doctor_id: str,
    doctor_in: DoctorUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    require_references(db, user_id=(User, doctor_in.user_id))
    return doctors.update(db, doctor_id, doctor_in.model_dump(exclude_unset=True))


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_doctor(doctor_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    doctors.delete(db, doctor_id)
