from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.errors import Forbidden
from ..core.permissions import CLINICAL_ROLES, role_allowed
from ..core.security import TokenClaims, get_current_claims, require_role
from ..models.base import get_db
from ..models.patient import Patient
from ..models.user import User, UserRole
from ..services.repository import Repository, require_references

router = APIRouter(prefix="/patients", tags=["patients"])

patients = Repository(Patient, "Patient")


class PatientCreate(BaseModel):
    user_id: Optional[str] = None
    name: str = Field(min_length=1)
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    age: Optional[int] = Field(default=None, ge=0)
    gender: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class PatientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str]
    name: str
    age: Optional[int]
    gender: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    notes: Optional[str]
    created_at: datetime


def _is_own_record(claims: TokenClaims, patient: Patient) -> bool:
    return claims.role is UserRole.PATIENT and patient.user_id == claims.id


@router.get("", response_model=List[PatientResponse])
def list_patients(
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(require_role(*CLINICAL_ROLES)),
):
    return patients.list(db, skip=skip, limit=limit)


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(
    patient_id: str,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims),
):
    patient = patients.get_or_404(db, patient_id)
    if not (role_allowed(claims.role, CLINICAL_ROLES) or _is_own_record(claims, patient)):
        raise Forbidden("Insufficient permissions to access patient data")
    return patient


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
def create_patient(
    patient_in: PatientCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    require_references(db, user_id=(User, patient_in.user_id))
    return patients.create(db, patient_in.model_dump())


@router.put("/{patient_id}", response_model=PatientResponse)
def update_patient(
    patient_id: str,
    patient_in: PatientUpdate,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims),
):
    """Admins may edit any patient; a patient may edit their own record."""
    patient = patients.get_or_404(db, patient_id)
    if not (role_allowed(claims.role, ()) or _is_own_record(claims, patient)):
        raise Forbidden("Insufficient permissions to modify patient data")
    return patients.update(db, patient_id, patient_in.model_dump(exclude_unset=True))


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(patient_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    patients.delete(db, patient_id)
