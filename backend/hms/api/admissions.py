"""Admissions and treatments: clinical episode records."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.permissions import CLINICAL_ROLES
from ..core.security import require_role
from ..models.admission import Admission, AdmissionStatus, Treatment
from ..models.base import get_db
from ..models.user import UserRole
from ..services.repository import Repository, require_references

router = APIRouter(tags=["admissions"])

admissions = Repository(Admission, "Admission")
treatments = Repository(Treatment, "Treatment")

clinical_access = require_role(*CLINICAL_ROLES)
admin_only = require_role(UserRole.ADMIN)


class AdmissionCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    patient_id: str = Field(min_length=1)
    doctor_id: Optional[str] = None
    admitted_at: Optional[datetime] = None
    discharged_at: Optional[datetime] = None
    diagnosis: Optional[str] = None
    status: AdmissionStatus = AdmissionStatus.ADMITTED
    notes: Optional[str] = None


class AdmissionUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    doctor_id: Optional[str] = None
    discharged_at: Optional[datetime] = None
    diagnosis: Optional[str] = None
    status: Optional[AdmissionStatus] = None
    notes: Optional[str] = None


class AdmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    doctor_id: Optional[str]
    admitted_at: datetime
    discharged_at: Optional[datetime]
    diagnosis: Optional[str]
    status: str
    notes: Optional[str]


class TreatmentCreate(BaseModel):
    patient_id: str = Field(min_length=1)
    doctor_id: Optional[str] = None
    admission_id: Optional[str] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    notes: Optional[str] = None


class TreatmentUpdate(BaseModel):
    doctor_id: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    notes: Optional[str] = None


class TreatmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    doctor_id: Optional[str]
    admission_id: Optional[str]
    name: str
    description: Optional[str]
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    notes: Optional[str]


# ── Admissions ───────────────────────────────────────────────────────────────

@router.get("/admissions", response_model=List[AdmissionResponse])
def list_admissions(
    patient_id: Optional[str] = None,
    status: Optional[AdmissionStatus] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(clinical_access),
):
    filters = {"patient_id": patient_id, "status": status.value if status else None}
    return admissions.list(db, filters, skip=skip, limit=limit, order_by=Admission.admitted_at.desc())


@router.get("/admissions/{admission_id}", response_model=AdmissionResponse)
def get_admission(admission_id: str, db: Session = Depends(get_db), _claims=Depends(clinical_access)):
    return admissions.get_or_404(db, admission_id)


@router.post("/admissions", response_model=AdmissionResponse, status_code=status.HTTP_201_CREATED)
def create_admission(admission_in: AdmissionCreate, db: Session = Depends(get_db), _claims=Depends(clinical_access)):
    require_references(db, patient_id=admission_in.patient_id, doctor_id=admission_in.doctor_id)
    data = admission_in.model_dump(exclude_none=True)
    return admissions.create(db, data)


@router.put("/admissions/{admission_id}", response_model=AdmissionResponse)
def update_admission(
    admission_id: str,
    admission_in: AdmissionUpdate,
    db: Session = Depends(get_db),
    _claims=Depends(clinical_access),
):
    require_references(db, doctor_id=admission_in.doctor_id)
    return admissions.update(db, admission_id, admission_in.model_dump(exclude_unset=True))


@router.delete("/admissions/{admission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_admission(admission_id: str, db: Session = Depends(get_db), _admin=Depends(admin_only)):
    admissions.delete(db, admission_id)


# ── Treatments ───────────────────────────────────────────────────────────────

@router.get("/treatments", response_model=List[TreatmentResponse])
def list_treatments(
    patient_id: Optional[str] = None,
    admission_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(clinical_access),
):
    filters = {"patient_id": patient_id, "admission_id": admission_id}
    return treatments.list(db, filters, skip=skip, limit=limit)


@router.get("/treatments/{treatment_id}", response_model=TreatmentResponse)
def get_treatment(treatment_id: str, db: Session = Depends(get_db), _claims=Depends(clinical_access)):
    return treatments.get_or_404(db, treatment_id)


@router.post("/treatments", response_model=TreatmentResponse, status_code=status.HTTP_201_CREATED)
def create_treatment(treatment_in: TreatmentCreate, db: Session = Depends(get_db), _claims=Depends(clinical_access)):
    require_references(
        db,
        patient_id=treatment_in.patient_id,
        doctor_id=treatment_in.doctor_id,
        admission_id=treatment_in.admission_id,
    )
    return treatments.create(db, treatment_in.model_dump())


@router.put("/treatments/{treatment_id}", response_model=TreatmentResponse)
def update_treatment(
    treatment_id: str,
    treatment_in: TreatmentUpdate,
    db: Session = Depends(get_db),
    _claims=Depends(clinical_access),
):
    require_references(db, doctor_id=treatment_in.doctor_id)
    return treatments.update(db, treatment_id, treatment_in.model_dump(exclude_unset=True))


@router.delete("/treatments/{treatment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_treatment(treatment_id: str, db: Session = Depends(get_db), _admin=Depends(admin_only)):
    treatments.delete(db, treatment_id)
