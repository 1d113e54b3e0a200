"""
Appointments API.

Clients have sent the appointment time under several names over time
(``datetime``, ``appointment_date``, ``date``). All of them are accepted on
input and stored in the single ``scheduled_at`` field.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.security import get_current_claims, require_role
from ..models.appointment import Appointment, AppointmentStatus
from ..models.base import get_db
from ..models.user import UserRole
from ..services.repository import Repository, require_references

router = APIRouter(prefix="/appointments", tags=["appointments"])

appointments = Repository(Appointment, "Appointment")

SCHEDULED_AT_ALIASES = AliasChoices("scheduled_at", "datetime", "appointment_date", "date")


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    scheduled_at: Optional[datetime] = Field(default=None, validation_alias=SCHEDULED_AT_ALIASES)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None
    scheduled_at: Optional[datetime] = Field(default=None, validation_alias=SCHEDULED_AT_ALIASES)
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: Optional[str]
    doctor_id: Optional[str]
    scheduled_at: Optional[datetime]
    status: str
    notes: Optional[str]
    created_at: datetime


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    patient_id: Optional[str] = None,
    doctor_id: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    filters = {
        "patient_id": patient_id,
        "doctor_id": doctor_id,
        "status": status.value if status else None,
    }
    return appointments.list(db, filters, skip=skip, limit=limit)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(appointment_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return appointments.get_or_404(db, appointment_id)


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    appointment_in: AppointmentCreate,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    require_references(db, patient_id=appointment_in.patient_id, doctor_id=appointment_in.doctor_id)
    return appointments.create(db, appointment_in.model_dump())


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: str,
    appointment_in: AppointmentUpdate,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    appointments.get_or_404(db, appointment_id)
    require_references(db, patient_id=appointment_in.patient_id, doctor_id=appointment_in.doctor_id)
    return appointments.update(db, appointment_id, appointment_in.model_dump(exclude_unset=True))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: str,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    appointments.delete(db, appointment_id)
