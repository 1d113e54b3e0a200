"""Patient history: append-only clinical notes (no update or delete)."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.permissions import CLINICAL_ROLES
from ..core.security import TokenClaims, require_role
from ..models.base import get_db
from ..models.patient_history import PatientHistory
from ..services.repository import Repository, require_references

router = APIRouter(prefix="/patient_history", tags=["patient_history"])

history = Repository(PatientHistory, "History record")


class HistoryCreate(BaseModel):
    patient_id: str = Field(min_length=1)
    appointment_id: Optional[str] = None
    record_type: str = "note"
    title: Optional[str] = None
    body: Optional[str] = None
    tags: Optional[str] = None


class HistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    appointment_id: Optional[str]
    recorded_by: Optional[str]
    record_type: str
    title: Optional[str]
    body: Optional[str]
    tags: Optional[str]
    created_at: datetime


@router.get("", response_model=List[HistoryResponse])
def list_history(
    patient_id: Optional[str] = None,
    record_type: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(require_role(*CLINICAL_ROLES)),
):
    return history.list(db, {"patient_id": patient_id, "record_type": record_type}, skip=skip, limit=limit)


@router.get("/{record_id}", response_model=HistoryResponse)
def get_history_record(
    record_id: str,
    db: Session = Depends(get_db),
    _claims=Depends(require_role(*CLINICAL_ROLES)),
):
    return history.get_or_404(db, record_id)


@router.post("", response_model=HistoryResponse, status_code=status.HTTP_201_CREATED)
def create_history_record(
    record_in: HistoryCreate,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(require_role(*CLINICAL_ROLES)),
):
    require_references(db, patient_id=record_in.patient_id, appointment_id=record_in.appointment_id)
    return history.create(db, {**record_in.model_dump(), "recorded_by": claims.id})
