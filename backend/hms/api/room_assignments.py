from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.security import TokenClaims, get_current_claims, require_role
from ..models.base import get_db
from ..models.room import RoomAssignment
from ..models.user import UserRole
from ..services.repository import Repository
from ..services.room_occupancy import assign_room

router = APIRouter(prefix="/room_assignments", tags=["rooms"])

assignments = Repository(RoomAssignment, "Room assignment")


class AssignRequest(BaseModel):
    room_id: str = Field(min_length=1)
    patient_id: str = Field(min_length=1)
    reason: Optional[str] = None


class RoomAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    room_id: str
    patient_id: str
    admitted_at: datetime
    vacated_at: Optional[datetime]
    assigned_by: Optional[str]
    vacated_by: Optional[str]
    reason: Optional[str]


@router.get("", response_model=List[RoomAssignmentResponse])
def list_assignments(
    room_id: Optional[str] = None,
    patient_id: Optional[str] = None,
    active: Optional[bool] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    q = db.query(RoomAssignment)
    if room_id:
        q = q.filter(RoomAssignment.room_id == room_id)
    if patient_id:
        q = q.filter(RoomAssignment.patient_id == patient_id)
    if active is True:
        q = q.filter(RoomAssignment.vacated_at.is_(None))
    elif active is False:
        q = q.filter(RoomAssignment.vacated_at.isnot(None))
    return q.order_by(RoomAssignment.admitted_at.desc()).offset(skip).limit(limit).all()


@router.get("/{assignment_id}", response_model=RoomAssignmentResponse)
def get_assignment(assignment_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return assignments.get_or_404(db, assignment_id)


@router.post("", response_model=RoomAssignmentResponse, status_code=status.HTTP_201_CREATED)
def create_assignment(
    req: AssignRequest,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(require_role(UserRole.ADMIN)),
):
    """Assign a patient to a free room (transactional, room row locked)."""
    return assign_room(db, req.room_id, req.patient_id, assigned_by=claims.id, reason=req.reason)
