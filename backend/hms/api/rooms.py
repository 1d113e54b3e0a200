"""Rooms API. Occupancy state changes only through the room occupancy workflow."""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from ..core.errors import Conflict
from ..core.security import TokenClaims, get_current_claims, require_role
from ..models.base import get_db
from ..models.room import DEFAULT_WARD, Room, RoomStatus
from ..models.user import UserRole
from ..services.repository import Repository
from ..services.room_occupancy import vacate_room

router = APIRouter(prefix="/rooms", tags=["rooms"])

rooms = Repository(Room, "Room")


class RoomCreate(BaseModel):
    room_number: str = Field(min_length=1)
    ward: str = Field(default=DEFAULT_WARD, min_length=1)
    bed_label: Optional[str] = None
    room_type: Optional[str] = None
    notes: Optional[str] = None


class RoomUpdate(BaseModel):
    # status and the current_* pointers are deliberately not accepted here
    model_config = ConfigDict(extra="forbid")

    room_number: Optional[str] = Field(default=None, min_length=1)
    ward: Optional[str] = Field(default=None, min_length=1)
    bed_label: Optional[str] = None
    room_type: Optional[str] = None
    notes: Optional[str] = None


class RoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    room_number: str
    ward: str
    bed_label: Optional[str]
    room_type: Optional[str]
    notes: Optional[str]
    status: str
    current_patient_id: Optional[str]
    current_assignment_id: Optional[str]
    updated_at: datetime


class VacateResponse(BaseModel):
    message: str
    vacated: bool
    assignment_id: Optional[str]
    room: RoomResponse


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    status: Optional[RoomStatus] = None,
    ward: Optional[str] = None,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    filters = {"status": status.value if status else None, "ward": ward}
    return rooms.list(db, filters, limit=1000, order_by=Room.room_number)


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return rooms.get_or_404(db, room_id)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(room_in: RoomCreate, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    return rooms.create(db, {**room_in.model_dump(), "status": RoomStatus.FREE.value})


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: str,
    room_in: RoomUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    return rooms.update(db, room_id, room_in.model_dump(exclude_unset=True))


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(room_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    room = rooms.get_or_404(db, room_id)
    if room.is_occupied:
        raise Conflict("Room is occupied; vacate it first")
    rooms.delete(db, room_id)


@router.post("/{room_id}/vacate", response_model=VacateResponse)
def vacate(
    room_id: str,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(require_role(UserRole.ADMIN)),
):
    """Free the room and close its active assignment. A free room is a no-op."""
    result = vacate_room(db, room_id, vacated_by=claims.id)
    return VacateResponse(
        message="Room vacated" if result.vacated else "Room already free",
        vacated=result.vacated,
        assignment_id=result.assignment_id,
        room=RoomResponse.model_validate(result.room),
    )
