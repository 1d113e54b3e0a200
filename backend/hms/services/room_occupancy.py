"""
Room occupancy workflow.

A room cycles free -> occupied -> free. Both transitions run as a single
transaction that first takes an exclusive lock on the room row and keeps it
until commit or rollback, so two callers can never both observe a free room
and both assign it. Invariant kept by every path through this module:

    status == occupied  <=>  current_patient_id and current_assignment_id set
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..core.errors import Conflict, InvalidInput, InvalidReference, NotFound
from ..models.base import generate_uuid, utcnow
from ..models.patient import Patient
from ..models.room import Room, RoomAssignment, RoomStatus
from .repository import exists_by_id

logger = logging.getLogger(__name__)


@dataclass
class VacateResult:
    room: Room
    vacated: bool
    assignment_id: Optional[str] = None


def _lock_room(db: Session, room_id: str) -> Room:
    room = (
        db.query(Room)
        .filter(Room.id == room_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if room is None:
        raise NotFound("Room not found")
    return room


def assign_room(
    db: Session,
    room_id: str,
    patient_id: str,
    assigned_by: Optional[str] = None,
    reason: Optional[str] = None,
) -> RoomAssignment:
    """Admit a patient into a free room and return the new assignment."""
    if not room_id or not patient_id:
        raise InvalidInput("room_id and patient_id required")

    try:
        room = _lock_room(db, room_id)
        if room.status != RoomStatus.FREE.value:
            raise Conflict("Room already occupied")
        if not exists_by_id(db, Patient, patient_id):
            raise InvalidReference(f"patient_id {patient_id} not found")

        assignment = RoomAssignment(
            id=generate_uuid(),
            room_id=room.id,
            patient_id=patient_id,
            admitted_at=utcnow(),
            vacated_at=None,
            assigned_by=assigned_by,
            reason=reason,
        )
        db.add(assignment)
        db.flush()

        room.status = RoomStatus.OCCUPIED.value
        room.current_patient_id = patient_id
        room.current_assignment_id = assignment.id
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(assignment)
    logger.info(
        "Room %s assigned to patient %s (assignment=%s, by=%s)",
        room_id, patient_id, assignment.id, assigned_by,
    )
    return assignment


def vacate_room(db: Session, room_id: str, vacated_by: Optional[str] = None) -> VacateResult:
    """Free a room, closing its active assignment.

    Vacating a room that is already free is a successful no-op
    (``vacated=False``).
    """
    try:
        room = _lock_room(db, room_id)
        active = (
            db.query(RoomAssignment)
            .filter(RoomAssignment.room_id == room.id, RoomAssignment.vacated_at.is_(None))
            .all()
        )
        if room.status == RoomStatus.FREE.value and not active:
            db.commit()
            return VacateResult(room=room, vacated=False)

        closed_id = room.current_assignment_id
        now = utcnow()
        for assignment in active:
            assignment.vacated_at = now
            assignment.vacated_by = vacated_by
            if closed_id is None:
                closed_id = assignment.id

        room.status = RoomStatus.FREE.value
        room.current_patient_id = None
        room.current_assignment_id = None
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Room %s vacated (assignment=%s, by=%s)", room_id, closed_id, vacated_by)
    return VacateResult(room=room, vacated=True, assignment_id=closed_id)
