from enum import Enum

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UniqueConstraint
from .base import Base, TimestampMixin, generate_uuid, utcnow


DEFAULT_WARD = "General"


class RoomStatus(str, Enum):
    FREE = "free"
    OCCUPIED = "occupied"


class Room(Base, TimestampMixin):
    __tablename__ = "rooms"
    __table_args__ = (UniqueConstraint("ward", "room_number", name="uq_rooms_ward_room_number"),)

    id = Column(String, primary_key=True, default=generate_uuid)
    room_number = Column(String(50), nullable=False)
    ward = Column(String(100), nullable=False, default=DEFAULT_WARD)
    bed_label = Column(String(50), nullable=True)
    room_type = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # Occupancy state: only the room occupancy workflow writes these
    status = Column(String(20), nullable=False, default=RoomStatus.FREE.value)
    current_patient_id = Column(String, ForeignKey("patients.id"), nullable=True)
    current_assignment_id = Column(
        String,
        ForeignKey("room_assignments.id", use_alter=True, name="fk_rooms_current_assignment_id"),
        nullable=True,
    )

    @property
    def is_occupied(self) -> bool:
        return self.status == RoomStatus.OCCUPIED.value


class RoomAssignment(Base, TimestampMixin):
    """Durable occupancy record. Active while vacated_at is null."""
    __tablename__ = "room_assignments"

    id = Column(String, primary_key=True, default=generate_uuid)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False, index=True)
    patient_id = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    admitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    vacated_at = Column(DateTime(timezone=True), nullable=True)
    assigned_by = Column(String, ForeignKey("users.id"), nullable=True)
    vacated_by = Column(String, ForeignKey("users.id"), nullable=True)
    reason = Column(Text, nullable=True)
