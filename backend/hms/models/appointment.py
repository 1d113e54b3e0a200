from enum import Enum

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from .base import Base, TimestampMixin, generate_uuid


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(Base, TimestampMixin):
    __tablename__ = "appointments"

    id = Column(String, primary_key=True, default=generate_uuid)
    patient_id = Column(String, ForeignKey("patients.id"), nullable=True, index=True)
    doctor_id = Column(String, ForeignKey("doctors.id"), nullable=True, index=True)
    scheduled_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), nullable=False, default=AppointmentStatus.SCHEDULED.value)
    notes = Column(Text, nullable=True)
