from sqlalchemy import Column, String, Text, ForeignKey
from .base import Base, TimestampMixin, generate_uuid


class PatientHistory(Base, TimestampMixin):
    """Append-only clinical note."""
    __tablename__ = "patient_history"

    id = Column(String, primary_key=True, default=generate_uuid)
    patient_id = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    appointment_id = Column(String, ForeignKey("appointments.id"), nullable=True)
    recorded_by = Column(String, ForeignKey("users.id"), nullable=True)
    record_type = Column(String(50), nullable=False, default="note")
    title = Column(String(200), nullable=True)
    body = Column(Text, nullable=True)
    tags = Column(String(500), nullable=True)
