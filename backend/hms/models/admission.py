from enum import Enum

from sqlalchemy import Column, String, Text, DateTime, ForeignKey
from .base import Base, TimestampMixin, generate_uuid, utcnow


class AdmissionStatus(str, Enum):
    ADMITTED = "admitted"
    DISCHARGED = "discharged"


class Admission(Base, TimestampMixin):
    __tablename__ = "admissions"

    id = Column(String, primary_key=True, default=generate_uuid)
    patient_id = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(String, ForeignKey("doctors.id"), nullable=True, index=True)
    admitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    discharged_at = Column(DateTime(timezone=True), nullable=True)
    diagnosis = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=AdmissionStatus.ADMITTED.value)
    notes = Column(Text, nullable=True)


class Treatment(Base, TimestampMixin):
    __tablename__ = "treatments"

    id = Column(String, primary_key=True, default=generate_uuid)
    patient_id = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(String, ForeignKey("doctors.id"), nullable=True, index=True)
    admission_id = Column(String, ForeignKey("admissions.id"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
