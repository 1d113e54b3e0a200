from enum import Enum

from sqlalchemy import Column, String, Boolean
from .base import Base, TimestampMixin, generate_uuid


class UserRole(str, Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    STAFF = "staff"
    PATIENT = "patient"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=True)
    # Always stored trimmed and lower-cased, so uniqueness is case-insensitive
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.PATIENT.value)
    is_active = Column(Boolean, nullable=False, default=True)
