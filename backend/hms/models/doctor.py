from sqlalchemy import Column, String, Text, ForeignKey
from .base import Base, TimestampMixin, generate_uuid


class Doctor(Base, TimestampMixin):
    __tablename__ = "doctors"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    specialty = Column(String(100), nullable=True)
    qualifications = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
