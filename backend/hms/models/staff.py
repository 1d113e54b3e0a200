from sqlalchemy import Column, String, ForeignKey
from .base import Base, TimestampMixin, generate_uuid


class Staff(Base, TimestampMixin):
    __tablename__ = "staff"

    id = Column(String, primary_key=True, default=generate_uuid)
    user_id = Column(String, ForeignKey("users.id"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)
    role = Column(String(100), nullable=True)  # job title, e.g. "nurse", "pharmacist"
    department = Column(String(100), nullable=True)
