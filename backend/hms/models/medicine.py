from sqlalchemy import Column, String, Integer, Text, Date, DateTime, ForeignKey, CheckConstraint
from .base import Base, TimestampMixin, generate_uuid, utcnow


class Medicine(Base, TimestampMixin):
    __tablename__ = "medicines"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_medicines_quantity_non_negative"),)

    id = Column(String, primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False, index=True)
    brand = Column(String(200), nullable=True)
    batch_no = Column(String(100), nullable=True)
    expiry_date = Column(Date, nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(30), nullable=False, default="tablet")
    min_threshold = Column(Integer, nullable=False, default=0)  # low-stock threshold
    location = Column(String(100), nullable=True)

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_threshold


class MedicineIssue(Base, TimestampMixin):
    """Append-only ledger of stock handed out to patients."""
    __tablename__ = "medicine_issues"
    __table_args__ = (CheckConstraint("quantity > 0", name="ck_medicine_issues_quantity_positive"),)

    id = Column(String, primary_key=True, default=generate_uuid)
    medicine_id = Column(String, ForeignKey("medicines.id"), nullable=False, index=True)
    patient_id = Column(String, ForeignKey("patients.id"), nullable=False, index=True)
    issued_by = Column(String, ForeignKey("users.id"), nullable=True)
    quantity = Column(Integer, nullable=False)
    instructions = Column(Text, nullable=True)
    source_batch = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    issued_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
