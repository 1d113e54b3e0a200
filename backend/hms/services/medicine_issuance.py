"""
Medicine issuance workflow.

Stock is only ever decremented here, under an exclusive lock on the medicine
row held from the stock check until commit. Concurrent issues of the same
medicine therefore serialize, and quantity can never drop below zero.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.errors import InsufficientStock, InvalidInput, InvalidReference, NotFound
from ..models.base import generate_uuid, utcnow
from ..models.medicine import Medicine, MedicineIssue
from ..models.patient import Patient
from .repository import exists_by_id

logger = logging.getLogger(__name__)


def _require_positive_int(value, field: str = "quantity") -> int:
    # bool is an int subclass; True must not count as 1
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInput(f"{field} must be a positive integer")
    return value


def _lock_medicine(db: Session, medicine_id: str) -> Medicine:
    medicine = (
        db.query(Medicine)
        .filter(Medicine.id == medicine_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if medicine is None:
        raise NotFound("Medicine not found")
    return medicine


def issue_medicine(
    db: Session,
    medicine_id: str,
    patient_id: str,
    quantity: int = 1,
    issued_by: Optional[str] = None,
    instructions: Optional[str] = None,
    source_batch: Optional[str] = None,
    notes: Optional[str] = None,
) -> MedicineIssue:
    """Decrement stock and append an issue record, atomically."""
    _require_positive_int(quantity)
    if not medicine_id or not patient_id:
        raise InvalidInput("medicine_id, patient_id and positive quantity required")

    try:
        medicine = _lock_medicine(db, medicine_id)
        if not exists_by_id(db, Patient, patient_id):
            raise InvalidReference(f"patient_id {patient_id} not found")
        if medicine.quantity < quantity:
            raise InsufficientStock(
                f"Insufficient stock: requested {quantity}, available {medicine.quantity}"
            )

        medicine.quantity = medicine.quantity - quantity
        issue = MedicineIssue(
            id=generate_uuid(),
            medicine_id=medicine.id,
            patient_id=patient_id,
            issued_by=issued_by,
            quantity=quantity,
            instructions=instructions,
            source_batch=source_batch,
            notes=notes,
            issued_at=utcnow(),
        )
        db.add(issue)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(issue)
    db.refresh(medicine)
    logger.info(
        "Issued %d x medicine %s to patient %s (issue=%s, remaining=%d)",
        quantity, medicine_id, patient_id, issue.id, medicine.quantity,
    )
    if medicine.is_low_stock:
        logger.warning(
            "Medicine %s (%s) is low on stock: %d left, threshold %d",
            medicine.id, medicine.name, medicine.quantity, medicine.min_threshold,
        )
    return issue


def restock_medicine(db: Session, medicine_id: str, quantity: int) -> Medicine:
    """Add stock under the same row lock the issuance path uses."""
    _require_positive_int(quantity)
    try:
        medicine = _lock_medicine(db, medicine_id)
        medicine.quantity = medicine.quantity + quantity
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(medicine)
    logger.info("Restocked medicine %s by %d (now %d)", medicine_id, quantity, medicine.quantity)
    return medicine
