"""
Generic single-table access used by the CRUD routers.

Updates are merge-patches: a key that is missing from ``changes`` (or whose
value is None) keeps the stored value. Integrity violations raised by the
datastore on commit are rolled back and reported as Conflict.
"""
import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import Conflict, InvalidReference, NotFound
from ..models.base import Base, generate_uuid
from ..models.admission import Admission
from ..models.appointment import Appointment
from ..models.doctor import Doctor
from ..models.patient import Patient

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# Foreign-key argument name -> referenced model, for reference pre-checks
REFERENCE_TABLES = {
    "patient_id": Patient,
    "doctor_id": Doctor,
    "appointment_id": Appointment,
    "admission_id": Admission,
}


def exists_by_id(db: Session, model, entity_id: Optional[str]) -> bool:
    if not entity_id:
        return False
    return db.query(model.id).filter(model.id == entity_id).first() is not None


def require_references(db: Session, **refs: Optional[str]) -> None:
    """Raise InvalidReference for the first supplied id that does not exist.

    ``None`` values are skipped; only ids the caller actually supplied are
    checked. Keyword names must be keys of REFERENCE_TABLES unless the value
    is a ``(model, id)`` tuple.
    """
    for name, value in refs.items():
        if isinstance(value, tuple):
            model, entity_id = value
        else:
            model = REFERENCE_TABLES[name]
            entity_id = value
        if entity_id is None:
            continue
        if not exists_by_id(db, model, entity_id):
            raise InvalidReference(f"{name} {entity_id} not found")


def commit_or_conflict(db: Session, message: str = "Conflicts with existing data") -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Integrity violation on commit: %s", exc.orig)
        raise Conflict(message) from exc


class Repository(Generic[ModelT]):
    def __init__(self, model: Type[ModelT], label: Optional[str] = None):
        self.model = model
        self.label = label or model.__name__

    def create(self, db: Session, data: Dict[str, Any]) -> ModelT:
        obj = self.model(id=generate_uuid(), **data)
        db.add(obj)
        commit_or_conflict(db, f"{self.label} conflicts with existing data")
        db.refresh(obj)
        return obj

    def get(self, db: Session, entity_id: str) -> Optional[ModelT]:
        return db.query(self.model).filter(self.model.id == entity_id).first()

    def get_or_404(self, db: Session, entity_id: str) -> ModelT:
        obj = self.get(db, entity_id)
        if obj is None:
            raise NotFound(f"{self.label} not found")
        return obj

    def list(
        self,
        db: Session,
        filters: Optional[Dict[str, Any]] = None,
        skip: int = 0,
        limit: int = 200,
        order_by=None,
    ) -> List[ModelT]:
        q = db.query(self.model)
        for column, value in (filters or {}).items():
            if value is not None:
                q = q.filter(getattr(self.model, column) == value)
        if order_by is None:
            order_by = self.model.created_at.desc()
        return q.order_by(order_by).offset(skip).limit(limit).all()

    def update(self, db: Session, entity_id: str, changes: Dict[str, Any]) -> ModelT:
        obj = self.get_or_404(db, entity_id)
        for field, value in changes.items():
            if value is not None:
                setattr(obj, field, value)
        commit_or_conflict(db, f"{self.label} conflicts with existing data")
        db.refresh(obj)
        return obj

    def delete(self, db: Session, entity_id: str) -> None:
        obj = self.get_or_404(db, entity_id)
        db.delete(obj)
        commit_or_conflict(db, f"{self.label} is still referenced by other records")
