"""Medicine catalog. Stock moves only through issue and restock."""
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from sqlalchemy.orm import Session

from ..core.security import get_current_claims, require_role
from ..models.base import get_db
from ..models.medicine import Medicine
from ..models.user import UserRole
from ..services.medicine_issuance import restock_medicine
from ..services.repository import Repository

router = APIRouter(prefix="/medicines", tags=["medicines"])

medicines = Repository(Medicine, "Medicine")


class MedicineCreate(BaseModel):
    name: str = Field(min_length=1)
    brand: Optional[str] = None
    batch_no: Optional[str] = None
    expiry_date: Optional[date] = None
    quantity: int = Field(default=0, ge=0, strict=True)
    unit: str = "tablet"
    min_threshold: int = Field(default=0, ge=0)
    location: Optional[str] = None


class MedicineUpdate(BaseModel):
    # quantity is not editable here; use /restock or an issue
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    brand: Optional[str] = None
    batch_no: Optional[str] = None
    expiry_date: Optional[date] = None
    unit: Optional[str] = None
    min_threshold: Optional[int] = Field(default=None, ge=0)
    location: Optional[str] = None


class RestockRequest(BaseModel):
    quantity: StrictInt


class MedicineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    brand: Optional[str]
    batch_no: Optional[str]
    expiry_date: Optional[date]
    quantity: int
    unit: str
    min_threshold: int
    location: Optional[str]
    is_low_stock: bool
    updated_at: datetime


@router.get("", response_model=List[MedicineResponse])
def list_medicines(
    name: Optional[str] = None,
    skip: int = 0,
    limit: int = 500,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    q = db.query(Medicine)
    if name:
        q = q.filter(Medicine.name.ilike(f"%{name}%"))
    return q.order_by(Medicine.name).offset(skip).limit(limit).all()


@router.get("/low-stock", response_model=List[MedicineResponse])
def list_low_stock(db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    """Medicines at or below their low-stock threshold."""
    return (
        db.query(Medicine)
        .filter(Medicine.quantity <= Medicine.min_threshold)
        .order_by(Medicine.quantity, Medicine.name)
        .all()
    )


@router.get("/{medicine_id}", response_model=MedicineResponse)
def get_medicine(medicine_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return medicines.get_or_404(db, medicine_id)


@router.post("", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
def create_medicine(
    medicine_in: MedicineCreate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    return medicines.create(db, medicine_in.model_dump())


@router.put("/{medicine_id}", response_model=MedicineResponse)
def update_medicine(
    medicine_id: str,
    medicine_in: MedicineUpdate,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    return medicines.update(db, medicine_id, medicine_in.model_dump(exclude_unset=True))


@router.post("/{medicine_id}/restock", response_model=MedicineResponse)
def restock(
    medicine_id: str,
    req: RestockRequest,
    db: Session = Depends(get_db),
    _admin=Depends(require_role(UserRole.ADMIN)),
):
    return restock_medicine(db, medicine_id, req.quantity)


@router.delete("/{medicine_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_medicine(medicine_id: str, db: Session = Depends(get_db), _admin=Depends(require_role(UserRole.ADMIN))):
    medicines.delete(db, medicine_id)
