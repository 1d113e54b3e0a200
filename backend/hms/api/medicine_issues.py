from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, StrictInt
from sqlalchemy.orm import Session

from ..core.security import TokenClaims, get_current_claims, require_role
from ..models.base import get_db
from ..models.medicine import MedicineIssue
from ..models.user import UserRole
from ..services.medicine_issuance import issue_medicine
from ..services.repository import Repository

router = APIRouter(prefix="/medicine_issues", tags=["medicines"])

issues = Repository(MedicineIssue, "Medicine issue")


class IssueRequest(BaseModel):
    medicine_id: str
    patient_id: str
    # strict: true or "3" must not be coerced into a quantity
    quantity: StrictInt = 1
    instructions: Optional[str] = None
    source_batch: Optional[str] = None
    notes: Optional[str] = None


class MedicineIssueResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    medicine_id: str
    patient_id: str
    issued_by: Optional[str]
    quantity: int
    instructions: Optional[str]
    source_batch: Optional[str]
    notes: Optional[str]
    issued_at: datetime


@router.get("", response_model=List[MedicineIssueResponse])
def list_issues(
    medicine_id: Optional[str] = None,
    patient_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 200,
    db: Session = Depends(get_db),
    _claims=Depends(get_current_claims),
):
    filters = {"medicine_id": medicine_id, "patient_id": patient_id}
    return issues.list(db, filters, skip=skip, limit=limit, order_by=MedicineIssue.issued_at.desc())


@router.get("/{issue_id}", response_model=MedicineIssueResponse)
def get_issue(issue_id: str, db: Session = Depends(get_db), _claims=Depends(get_current_claims)):
    return issues.get_or_404(db, issue_id)


@router.post("", response_model=MedicineIssueResponse, status_code=status.HTTP_201_CREATED)
def create_issue(
    req: IssueRequest,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(require_role(UserRole.ADMIN)),
):
    """Issue medicine to a patient: decrement stock and record it, atomically."""
    return issue_medicine(
        db,
        req.medicine_id,
        req.patient_id,
        quantity=req.quantity,
        issued_by=claims.id,
        instructions=req.instructions,
        source_batch=req.source_batch,
        notes=req.notes,
    )
