from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from visitation.core.database import get_db
from visitation.repositories import ReferenceRepository
from visitation.schemas.appointment import StatusResponse

router = APIRouter(prefix="/api/statuses", tags=["Statuses"])


@router.get("", response_model=List[StatusResponse])
def list_statuses(db: Session = Depends(get_db)):
    """List appointment statuses with the IDs used by update and filter requests."""
    return [StatusResponse.model_validate(s) for s in ReferenceRepository.list_statuses(db)]
