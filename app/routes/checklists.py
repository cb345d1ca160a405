"""Checklist catalogue routes."""
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.assignments.engine import get_available_checklists
from app.core.database import get_session
from app.models import ChecklistType
from app.schemas.assignment import ChecklistOut

router = APIRouter(prefix="/api/checklists", tags=["checklists"])


@router.get("", response_model=list[ChecklistOut])
async def list_checklists(
    type: ChecklistType | None = None,
    session: Session = Depends(get_session),
):
    """List checklists ordered by type then display order."""
    return get_available_checklists(session, type)
