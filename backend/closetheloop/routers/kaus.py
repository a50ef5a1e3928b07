from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..kau_finalizer import finalize_kaus
from ..schemas import FinalizeKausRequest, MessageResponse

router = APIRouter(prefix="/kaus", tags=["kaus"])


@router.put("/{session_id}/finalize", response_model=MessageResponse)
def finalize(session_id: str, req: FinalizeKausRequest, db: Session = Depends(get_db)):
	finalize_kaus(db, session_id, req.kau_categories)
	return MessageResponse(message="KAUs finalized successfully")
