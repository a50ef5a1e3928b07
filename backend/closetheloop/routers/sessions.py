from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..dashboard import build_dashboard
from ..db import get_db
from ..gemini_client import get_generator
from ..schemas import CreateSessionRequest, CreateSessionResponse, DashboardResponse, SessionOut
from ..session_manager import create_session
from ..storage import ObjectStore, get_object_store
from ..text_extraction import decode_base64_payload

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("", response_model=CreateSessionResponse)
async def create(
	req: CreateSessionRequest,
	db: Session = Depends(get_db),
	generator=Depends(get_generator),
	store: ObjectStore = Depends(get_object_store),
):
	file_bytes = decode_base64_payload(req.file_base64, "fileBase64") if req.file_base64 else None
	session, suggestions = await create_session(
		db,
		generator,
		store,
		session_id=req.session_id,
		title=req.title,
		file_bytes=file_bytes,
		file_kind=req.file_type,
		professor_confirmed=req.is_professor,
	)
	return CreateSessionResponse(session=SessionOut.model_validate(session), suggested_kaus=suggestions)


@router.get("/{session_id}", response_model=DashboardResponse)
def dashboard(session_id: str, db: Session = Depends(get_db)):
	return build_dashboard(db, session_id)
