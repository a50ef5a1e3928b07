from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..gemini_client import get_generator
from ..schemas import FeedbackContent, FeedbackRecord, SubmitRequest, SubmitResponse
from ..storage import ObjectStore, get_object_store
from ..submission_processor import get_feedback, submit
from ..text_extraction import decode_base64_payload

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", response_model=SubmitResponse)
async def create(
	req: SubmitRequest,
	db: Session = Depends(get_db),
	generator=Depends(get_generator),
	store: ObjectStore = Depends(get_object_store),
):
	file_bytes = decode_base64_payload(req.file_base64, "fileBase64") if req.file_base64 else None
	submission, feedback = await submit(
		db,
		generator,
		store,
		session_id=req.session_id,
		filename=req.filename,
		file_bytes=file_bytes,
		student_placeholder=req.student_placeholder,
	)
	return SubmitResponse(submission_id=submission.id, feedback=FeedbackContent(**feedback))


@router.get("/{submission_id}/feedback", response_model=FeedbackRecord)
def feedback(submission_id: int, db: Session = Depends(get_db)):
	return get_feedback(db, submission_id)
