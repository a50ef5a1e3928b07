from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import CloseTheLoopError, GenerationError, NotFoundError, StorageError, ValidationError
from .models import Feedback, Kau, Submission
from .prompts import FEEDBACK_FIELDS, FEEDBACK_SCHEMA, build_feedback_prompt, format_kau_lines
from .remarks import join_remarks
from .session_manager import get_session_or_404
from .settings import settings
from .storage import ObjectStore, discard_object, guess_content_type, timestamped_path
from .text_extraction import clamp_text, decode_text

logger = logging.getLogger(__name__)

ANONYMOUS_STUDENT = "Anonymous"

# Generation output key -> Feedback column
_FIELD_COLUMNS = {
	"highlights": "highlights",
	"missingPoints": "missing_points",
	"reflectiveQuestions": "reflective_questions",
	"prescriptiveSuggestions": "prescriptive_suggestions",
}


def _parse_feedback(raw: Any) -> Dict[str, str]:
	if not isinstance(raw, dict):
		raise GenerationError("Generation service did not return a feedback object")
	parsed: Dict[str, str] = {}
	for field in FEEDBACK_FIELDS:
		if field not in raw:
			raise GenerationError(f"Generated feedback is missing {field}", {"field": field})
		value = raw[field]
		if isinstance(value, list):
			value = join_remarks(value)
		elif value is None:
			value = ""
		parsed[field] = str(value)
	return parsed


async def submit(
	db: Session,
	generator,
	store: ObjectStore,
	*,
	session_id: Optional[str],
	filename: Optional[str],
	file_bytes: Optional[bytes],
	student_placeholder: Optional[str] = None,
) -> Tuple[Submission, Dict[str, str]]:
	"""Store a student's submission and generate feedback for it.

	Gemini runs before any row is written so no write transaction is held
	during the call. The submission and its feedback are then committed
	together; if anything fails after the file was stored, the object is removed.
	"""
	session_id = (session_id or "").strip()
	filename = (filename or "").strip()
	if not session_id or not filename or not file_bytes:
		raise ValidationError("Session ID, filename, and file required")

	session = get_session_or_404(db, session_id)
	session_pk = session.id
	kaus = (
		db.query(Kau)
		.filter(Kau.session_id == session_pk, Kau.finalized.is_(True))
		.order_by(Kau.id)
		.all()
	)
	kau_lines = format_kau_lines(kaus)
	# End the read transaction before the long external call
	db.rollback()
	student_text = clamp_text(decode_text(file_bytes), settings.max_prompt_text_chars)

	file_path = store.put(
		timestamped_path("submissions", session_id, filename),
		file_bytes,
		content_type=guess_content_type(filename),
	)
	logger.info("Stored submission for session %s at %s", session_id, file_path)

	try:
		raw = await generator.generate_json(
			build_feedback_prompt(kau_lines, student_text),
			schema=FEEDBACK_SCHEMA,
			max_output_tokens=settings.feedback_max_output_tokens,
		)
		feedback = _parse_feedback(raw)
	except CloseTheLoopError as err:
		discard_object(store, file_path)
		logger.warning("Submission for session %s discarded: %s", session_id, err)
		raise

	try:
		submission = Submission(
			session_id=session_pk,
			student_placeholder=(student_placeholder or "").strip() or ANONYMOUS_STUDENT,
			filename=filename,
			file_path=file_path,
		)
		db.add(submission)
		db.flush()
		db.add(Feedback(
			submission_id=submission.id,
			**{_FIELD_COLUMNS[field]: value for field, value in feedback.items()},
		))
		db.commit()
	except SQLAlchemyError as err:
		db.rollback()
		discard_object(store, file_path)
		logger.exception("Failed to persist submission for session %s", session_id)
		raise StorageError("Failed to save submission", {"session_id": session_id}) from err
	db.refresh(submission)
	return submission, feedback


def get_feedback(db: Session, submission_id: int) -> Feedback:
	row = db.query(Feedback).filter(Feedback.submission_id == submission_id).first()
	if row is None:
		raise NotFoundError("Feedback not found", {"submission_id": submission_id})
	return row
