from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .exceptions import GenerationError, NotFoundError, ProfessorRequiredError, StorageError, ValidationError
from .models import Kau, LearningSession
from .prompts import KAU_SCHEMA, build_kau_prompt
from .settings import settings
from .storage import ObjectStore, discard_object, guess_content_type, timestamped_path
from .text_extraction import clamp_text, extension_for, extract_document_text

logger = logging.getLogger(__name__)

MAX_SUGGESTED_KAUS = 10
SESSION_ID_MAX_LEN = 64


def _parse_kau_suggestions(raw: Any) -> List[Dict[str, str]]:
	if not isinstance(raw, list):
		raise GenerationError("Generation service did not return a KAU list")
	suggestions: List[Dict[str, str]] = []
	for item in raw:
		if not isinstance(item, dict):
			continue
		category = str(item.get("category") or "").strip()
		description = str(item.get("description") or "").strip()
		if not category or not description:
			continue
		suggestions.append({"category": category, "description": description})
		if len(suggestions) == MAX_SUGGESTED_KAUS:
			break
	return suggestions


def get_session_or_404(db: Session, session_id: str) -> LearningSession:
	row = db.query(LearningSession).filter(LearningSession.session_id == session_id).first()
	if row is None:
		raise NotFoundError("Session not found", {"session_id": session_id})
	return row


async def create_session(
	db: Session,
	generator,
	store: ObjectStore,
	*,
	session_id: Optional[str],
	title: Optional[str],
	file_bytes: Optional[bytes] = None,
	file_kind: Optional[str] = None,
	professor_confirmed: bool = False,
) -> Tuple[LearningSession, List[Dict[str, str]]]:
	"""Create a session and persist the KAUs Gemini suggests for its document.

	The session row and its KAU rows are committed in one transaction. A stored
	document is removed again if that transaction fails.
	"""
	session_id = (session_id or "").strip()
	title = (title or "").strip()
	if not session_id or not title:
		raise ValidationError("Session ID and title required")
	if len(session_id) > SESSION_ID_MAX_LEN:
		raise ValidationError(f"Session ID must be at most {SESSION_ID_MAX_LEN} characters", field="sessionId")
	if not professor_confirmed:
		raise ProfessorRequiredError("Only professors can create sessions")
	existing = db.query(LearningSession.id).filter(LearningSession.session_id == session_id).first()
	if existing is not None:
		raise ValidationError("Session ID already exists", field="sessionId")

	document_text = clamp_text(extract_document_text(file_bytes, file_kind), settings.max_prompt_text_chars)
	raw = await generator.generate_json(
		build_kau_prompt(document_text),
		schema=KAU_SCHEMA,
		max_output_tokens=settings.kau_max_output_tokens,
	)
	suggestions = _parse_kau_suggestions(raw)

	document_path: Optional[str] = None
	if file_bytes:
		document_name = "lecture" + extension_for(file_kind)
		content_type = file_kind if file_kind and "/" in file_kind else guess_content_type(document_name)
		document_path = store.put(
			timestamped_path("documents", session_id, document_name),
			file_bytes,
			content_type=content_type,
		)

	try:
		row = LearningSession(session_id=session_id, title=title, document_path=document_path)
		db.add(row)
		db.flush()
		for kau in suggestions:
			db.add(Kau(session_id=row.id, category=kau["category"], description=kau["description"], finalized=False))
		db.commit()
	except SQLAlchemyError as err:
		db.rollback()
		if document_path:
			discard_object(store, document_path)
		logger.exception("Failed to persist session %s", session_id)
		raise StorageError("Failed to create session", {"session_id": session_id}) from err
	db.refresh(row)
	logger.info("Created session %s with %d suggested KAUs", session_id, len(suggestions))
	return row, suggestions
