from __future__ import annotations
from datetime import datetime
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
	# JSON bodies use camelCase (sessionId, fileBase64, ...)
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CreateSessionRequest(CamelModel):
	session_id: Optional[str] = None
	title: Optional[str] = None
	file_base64: Optional[str] = None
	file_type: Optional[str] = None
	is_professor: bool = False


class KauSuggestion(CamelModel):
	category: str
	description: str


class KauOut(CamelModel):
	id: int
	category: str
	description: str
	finalized: bool


class SessionOut(CamelModel):
	id: int
	session_id: str
	title: str
	document_path: Optional[str] = None
	created_at: datetime


class SessionWithKaus(SessionOut):
	kaus: List[KauOut] = []


class CreateSessionResponse(CamelModel):
	session: SessionOut
	suggested_kaus: List[KauSuggestion]


class FinalizeKausRequest(CamelModel):
	# Shape is checked by the finalizer so a bad value is a 400, not a 422
	kau_categories: Any = None


class MessageResponse(CamelModel):
	message: str


class SubmitRequest(CamelModel):
	session_id: Optional[str] = None
	student_placeholder: Optional[str] = None
	filename: Optional[str] = None
	file_base64: Optional[str] = None


class FeedbackContent(CamelModel):
	highlights: str
	missing_points: str
	reflective_questions: str
	prescriptive_suggestions: str


class SubmitResponse(CamelModel):
	submission_id: int
	feedback: FeedbackContent


class FeedbackRecord(FeedbackContent):
	id: int
	submission_id: int
	created_at: datetime


class DashboardResponse(CamelModel):
	session: SessionWithKaus
	submissions_count: int
	top_gaps: List[Tuple[str, int]]
	suggestions: List[str]


class HealthResponse(BaseModel):
	status: str
	message: str
