from __future__ import annotations
from datetime import datetime
from typing import List
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from .db import Base
from .remarks import split_remarks


class LearningSession(Base):
	__tablename__ = "sessions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	# Human-chosen identifier shared with students
	session_id = Column(String(64), unique=True, index=True, nullable=False)
	title = Column(String(256), nullable=False)
	document_path = Column(String(512), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	kaus = relationship("Kau", back_populates="session", order_by="Kau.id")
	submissions = relationship("Submission", back_populates="session", order_by="Submission.id")


class Kau(Base):
	__tablename__ = "kaus"
	id = Column(Integer, primary_key=True, autoincrement=True)
	session_id = Column(Integer, ForeignKey("sessions.id"), index=True, nullable=False)
	category = Column(String(256), nullable=False)
	description = Column(Text, nullable=False)
	finalized = Column(Boolean, default=False, nullable=False)

	session = relationship("LearningSession", back_populates="kaus")


class Submission(Base):
	__tablename__ = "submissions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	session_id = Column(Integer, ForeignKey("sessions.id"), index=True, nullable=False)
	student_placeholder = Column(String(128), default="Anonymous", nullable=False)
	filename = Column(String(256), nullable=False)
	file_path = Column(String(512), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	session = relationship("LearningSession", back_populates="submissions")
	feedback = relationship("Feedback", back_populates="submission", uselist=False)


class Feedback(Base):
	__tablename__ = "feedback"
	id = Column(Integer, primary_key=True, autoincrement=True)
	submission_id = Column(Integer, ForeignKey("submissions.id"), unique=True, index=True, nullable=False)
	# Each field is a semicolon-delimited remark list, see remarks.py
	highlights = Column(Text, nullable=False, default="")
	missing_points = Column(Text, nullable=False, default="")
	reflective_questions = Column(Text, nullable=False, default="")
	prescriptive_suggestions = Column(Text, nullable=False, default="")
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	submission = relationship("Submission", back_populates="feedback")

	def remarks(self, field: str) -> List[str]:
		return split_remarks(getattr(self, field))
