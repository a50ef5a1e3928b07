"""
Error taxonomy for the CloseTheLoop API.

Each error carries a short human-readable message plus optional context. The
HTTP status used at the API boundary lives on the class so that main.py can map
every error with a single handler.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class CloseTheLoopError(Exception):
	"""Base exception for all application errors."""

	status_code = 500

	def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
		self.message = message
		self.details = details or {}
		super().__init__(message)

	def __str__(self) -> str:
		if self.details:
			return f"{self.message} | Details: {self.details}"
		return self.message


class ValidationError(CloseTheLoopError):
	"""Bad or missing input that the caller can correct."""

	status_code = 400

	def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None) -> None:
		details = details or {}
		if field:
			details["field"] = field
		super().__init__(message, details)


class ProfessorRequiredError(ValidationError):
	"""Raised when a professor-only action is attempted without confirmation."""

	status_code = 403


class NotFoundError(CloseTheLoopError):
	"""Unknown session or submission reference."""

	status_code = 404


class GenerationError(CloseTheLoopError):
	"""The Gemini response was missing, failed, or did not parse."""


class GenerationTimeout(GenerationError):
	"""The Gemini call did not complete within the configured timeout."""


class StorageError(CloseTheLoopError):
	"""An object store or database write was rejected."""


class UnclassifiedError(CloseTheLoopError):
	"""Catch-all for unexpected failures."""
