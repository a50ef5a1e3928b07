from __future__ import annotations
import base64
import binascii
import io
import logging
import mimetypes
from typing import Optional

import pdfplumber

from .exceptions import ValidationError

logger = logging.getLogger(__name__)


def decode_base64_payload(value: str, field: str) -> bytes:
	# Accept both bare base64 and data URLs ("data:...;base64,....")
	if value.startswith("data:") and "," in value:
		value = value.split(",", 1)[1]
	try:
		return base64.b64decode(value, validate=True)
	except (binascii.Error, ValueError) as err:
		raise ValidationError(f"{field} is not valid base64", field=field) from err


def decode_text(data: bytes) -> str:
	# Lossy for binary formats; accepted
	return data.decode("utf-8", errors="replace")


def is_pdf_kind(file_kind: Optional[str]) -> bool:
	return bool(file_kind) and "pdf" in file_kind.lower()


def extract_pdf_text(data: bytes) -> str:
	pages = []
	with pdfplumber.open(io.BytesIO(data)) as pdf:
		for page in pdf.pages:
			pages.append(page.extract_text() or "")
	return "\n".join(pages)


def extract_document_text(data: Optional[bytes], file_kind: Optional[str]) -> str:
	"""Best-effort text for an uploaded lecture document.

	PDFs go through pdfplumber and fall back to a raw decode when the extractor
	fails. Everything else is decoded directly.
	"""
	if not data:
		return ""
	if is_pdf_kind(file_kind):
		try:
			return extract_pdf_text(data)
		except Exception:
			logger.warning("PDF text extraction failed; decoding raw bytes", exc_info=True)
	return decode_text(data)


_KNOWN_EXTENSIONS = {
	"application/pdf": ".pdf",
	"text/plain": ".txt",
	"text/markdown": ".md",
}


def extension_for(file_kind: Optional[str]) -> str:
	if not file_kind:
		return ""
	kind = file_kind.split(";", 1)[0].strip().lower()
	if "/" not in kind:
		return "." + kind.lstrip(".")
	return _KNOWN_EXTENSIONS.get(kind) or mimetypes.guess_extension(kind) or ""


def clamp_text(text: str, limit: int) -> str:
	if limit > 0 and len(text) > limit:
		return text[:limit]
	return text
