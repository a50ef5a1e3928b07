from __future__ import annotations
import logging
from typing import Any, List

from sqlalchemy import update
from sqlalchemy.orm import Session

from .exceptions import ValidationError
from .models import Kau
from .session_manager import get_session_or_404

logger = logging.getLogger(__name__)


def _validate_categories(kau_categories: Any) -> List[str]:
	if not isinstance(kau_categories, (list, tuple)):
		raise ValidationError("kauCategories must be an array", field="kauCategories")
	if not all(isinstance(c, str) for c in kau_categories):
		raise ValidationError("kauCategories must contain only strings", field="kauCategories")
	return list(kau_categories)


def finalize_kaus(db: Session, session_id: str, kau_categories: Any) -> int:
	"""Mark the session's KAUs whose category is listed as finalized.

	Unknown categories are ignored. Returns the number of rows matched.
	"""
	categories = _validate_categories(kau_categories)
	session = get_session_or_404(db, session_id)
	if not categories:
		return 0
	res = db.execute(
		update(Kau)
		.where(Kau.session_id == session.id, Kau.category.in_(categories))
		.values(finalized=True)
	)
	db.commit()
	matched = res.rowcount or 0
	logger.info("Finalized %d KAUs for session %s", matched, session_id)
	return matched
