from __future__ import annotations
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from .models import Feedback, Submission
from .remarks import split_remarks
from .session_manager import get_session_or_404

TOP_GAPS_LIMIT = 10
SUGGESTION_PREFIX = "Reinforce: "


def tally_gaps(missing_points: Iterable[Optional[str]]) -> Counter:
	"""Count each missing-point phrase exactly as written, after trimming."""
	gaps: Counter = Counter()
	for text in missing_points:
		for phrase in split_remarks(text):
			gaps[phrase] += 1
	return gaps


def rank_gaps(gaps: Counter, limit: int = TOP_GAPS_LIMIT) -> List[Tuple[str, int]]:
	# Counter.most_common keeps first-seen order among equal counts
	return gaps.most_common(limit)


def remediation_suggestions(top_gaps: Iterable[Tuple[str, int]]) -> List[str]:
	return [f"{SUGGESTION_PREFIX}{phrase}" for phrase, _ in top_gaps]


def build_dashboard(db: Session, session_id: str) -> Dict[str, Any]:
	session = get_session_or_404(db, session_id)
	missing_points = [
		row.missing_points
		for row in (
			db.query(Feedback.missing_points)
			.join(Submission, Feedback.submission_id == Submission.id)
			.filter(Submission.session_id == session.id)
			.order_by(Feedback.id)
			.all()
		)
	]
	top_gaps = rank_gaps(tally_gaps(missing_points))
	return {
		"session": session,
		"submissions_count": len(missing_points),
		"top_gaps": top_gaps,
		"suggestions": remediation_suggestions(top_gaps),
	}
