import itertools

import pytest

from closetheloop.dashboard import rank_gaps, remediation_suggestions, tally_gaps
from closetheloop.models import Feedback, Kau, LearningSession, Submission


def test_tally_counts_trimmed_phrases():
	gaps = tally_gaps(["A; B ;A"])
	assert dict(gaps) == {"A": 2, "B": 1}
	assert rank_gaps(gaps) == [("A", 2), ("B", 1)]


def test_tally_keeps_case_and_punctuation_variants_apart():
	gaps = tally_gaps(["Entropy; entropy", "Entropy."])
	assert dict(gaps) == {"Entropy": 1, "entropy": 1, "Entropy.": 1}


def test_ranking_is_stable_on_ties():
	gaps = tally_gaps(["C; A", "B; A", "D"])
	assert rank_gaps(gaps) == [("A", 2), ("C", 1), ("B", 1), ("D", 1)]


def test_ranking_is_capped_at_ten():
	gaps = tally_gaps(["; ".join(f"gap {i}" for i in range(15))])
	top = rank_gaps(gaps)
	assert len(top) == 10
	assert [phrase for phrase, _ in top] == [f"gap {i}" for i in range(10)]


def test_suggestions_follow_top_gaps():
	assert remediation_suggestions([("Entropy", 3), ("Units", 1)]) == ["Reinforce: Entropy", "Reinforce: Units"]


@pytest.fixture
def classroom(db):
	chem = LearningSession(session_id="CHEM101", title="Thermo")
	other = LearningSession(session_id="BIO200", title="Cells")
	db.add_all([chem, other])
	db.flush()
	db.add_all([
		Kau(session_id=chem.id, category="Knowledge: Heat", description="Define heat", finalized=True),
		Kau(session_id=chem.id, category="Apply: Entropy", description="Use entropy"),
	])

	numbers = itertools.count(1)

	def add_submission(session, missing_points=None):
		n = next(numbers)
		sub = Submission(session_id=session.id, filename=f"s{n}.txt", file_path=f"submissions/x/{n}")
		db.add(sub)
		db.flush()
		if missing_points is not None:
			db.add(Feedback(submission_id=sub.id, missing_points=missing_points))

	add_submission(chem, "Entropy; Units")
	add_submission(chem, "Sign conventions; Entropy")
	add_submission(chem, " Units ;Entropy")
	add_submission(chem)  # no feedback recorded
	add_submission(other, "Osmosis; Osmosis; Osmosis")
	db.commit()


def test_dashboard_aggregates_session_feedback(client, api, classroom):
	response = client.get(f"{api}/sessions/CHEM101")

	assert response.status_code == 200
	body = response.json()
	assert body["submissionsCount"] == 3
	assert body["topGaps"] == [["Entropy", 3], ["Units", 2], ["Sign conventions", 1]]
	assert body["suggestions"] == ["Reinforce: Entropy", "Reinforce: Units", "Reinforce: Sign conventions"]
	assert body["session"]["sessionId"] == "CHEM101"
	kaus = {k["category"]: k["finalized"] for k in body["session"]["kaus"]}
	assert kaus == {"Knowledge: Heat": True, "Apply: Entropy": False}


def test_dashboard_for_session_without_feedback(client, api, db):
	db.add(LearningSession(session_id="EMPTY1", title="Nothing yet"))
	db.commit()

	body = client.get(f"{api}/sessions/EMPTY1").json()

	assert body["submissionsCount"] == 0
	assert body["topGaps"] == []
	assert body["suggestions"] == []
	assert body["session"]["kaus"] == []


def test_dashboard_unknown_session_is_404(client, api):
	response = client.get(f"{api}/sessions/GHOST101")
	assert response.status_code == 404
	assert response.json() == {"error": "Session not found"}
