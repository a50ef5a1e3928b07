from __future__ import annotations
import json
from typing import Iterable

KAU_SCHEMA = {
	"type": "array",
	"items": {
		"type": "object",
		"properties": {
			"category": {"type": "string"},
			"description": {"type": "string"},
		},
		"required": ["category", "description"],
	},
}

FEEDBACK_FIELDS = ("highlights", "missingPoints", "reflectiveQuestions", "prescriptiveSuggestions")

FEEDBACK_SCHEMA = {
	"type": "object",
	"properties": {field: {"type": "string"} for field in FEEDBACK_FIELDS},
	"required": list(FEEDBACK_FIELDS),
}


def _schema_header(schema: dict) -> str:
	return (
		"Return ONLY valid JSON that matches this JSON Schema. Do not include any commentary.\n"
		f"Schema:\n{json.dumps(schema)}\n"
	)


def build_kau_prompt(document_text: str) -> str:
	return (
		_schema_header(KAU_SCHEMA)
		+ "Task: Analyze this lecture document/slides and extract 5-10 Key Areas of Understanding (KAU). "
		"Focus on pedagogical goals: Cover Bloom's Taxonomy levels (remember, understand, apply, analyze, evaluate, create). "
		'For each KAU, use a categorical tag like "Knowledge: Topic Name" and describe the learning objective or skill.\n'
		f"Input:\n{document_text}"
	)


def format_kau_lines(kaus: Iterable) -> str:
	return "\n".join(f"{k.category}: {k.description}" for k in kaus)


def build_feedback_prompt(kau_lines: str, submission_text: str) -> str:
	return (
		_schema_header(FEEDBACK_SCHEMA)
		+ "Task: Evaluate the student's assignment submission pedagogically against these Key Areas of Understanding (KAUs). "
		"Use Bloom's Taxonomy to frame feedback. Provide in exactly 4 sections:\n\n"
		"- highlights: Encouraging bullet points of strengths (e.g., application of knowledge).\n"
		"- missingPoints: Constructive bullet points of gaps (e.g., needs deeper analysis).\n"
		'- reflectiveQuestions: Socratic questions or hints to prompt self-reflection (e.g., "What would happen if...?").\n'
		"- prescriptiveSuggestions: Teacher strategies to remedy class gaps, like differentiated instruction or active learning activities.\n\n"
		f"KAUs:\n{kau_lines}\n\n"
		f"Student Submission:\n{submission_text}\n\n"
		"Separate bullet points with semicolons; ensure empathetic, growth-oriented tone."
	)
