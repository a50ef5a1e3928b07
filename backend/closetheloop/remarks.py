"""Encoding of feedback remark lists.

Feedback fields are persisted as one string per field with remarks separated by
semicolons. Everything that reads or writes that encoding goes through here.
"""
from __future__ import annotations
from typing import Iterable, List, Optional

DELIMITER = ";"


def split_remarks(text: Optional[str]) -> List[str]:
	if not text:
		return []
	remarks: List[str] = []
	for fragment in text.split(DELIMITER):
		fragment = fragment.strip()
		if fragment:
			remarks.append(fragment)
	return remarks


def join_remarks(items: Iterable[str]) -> str:
	return f"{DELIMITER} ".join(str(item).strip() for item in items if str(item).strip())
