"""
Shared fixtures: in-memory database, stub Gemini generator, temp object store.
"""
import base64

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from closetheloop.db import Base, get_db
from closetheloop.gemini_client import get_generator
from closetheloop.main import app
from closetheloop.settings import settings
from closetheloop.storage import LocalObjectStore, get_object_store


class StubGenerator:
	"""Stands in for GeminiClient; replays queued responses in order."""

	def __init__(self):
		self.responses = []
		self.calls = []

	def queue(self, *responses):
		self.responses.extend(responses)

	async def generate_json(self, prompt, **kwargs):
		self.calls.append({"prompt": prompt, **kwargs})
		response = self.responses.pop(0)
		if isinstance(response, Exception):
			raise response
		return response

	async def aclose(self):
		pass


@pytest.fixture
def session_factory():
	engine = create_engine(
		"sqlite:///:memory:",
		connect_args={"check_same_thread": False},
		poolclass=StaticPool,
	)
	Base.metadata.create_all(bind=engine)
	factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
	yield factory
	Base.metadata.drop_all(bind=engine)
	engine.dispose()


@pytest.fixture
def db(session_factory):
	session = session_factory()
	yield session
	session.close()


@pytest.fixture
def generator():
	return StubGenerator()


@pytest.fixture
def store(tmp_path):
	return LocalObjectStore(tmp_path / "objects")


@pytest.fixture
def client(session_factory, generator, store):
	def override_get_db():
		session = session_factory()
		try:
			yield session
		finally:
			session.close()

	app.dependency_overrides[get_db] = override_get_db
	app.dependency_overrides[get_generator] = lambda: generator
	app.dependency_overrides[get_object_store] = lambda: store
	yield TestClient(app)
	app.dependency_overrides.clear()


@pytest.fixture
def api():
	return settings.api_prefix


def b64(data: bytes) -> str:
	return base64.b64encode(data).decode("ascii")


def stored_files(store: LocalObjectStore):
	if not store.root.exists():
		return []
	return sorted(p.relative_to(store.root).as_posix() for p in store.root.rglob("*") if p.is_file())
