import asyncio
import json

import httpx
import pytest

from closetheloop.exceptions import GenerationError, GenerationTimeout
from closetheloop.gemini_client import GeminiClient, to_gemini_schema
from closetheloop.prompts import FEEDBACK_SCHEMA, KAU_SCHEMA


def _reply(text):
	return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler):
	http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
	return GeminiClient(api_key="test-key", model="gemini-2.5-flash", timeout=5, http_client=http_client)


def _run(client, prompt="prompt", **kwargs):
	async def go():
		try:
			return await client.generate_json(prompt, **kwargs)
		finally:
			await client.aclose()

	return asyncio.run(go())


def test_generate_json_sends_generation_config():
	seen = {}

	def handler(request):
		seen["url"] = request.url
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json=_reply('[{"category": "Knowledge: Heat", "description": "d"}]'))

	result = _run(_client(handler), "Analyze this", schema=KAU_SCHEMA, max_output_tokens=1024, temperature=0.3)

	assert result == [{"category": "Knowledge: Heat", "description": "d"}]
	assert seen["url"].params["key"] == "test-key"
	assert "gemini-2.5-flash:generateContent" in seen["url"].path
	config = seen["body"]["generationConfig"]
	assert config["temperature"] == 0.3
	assert config["maxOutputTokens"] == 1024
	assert config["stopSequences"] == ["```"]
	assert config["responseMimeType"] == "application/json"
	assert config["responseSchema"]["type"] == "ARRAY"
	assert config["responseSchema"]["items"]["properties"]["category"] == {"type": "STRING"}
	assert config["responseSchema"]["items"]["required"] == ["category", "description"]
	assert seen["body"]["contents"][0]["parts"][0]["text"] == "Analyze this"


def test_unparsable_output_is_generation_error():
	client = _client(lambda request: httpx.Response(200, json=_reply("Sure! Here are your KAUs")))
	with pytest.raises(GenerationError):
		_run(client)


def test_unexpected_shape_is_generation_error():
	client = _client(lambda request: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}))
	with pytest.raises(GenerationError):
		_run(client)


def test_http_error_is_generation_error():
	client = _client(lambda request: httpx.Response(503, json={"error": "overloaded"}))
	with pytest.raises(GenerationError) as exc:
		_run(client)
	assert exc.value.details["status_code"] == 503


def test_timeout_is_generation_timeout():
	def handler(request):
		raise httpx.ReadTimeout("timed out", request=request)

	with pytest.raises(GenerationTimeout):
		_run(_client(handler))


def test_missing_api_key_fails_on_call(monkeypatch):
	from closetheloop import gemini_client

	monkeypatch.setattr(gemini_client.settings, "gemini_api_key", None)
	client = GeminiClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))
	with pytest.raises(GenerationError):
		_run(client)


def test_no_schema_means_no_response_schema():
	seen = {}

	def handler(request):
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json=_reply("{}"))

	assert _run(_client(handler)) == {}
	assert "responseSchema" not in seen["body"]["generationConfig"]


def test_output_not_matching_schema_is_generation_error():
	reply = json.dumps({"highlights": "Nice", "missingPoints": "Entropy"})
	client = _client(lambda request: httpx.Response(200, json=_reply(reply)))
	with pytest.raises(GenerationError) as exc:
		_run(client, schema=FEEDBACK_SCHEMA)
	assert "schema" in exc.value.message


def test_to_gemini_schema_uppercases_types_only():
	converted = to_gemini_schema(FEEDBACK_SCHEMA)
	assert converted["type"] == "OBJECT"
	assert converted["properties"]["missingPoints"] == {"type": "STRING"}
	assert converted["required"] == FEEDBACK_SCHEMA["required"]
	assert FEEDBACK_SCHEMA["type"] == "object"
