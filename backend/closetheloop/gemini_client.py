from __future__ import annotations
import json
import logging
import httpx
import jsonschema
from typing import Any, Dict, Optional
from .exceptions import GenerationError, GenerationTimeout
from .settings import settings

logger = logging.getLogger(__name__)


def to_gemini_schema(schema: Any) -> Any:
	"""Copy a JSON schema with type names in the upper-case form Gemini expects."""
	if isinstance(schema, dict):
		return {
			key: value.upper() if key == "type" and isinstance(value, str) else to_gemini_schema(value)
			for key, value in schema.items()
		}
	if isinstance(schema, list):
		return [to_gemini_schema(item) for item in schema]
	return schema


class GeminiClient:
	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		http_client: Optional[httpx.AsyncClient] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		self.model = model or settings.gemini_model
		self.provider = settings.gemini_provider
		if self.provider == "vertex":
			region = settings.vertex_region
			project = settings.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self.base_url = base_url or (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{self.model}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self.base_url = base_url or f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
			self._auth_in_query = True
		self.timeout = timeout if timeout is not None else settings.gemini_timeout_seconds
		self._client = http_client or httpx.AsyncClient(timeout=self.timeout)

	async def generate_json(
		self,
		prompt: str,
		*,
		schema: Optional[Dict[str, Any]] = None,
		max_output_tokens: int = 1024,
		temperature: Optional[float] = None,
	) -> Any:
		"""Run a single generation in JSON mode and return the parsed value.

		When a schema is given it is sent as the response schema and the parsed
		value must validate against it.
		"""
		generation_config: Dict[str, Any] = {
			"temperature": settings.gemini_temperature if temperature is None else temperature,
			"maxOutputTokens": max_output_tokens,
			"stopSequences": ["```"],
			"responseMimeType": "application/json",
		}
		if schema is not None:
			generation_config["responseSchema"] = to_gemini_schema(schema)
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": generation_config,
		}
		text = await self._post_payload(payload)
		try:
			data = json.loads(text)
		except ValueError as err:
			logger.warning("Gemini returned non-JSON output (%d chars)", len(text))
			raise GenerationError("Generation service returned invalid JSON") from err
		if schema is not None:
			try:
				jsonschema.validate(data, schema)
			except jsonschema.ValidationError as err:
				raise GenerationError(
					"Generation service output does not match the schema",
					{"reason": err.message},
				) from err
		return data

	async def _post_payload(self, payload: Dict[str, Any]) -> str:
		if not self.api_key:
			raise GenerationError("GEMINI_API_KEY is not configured")
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload, timeout=self.timeout)
			r.raise_for_status()
		except httpx.TimeoutException as err:
			raise GenerationTimeout(
				"Generation service timed out",
				{"timeout_seconds": self.timeout},
			) from err
		except httpx.HTTPStatusError as err:
			raise GenerationError(
				"Generation service request failed",
				{"status_code": err.response.status_code},
			) from err
		except httpx.RequestError as err:
			raise GenerationError(f"Generation service unreachable: {err}") from err
		try:
			data = r.json()
			return data["candidates"][0]["content"]["parts"][0]["text"]
		except (ValueError, KeyError, IndexError, TypeError) as err:
			raise GenerationError("Unexpected Gemini response shape") from err

	async def aclose(self) -> None:
		await self._client.aclose()


async def get_generator():
	client = GeminiClient()
	try:
		yield client
	finally:
		await client.aclose()
