from __future__ import annotations
import logging
import httpx
from typing import Any, Dict, Optional, Tuple
from .errors import CREDENTIAL, GenerationError
from .settings import settings

logger = logging.getLogger(__name__)


def _gemini_endpoint(model: str) -> Tuple[str, bool]:
	"""Return (url, key_in_query) for the configured provider."""
	if settings.gemini_provider == "vertex":
		region = settings.vertex_region
		project = settings.vertex_project or "placeholder-project"
		# Vertex AI Express: API key goes in a header
		return (
			f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}"
			f"/publishers/google/models/{model}:generateContent",
			False,
		)
	return f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent", True


def _candidate_text(response: httpx.Response) -> str:
	try:
		return response.json()["candidates"][0]["content"]["parts"][0]["text"]
	except Exception:
		raise GenerationError(f"Unexpected Gemini response: {response.text}")


class GeminiClient:
	"""Text-generation adapter: ``generate_text(instructions, request) -> str``.

	Talks to Google AI Studio or Vertex AI, with an optional OpenRouter fallback.
	Every failure surfaces as ``GenerationError``.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
	) -> None:
		self.api_key = api_key or settings.gemini_api_key
		if not self.api_key:
			raise GenerationError("GEMINI_API_KEY is not configured", hint=CREDENTIAL)
		self.model = model or settings.gemini_model
		default_url, self._key_in_query = _gemini_endpoint(self.model)
		self.base_url = base_url or default_url
		self._client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)
		self._fallback_key = settings.openrouter_api_key
		self._fallback_client: Optional[httpx.AsyncClient] = None
		if self._fallback_key:
			self._fallback_client = httpx.AsyncClient(timeout=settings.gemini_timeout_seconds, transport=transport)

	def _auth(self) -> Tuple[Dict[str, str], Dict[str, str]]:
		if self._key_in_query:
			return {"key": self.api_key}, {}
		return {}, {"x-goog-api-key": self.api_key}

	async def generate_text(self, instructions: str, request: str, *, temperature: Optional[float] = None) -> str:
		temperature = settings.gemini_temperature if temperature is None else temperature
		payload: Dict[str, Any] = {
			"systemInstruction": {"parts": [{"text": instructions}]},
			"contents": [{"role": "user", "parts": [{"text": request}]}],
			"generationConfig": {
				"temperature": temperature,
				"maxOutputTokens": settings.gemini_max_output_tokens,
			},
		}
		try:
			text = await self._call_gemini(payload)
		except GenerationError as primary:
			if self._fallback_client is None:
				raise
			logger.warning("Gemini call failed (%s); falling back to OpenRouter", primary)
			text = await self._call_openrouter(instructions, request, temperature, primary)
		if not text or not text.strip():
			raise GenerationError("Empty response from model")
		return text

	async def _call_gemini(self, payload: Dict[str, Any]) -> str:
		params, headers = self._auth()
		try:
			r = await self._client.post(self.base_url, params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			status = http_err.response.status_code
			raise GenerationError(
				f"Gemini request failed ({status}): {http_err.response.text}", status_code=status
			) from http_err
		except httpx.RequestError as net_err:
			raise GenerationError(f"Gemini request failed: {net_err}") from net_err
		return _candidate_text(r)

	async def _call_openrouter(
		self, instructions: str, request: str, temperature: float, primary: GenerationError
	) -> str:
		headers = {
			"Authorization": f"Bearer {self._fallback_key}",
			"Content-Type": "application/json",
			"HTTP-Referer": settings.openrouter_referer,
			"X-Title": settings.openrouter_title,
		}
		payload: Dict[str, Any] = {
			"model": settings.openrouter_model,
			"temperature": temperature,
			"max_tokens": settings.gemini_max_output_tokens,
			"messages": [
				{"role": "system", "content": instructions},
				{"role": "user", "content": request},
			],
		}
		try:
			r = await self._fallback_client.post(settings.openrouter_base_url, headers=headers, json=payload)
			r.raise_for_status()
			return r.json()["choices"][0]["message"]["content"]
		except httpx.HTTPStatusError as fallback_err:
			raise GenerationError(
				f"Gemini primary call failed ({primary}); fallback via OpenRouter also failed ({fallback_err.response.status_code})",
				status_code=fallback_err.response.status_code,
			) from fallback_err
		except Exception as fallback_err:
			raise GenerationError(
				f"Gemini primary call failed ({primary}); fallback via OpenRouter also failed"
			) from fallback_err

	async def aclose(self) -> None:
		await self._client.aclose()
		if self._fallback_client is not None:
			await self._fallback_client.aclose()
