from __future__ import annotations
import httpx
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from .settings import Settings, settings as default_settings


HARM_CATEGORIES = [
	"HARM_CATEGORY_HATE_SPEECH",
	"HARM_CATEGORY_DANGEROUS_CONTENT",
	"HARM_CATEGORY_SEXUALLY_EXPLICIT",
	"HARM_CATEGORY_HARASSMENT",
]


class GenerationError(RuntimeError):
	"""A single model attempt that produced no usable text."""

	def __init__(self, message: str, *, model_id: Optional[str] = None) -> None:
		super().__init__(message)
		self.model_id = model_id


class GenerationOptions(BaseModel):
	model_config = ConfigDict(frozen=True)

	max_output_tokens: int
	temperature: float
	top_p: float = 0.8
	top_k: int = 40
	safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE"
	harm_categories: tuple[str, ...] = Field(default_factory=lambda: tuple(HARM_CATEGORIES))

	def generation_config(self) -> Dict[str, Any]:
		return {
			"maxOutputTokens": self.max_output_tokens,
			"temperature": self.temperature,
			"topP": self.top_p,
			"topK": self.top_k,
		}

	def safety_settings(self) -> List[Dict[str, str]]:
		return [{"category": c, "threshold": self.safety_threshold} for c in self.harm_categories]


class GeminiClient:
	"""Process-wide handle to the Gemini generateContent API.

	The model is chosen per call, so one instance serves every endpoint and
	every model candidate. Nothing on the instance changes after __init__.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		config: Optional[Settings] = None,
		http_client: Optional[httpx.AsyncClient] = None,
	) -> None:
		config = config or default_settings
		self.api_key = api_key or config.gemini_api_key
		self.provider = config.gemini_provider
		if self.provider == "vertex":
			region = config.vertex_region
			project = config.vertex_project or "placeholder-project"
			# Vertex AI Generative REST endpoint (API key via header)
			self._url_template = (
				f"https://{region}-aiplatform.googleapis.com/v1/projects/{project}/locations/{region}/publishers/google/models/{{model}}:generateContent"
			)
			self._auth_in_query = False
		else:
			# Google AI Studio (Generative Language API)
			self._url_template = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
			self._auth_in_query = True
		self._client = http_client or httpx.AsyncClient(timeout=config.attempt_timeout_seconds)

	@property
	def configured(self) -> bool:
		return bool(self.api_key)

	def url_for(self, model_id: str) -> str:
		return self._url_template.format(model=model_id)

	async def generate(self, prompt: str, model_id: str, options: GenerationOptions) -> str:
		if not self.api_key:
			raise GenerationError("GEMINI_API_KEY is not configured", model_id=model_id)
		payload: Dict[str, Any] = {
			"contents": [{"role": "user", "parts": [{"text": prompt}]}],
			"generationConfig": options.generation_config(),
			"safetySettings": options.safety_settings(),
		}
		params: Dict[str, Any] = {}
		headers: Dict[str, str] = {}
		if self._auth_in_query:
			params["key"] = self.api_key
		else:
			headers["x-goog-api-key"] = self.api_key
		try:
			r = await self._client.post(self.url_for(model_id), params=params, headers=headers, json=payload)
			r.raise_for_status()
		except httpx.HTTPStatusError as http_err:
			raise GenerationError(
				f"Gemini returned HTTP {http_err.response.status_code}", model_id=model_id
			) from http_err
		except httpx.RequestError as net_err:
			raise GenerationError(f"Gemini request failed: {net_err!r}", model_id=model_id) from net_err
		try:
			data = r.json()
		except ValueError as err:
			raise GenerationError("Gemini response was not JSON", model_id=model_id) from err
		return extract_text(data, model_id=model_id)

	async def aclose(self) -> None:
		await self._client.aclose()


def extract_text(data: Any, *, model_id: Optional[str] = None) -> str:
	"""Pull candidates[0].content.parts[0].text out of a generateContent body."""
	if not isinstance(data, dict):
		raise GenerationError("Unexpected Gemini response shape", model_id=model_id)
	block_reason = (data.get("promptFeedback") or {}).get("blockReason")
	if block_reason:
		raise GenerationError(f"Prompt blocked: {block_reason}", model_id=model_id)
	candidates = data.get("candidates") or []
	if not candidates:
		raise GenerationError("Gemini returned no candidates", model_id=model_id)
	first = candidates[0] or {}
	try:
		text = first["content"]["parts"][0]["text"]
	except (KeyError, IndexError, TypeError):
		reason = first.get("finishReason") if isinstance(first, dict) else None
		if reason == "SAFETY":
			raise GenerationError("Candidate blocked by safety filters", model_id=model_id)
		raise GenerationError("Invalid response format from model", model_id=model_id)
	if not isinstance(text, str) or not text.strip():
		raise GenerationError("Model returned empty text", model_id=model_id)
	return text
