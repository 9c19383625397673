import json

import httpx
import pytest

from virtue_coach.gemini_client import GeminiClient, GenerationError, GenerationOptions, extract_text
from virtue_coach.settings import Settings


OPTIONS = GenerationOptions(max_output_tokens=200, temperature=0.4, top_p=0.8, top_k=40)


def _ok(text="Hello there"):
	return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


def _client(handler, **settings_overrides):
	config = Settings(**{"GEMINI_API_KEY": "test-key", **settings_overrides})
	return GeminiClient(config=config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


async def test_generate_posts_prompt_and_options_to_model_url():
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["url"] = request.url
		seen["body"] = json.loads(request.content)
		return httpx.Response(200, json=_ok())

	client = _client(handler)
	try:
		text = await client.generate("Be kind", "gemini-2.0-flash-lite", OPTIONS)
	finally:
		await client.aclose()
	assert text == "Hello there"
	assert seen["url"].path == "/v1beta/models/gemini-2.0-flash-lite:generateContent"
	assert seen["url"].params["key"] == "test-key"
	body = seen["body"]
	assert body["contents"][0]["parts"][0]["text"] == "Be kind"
	assert body["generationConfig"] == {"maxOutputTokens": 200, "temperature": 0.4, "topP": 0.8, "topK": 40}
	assert len(body["safetySettings"]) == 4
	assert {s["threshold"] for s in body["safetySettings"]} == {"BLOCK_MEDIUM_AND_ABOVE"}


async def test_vertex_provider_uses_header_auth():
	seen = {}

	def handler(request: httpx.Request) -> httpx.Response:
		seen["request"] = request
		return httpx.Response(200, json=_ok())

	client = _client(handler, GEMINI_PROVIDER="vertex", GEMINI_VERTEX_PROJECT="proj", GEMINI_VERTEX_REGION="us-central1")
	try:
		await client.generate("p", "gemini-1.5-flash", OPTIONS)
	finally:
		await client.aclose()
	request = seen["request"]
	assert request.url.host == "us-central1-aiplatform.googleapis.com"
	assert request.url.path.endswith("/projects/proj/locations/us-central1/publishers/google/models/gemini-1.5-flash:generateContent")
	assert request.headers["x-goog-api-key"] == "test-key"
	assert "key" not in request.url.params


@pytest.mark.parametrize(
	"response",
	[
		httpx.Response(500, json={"error": {"message": "boom"}}),
		httpx.Response(200, json={"candidates": []}),
		httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}}),
		httpx.Response(200, json={"candidates": [{"finishReason": "SAFETY"}]}),
		httpx.Response(200, json=_ok("   ")),
		httpx.Response(200, text="not json"),
	],
)
async def test_unusable_responses_raise_generation_error(response):
	client = _client(lambda request: response)
	try:
		with pytest.raises(GenerationError) as info:
			await client.generate("p", "gemini-pro", OPTIONS)
	finally:
		await client.aclose()
	assert info.value.model_id == "gemini-pro"


async def test_network_errors_raise_generation_error():
	def handler(request):
		raise httpx.ConnectError("unreachable", request=request)

	client = _client(handler)
	try:
		with pytest.raises(GenerationError):
			await client.generate("p", "gemini-pro", OPTIONS)
	finally:
		await client.aclose()


async def test_missing_api_key_fails_without_calling_out():
	def handler(request):
		pytest.fail("no request expected")

	config = Settings(**{"GEMINI_API_KEY": None})
	client = GeminiClient(config=config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
	try:
		assert not client.configured
		with pytest.raises(GenerationError, match="not configured"):
			await client.generate("p", "gemini-pro", OPTIONS)
	finally:
		await client.aclose()


def test_extract_text_reads_first_part_of_first_candidate():
	data = {"candidates": [{"content": {"parts": [{"text": "first"}, {"text": "second"}]}}, {"content": {"parts": [{"text": "other"}]}}]}
	assert extract_text(data) == "first"


def test_extract_text_rejects_missing_parts():
	with pytest.raises(GenerationError, match="Invalid response format"):
		extract_text({"candidates": [{"content": {}}]})
