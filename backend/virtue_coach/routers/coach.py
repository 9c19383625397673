from __future__ import annotations
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..fallbacks import dashboard_fallback, synthesis_fallback
from ..gemini_client import GeminiClient, GenerationOptions
from ..generation import complete
from ..prompts import DASHBOARD_WORD_LIMIT, build_dashboard_prompt, build_synthesis_prompt
from ..schemas import (
	DashboardPromptRequest,
	DashboardPromptResponse,
	ErrorResponse,
	SynthesisRequest,
	SynthesisResponse,
)
from ..settings import settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/coach", tags=["coach"])


# Short, focused output for the 150-word dashboard message
DASHBOARD_OPTIONS = GenerationOptions(max_output_tokens=200, temperature=0.4, top_p=0.8, top_k=40)
SYNTHESIS_OPTIONS = GenerationOptions(max_output_tokens=600, temperature=0.5, top_p=0.8, top_k=40)

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


def get_gemini_client(request: Request) -> GeminiClient:
	return request.app.state.gemini


def internal_error(endpoint: str, err: Exception) -> JSONResponse:
	logger.exception("Unexpected error in %s", endpoint)
	body = ErrorResponse(error="Internal server error", details=str(err) if settings.is_development else None)
	return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@router.post("/dashboard-prompt", response_model=DashboardPromptResponse, responses=_ERROR_RESPONSES)
async def dashboard_prompt(req: DashboardPromptRequest, client: GeminiClient = Depends(get_gemini_client)):
	try:
		prompt = build_dashboard_prompt(req)
		result = await complete(
			client,
			prompt,
			settings.dashboard_models,
			DASHBOARD_OPTIONS,
			lambda: dashboard_fallback(req),
			max_words=DASHBOARD_WORD_LIMIT,
			timeout=settings.attempt_timeout_seconds,
		)
		return DashboardPromptResponse(prompt=result.text, model=result.model_used, success=result.success)
	except Exception as e:
		return internal_error("dashboard_prompt", e)


@router.post("/synthesis", response_model=SynthesisResponse, responses=_ERROR_RESPONSES)
async def synthesis(req: SynthesisRequest, client: GeminiClient = Depends(get_gemini_client)):
	try:
		prompt = build_synthesis_prompt(req)
		# No hard word cap here, the prompt carries the length target
		result = await complete(
			client,
			prompt,
			settings.synthesis_models,
			SYNTHESIS_OPTIONS,
			lambda: synthesis_fallback(req),
			timeout=settings.attempt_timeout_seconds,
		)
		return SynthesisResponse(summary=result.text, model=result.model_used, success=result.success)
	except Exception as e:
		return internal_error("synthesis", e)
