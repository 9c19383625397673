from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Union

from .gemini_client import GenerationError, GenerationOptions


logger = logging.getLogger(__name__)

FALLBACK_MODEL = "fallback"
ELLIPSIS = "..."


class TextGenerator(Protocol):
	async def generate(self, prompt: str, model_id: str, options: GenerationOptions) -> str: ...


@dataclass(frozen=True)
class Success:
	text: str
	model_id: str


@dataclass(frozen=True)
class Failure:
	error: BaseException


GenerationOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class CoachingResult:
	text: str
	model_used: str
	success: bool = True


async def generate_with_fallback(
	client: TextGenerator,
	prompt: str,
	candidates: Sequence[str],
	options: GenerationOptions,
	*,
	timeout: Optional[float] = None,
) -> GenerationOutcome:
	"""Try each model in order and return the first usable text.

	Attempts run one after another, never concurrently, so the first model in
	the list that succeeds wins. Failures are logged and swallowed; when every
	candidate fails only the last error is kept.
	"""
	last_error: Optional[BaseException] = None
	for model_id in candidates:
		logger.info("Trying model: %s", model_id)
		try:
			text = await asyncio.wait_for(client.generate(prompt, model_id, options), timeout)
			if not isinstance(text, str) or not text.strip():
				raise GenerationError("Model returned empty text", model_id=model_id)
		except asyncio.TimeoutError:
			last_error = GenerationError(f"Model {model_id} timed out after {timeout}s", model_id=model_id)
			logger.warning("Model %s failed: %s", model_id, last_error)
			continue
		except Exception as err:
			last_error = err
			logger.warning("Model %s failed: %s", model_id, err)
			continue
		logger.info("Success with model: %s", model_id)
		return Success(text=text, model_id=model_id)
	if last_error is None:
		last_error = GenerationError("No model candidates configured")
	logger.error("All models failed: %s", last_error)
	return Failure(error=last_error)


def limit_words(text: str, max_words: int) -> str:
	words = text.split()
	if len(words) <= max_words:
		return text
	return " ".join(words[:max_words]) + ELLIPSIS


async def complete(
	client: TextGenerator,
	prompt: str,
	candidates: Sequence[str],
	options: GenerationOptions,
	fallback: Callable[[], str],
	*,
	max_words: Optional[int] = None,
	timeout: Optional[float] = None,
) -> CoachingResult:
	outcome = await generate_with_fallback(client, prompt, candidates, options, timeout=timeout)
	if isinstance(outcome, Success):
		text = outcome.text if max_words is None else limit_words(outcome.text, max_words)
		return CoachingResult(text=text, model_used=outcome.model_id)
	return CoachingResult(text=fallback(), model_used=FALLBACK_MODEL)
