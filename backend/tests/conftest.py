"""Shared fixtures: a scripted stand-in for the Gemini client and an API client."""
from typing import List, Tuple, Union

import pytest
from fastapi.testclient import TestClient

from virtue_coach.gemini_client import GenerationError, GenerationOptions
from virtue_coach.main import app
from virtue_coach.routers.coach import get_gemini_client
from virtue_coach.settings import settings


MODELS = ["model-a", "model-b", "model-c"]


class ScriptedGenerator:
	"""Replays one scripted outcome per call: a string is returned, an exception raised."""

	def __init__(self, outcomes: List[Union[str, BaseException]]) -> None:
		self.outcomes = list(outcomes)
		self.calls: List[Tuple[str, str, GenerationOptions]] = []

	@property
	def models_called(self) -> List[str]:
		return [model_id for _, model_id, _ in self.calls]

	async def generate(self, prompt: str, model_id: str, options: GenerationOptions) -> str:
		self.calls.append((prompt, model_id, options))
		if not self.outcomes:
			raise GenerationError("no scripted outcome left", model_id=model_id)
		outcome = self.outcomes.pop(0)
		if isinstance(outcome, BaseException):
			raise outcome
		return outcome


def failing(n: int) -> List[BaseException]:
	return [GenerationError(f"failure {i}") for i in range(1, n + 1)]


@pytest.fixture
def fixed_models(monkeypatch):
	monkeypatch.setattr(settings, "dashboard_models", list(MODELS))
	monkeypatch.setattr(settings, "synthesis_models", list(MODELS))
	monkeypatch.setattr(settings, "attempt_timeout_seconds", 5.0)
	return MODELS


@pytest.fixture
def api(fixed_models):
	"""Returns a factory building a TestClient wired to a ScriptedGenerator."""

	def _make(outcomes: List[Union[str, BaseException]]) -> Tuple[TestClient, ScriptedGenerator]:
		generator = ScriptedGenerator(outcomes)
		app.dependency_overrides[get_gemini_client] = lambda: generator
		return TestClient(app), generator

	yield _make
	app.dependency_overrides.clear()
