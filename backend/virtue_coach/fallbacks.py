from __future__ import annotations
from typing import Optional, Sequence

from .schemas import DashboardPromptRequest, PrioritizedVirtue, SynthesisRequest


PRIMARY_PLACEHOLDER = "your priority virtue"
SECONDARY_PLACEHOLDER = "your next priority virtue"


def _virtue_name(virtues: Optional[Sequence[PrioritizedVirtue]], index: int, placeholder: str) -> str:
	if virtues and len(virtues) > index and virtues[index].virtue.strip():
		return virtues[index].virtue
	return placeholder


def dashboard_fallback(request: DashboardPromptRequest) -> str:
	top = _virtue_name(request.prioritized_virtues, 0, PRIMARY_PLACEHOLDER)
	if request.is_first_time:
		step = f"Start by working on {top} in the Dismantling stage to begin recognizing character defects."
	else:
		step = f"Continue your progress by focusing on the next stage of {top}."
	return f"Welcome to your virtue development journey! {step} Click the stage buttons to begin your reflection."


def synthesis_fallback(request: SynthesisRequest) -> str:
	first = _virtue_name(request.prioritized_virtues, 0, PRIMARY_PLACEHOLDER)
	second = _virtue_name(request.prioritized_virtues, 1, SECONDARY_PLACEHOLDER)
	return (
		f"Across your reflections, {first} and {second} stand out as the areas with the most room for growth. "
		f"Keep working through the Dismantling and Building stages for {first} first, then bring the same attention to {second}."
	)
