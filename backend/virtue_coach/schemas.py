from __future__ import annotations
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Payload(BaseModel):
	# Clients send camelCase JSON; the models are frozen once validated
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")


class PrioritizedVirtue(_Payload):
	virtue: str
	virtue_id: Optional[Union[int, str]] = None
	# 0-10, higher means a stronger defect (lower virtue score)
	defect_intensity: Optional[float] = None


class VirtueAnalysis(_Payload):
	virtue: Optional[str] = None
	analysis: Optional[str] = None


class DashboardPromptRequest(_Payload):
	assessment_summary: Optional[str] = None
	prioritized_virtues: Optional[List[PrioritizedVirtue]] = None
	# Keys look like "<virtueId>-<stage>", values are statuses such as "completed"
	stage_progress: Optional[Dict[str, Any]] = None
	recent_progress: Optional[str] = None
	is_first_time: Optional[bool] = False


class SynthesisRequest(_Payload):
	analyses: List[Union[VirtueAnalysis, str]]
	prioritized_virtues: Optional[List[PrioritizedVirtue]] = None


class DashboardPromptResponse(BaseModel):
	prompt: str
	model: str
	success: bool = True


class SynthesisResponse(BaseModel):
	summary: str
	model: str
	success: bool = True


class ErrorResponse(BaseModel):
	error: str
	details: Optional[str] = None
