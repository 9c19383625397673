"""Deterministic prompt construction for the coaching endpoints.

Both builders are pure: the same request always yields the same string, and
missing optional data is rendered as placeholder text instead of failing.
The instruction templates are versioned; change the version whenever the
wording or ordering of the instructions changes.
"""
from __future__ import annotations
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Sequence, Union

from .schemas import DashboardPromptRequest, PrioritizedVirtue, SynthesisRequest, VirtueAnalysis


MAX_SCORE = 10
DASHBOARD_WORD_LIMIT = 150
SYNTHESIS_WORD_TARGET = 250

STAGE_NAMES: Dict[str, str] = {"1": "Dismantling", "2": "Building", "3": "Practicing"}

NO_ASSESSMENT = "No assessment data available"
NO_PROGRESS = "No progress data available"
NO_RECENT_UPDATES = "No recent updates"
NO_ANALYSES = "No analyses available"
DEFAULT_SUMMARY = "Assessment completed"


DASHBOARD_TEMPLATE_VERSION = "2024-06.1"
DASHBOARD_TEMPLATE = """
As a virtue development coach, provide personalized next-step guidance for a user viewing their virtue dashboard. Use warm, encouraging language with "you" to address them directly.

**STAGE DEFINITIONS:**
- Discovery: Complete virtue assessment to identify growth areas
- Dismantling: Recognize and work through character defects that block virtue
- Building: Develop understanding and practice of the virtue itself
- Practicing: Apply virtue consistently in daily life (only after completing Dismantling and Building)

**USER DATA:**

Assessment Summary: {summary}

Prioritized Virtues (lowest scores need most work):
{virtues}

Current Stage Progress:
{progress}

Recent Progress: {recent}

First-time user: {first_time}

**GUIDANCE RULES:**
1. **PRIMARY FOCUS**: Always direct attention to the LOWEST-SCORING virtue (highest priority for development) from the prioritized list
2. If first-time/empty dashboard: Encourage starting with #1 lowest-scoring virtue's Dismantling stage
3. **Structure**: Lead with next step recommendation, then briefly acknowledge progress if relevant
4. Recommend completing all Dismantling stages before Building, or work virtue-by-virtue (Dismantling → Building)
5. Discourage Practicing until both Dismantling and Building are complete for that virtue
6. STRICT LIMIT: Maximum {word_limit} words total
7. End with a specific actionable next step focusing on the lowest-scoring virtue

**PRIORITY**: Focus on the #1 virtue (lowest score) unless it's completely finished (both Dismantling and Building completed).

Generate a personalized, encouraging message directing them to their next virtue development step. Lead with the recommended action for the lowest-scoring virtue, keep it concise and under {word_limit} words:"""


SYNTHESIS_TEMPLATE_VERSION = "2024-06.1"
SYNTHESIS_TEMPLATE = """
As a virtue development coach, you are reviewing several analyses written about one user's character across different virtues. Write a single, cohesive synthesis addressed directly to the user with "you", in a warm and encouraging tone.

**PRIORITIZED VIRTUES (lowest scores need most work):**
{virtues}

**INDIVIDUAL ANALYSES ({count}):**

{analyses}

**YOUR TASKS:**
1. **Identify themes**: Name the recurring patterns or root defects that appear across several analyses
2. **Commend strengths**: Acknowledge genuine strengths and progress the analyses reveal
3. **Recommend focus**: Recommend where to focus next, starting with the top one or two prioritized virtues
4. Do not repeat the analyses one by one; connect them into one picture
5. Aim for about {word_target} words, in short paragraphs

Write the synthesis now:"""


def display_score(defect_intensity: float) -> str:
	# Half-up rounding, so 1.25 shows as 1.3
	score = Decimal(MAX_SCORE) - Decimal(str(defect_intensity))
	return str(score.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_virtue_list(virtues: Optional[Sequence[PrioritizedVirtue]]) -> str:
	if not virtues:
		return NO_ASSESSMENT
	lines = []
	for i, v in enumerate(virtues, start=1):
		if v.defect_intensity is None:
			lines.append(f"{i}. {v.virtue}")
		else:
			lines.append(f"{i}. {v.virtue} (Score: {display_score(v.defect_intensity)})")
	return "\n".join(lines)


def stage_name(stage: str) -> str:
	# Anything outside Dismantling/Building counts as Practicing
	return STAGE_NAMES.get(stage.strip(), STAGE_NAMES["3"])


def format_stage_progress(
	stage_progress: Optional[Dict[str, Any]],
	virtues: Optional[Sequence[PrioritizedVirtue]],
) -> str:
	if not stage_progress:
		return NO_PROGRESS
	names = {str(v.virtue_id): v.virtue for v in (virtues or []) if v.virtue_id is not None}
	lines = []
	for key, status in stage_progress.items():
		# virtue ids may themselves contain hyphens, the stage is always last
		virtue_id, _, stage = str(key).rpartition("-")
		if not virtue_id:
			virtue_id, stage = stage, ""
		name = names.get(virtue_id, "Unknown")
		lines.append(f"{name} - {stage_name(stage)}: {status}")
	return "\n".join(lines)


def build_dashboard_prompt(request: DashboardPromptRequest) -> str:
	return DASHBOARD_TEMPLATE.format(
		summary=request.assessment_summary or DEFAULT_SUMMARY,
		virtues=format_virtue_list(request.prioritized_virtues),
		progress=format_stage_progress(request.stage_progress, request.prioritized_virtues),
		recent=request.recent_progress or NO_RECENT_UPDATES,
		first_time="true" if request.is_first_time else "false",
		word_limit=DASHBOARD_WORD_LIMIT,
	)


def _format_analysis(index: int, item: Union[VirtueAnalysis, str]) -> str:
	if isinstance(item, str):
		title, body = "General", item
	else:
		title, body = item.virtue or "General", item.analysis or ""
	return f"### Analysis {index}: {title}\n{body.strip() or '(empty)'}"


def format_analyses(analyses: Sequence[Union[VirtueAnalysis, str]]) -> str:
	if not analyses:
		return NO_ANALYSES
	blocks: List[str] = [_format_analysis(i, a) for i, a in enumerate(analyses, start=1)]
	return "\n\n".join(blocks)


def build_synthesis_prompt(request: SynthesisRequest) -> str:
	return SYNTHESIS_TEMPLATE.format(
		virtues=format_virtue_list(request.prioritized_virtues),
		count=len(request.analyses),
		analyses=format_analyses(request.analyses),
		word_target=SYNTHESIS_WORD_TARGET,
	)
