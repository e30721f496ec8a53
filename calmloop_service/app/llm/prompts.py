"""
Prompt assembly for both generation modes.
What it builds:
- The system instruction (tone, output rules, safety tie-break)
- The user payload (the whole scenario + mode-specific context), sent as JSON
- The output schema + token ceiling the model call must use

And, the main purpose:
Keep every word the model sees in one place.
"""


import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from app.api.types import ScenarioInput
from app.agent.modes import FullGeneration, StepRefresh
from app.core.config import settings
from app.llm.schemas import (
    PLAN_JSON_SCHEMA,
    PLAN_SCHEMA_NAME,
    STEP_REFRESH_JSON_SCHEMA,
    STEP_REFRESH_SCHEMA_NAME,
)


_PERSONA = "You are Calm Loop, a supportive parenting micro-coach."
_STYLE = "Style: calm, clear, non-judgmental. Simple language. No shaming."
_JSON_ONLY = [
    "Return ONLY valid JSON that matches the provided JSON schema exactly.",
    "Do NOT include markdown, extra keys, commentary, or surrounding text.",
]
_SECOND_CHILD = "Account for child behaviors and any second child details if provided."

PLAN_SYSTEM_LINES = [
    _PERSONA,
    "Goal: give practical, specific guidance a parent can apply immediately.",
    _STYLE,
    *_JSON_ONLY,
    "Write steps that are highly specific to the situation and constraints.",
    "Each step must include: what to do, what to say, how to check success, and what to try if it doesn't work.",
    _SECOND_CHILD,
    "If there is any immediate danger, the first step must prioritize safety and de-escalation.",
]

UNRESOLVED_SYSTEM_LINE = (
    "IMPORTANT: The user said the prior plan was unresolved. "
    "Adapt this new plan to address what didn't work."
)

STEP_REFRESH_SYSTEM = "\n".join([
    _PERSONA,
    "Goal: regenerate ONLY one step in a 6-step plan to make it more effective and specific.",
    _STYLE,
    *_JSON_ONLY,
    "Keep the step short and actionable: what to do + what to say + success check + what to try if it still doesn't work.",
    "The regenerated step must stay consistent with the overall plan tone and constraints.",
    _SECOND_CHILD,
])

FRESH_PLAN_INSTRUCTION = "Generate a 6-step plan that feels like a guided walkthrough, not generic tips."
REVISED_PLAN_INSTRUCTION = (
    "Generate a revised 6-step plan that directly addresses what didn't work previously "
    "and offers more workable alternatives."
)
STEP_REFRESH_INSTRUCTION = (
    "Regenerate ONLY this step so it is more workable given the exact scenario and constraints. "
    "Do not reference other steps explicitly."
)
DEFAULT_NOT_WORKING = "The parent marked this step as not working."

PLAN_CONTEXT_FIELDS = ["planTitle", "likelyState", "oneLineSummary", "safetyNote"]


@dataclass(frozen=True)
class PromptBundle:
    system: str
    payload: Dict[str, Any]
    schema_name: str
    schema: Dict[str, Any]
    max_output_tokens: int

    @property
    def user(self) -> str:
        return json.dumps(self.payload, ensure_ascii=False)


def plan_system_prompt(has_feedback: bool) -> str:
    lines: List[str] = list(PLAN_SYSTEM_LINES)
    if has_feedback:
        lines.append(UNRESOLVED_SYSTEM_LINE)
    return "\n".join(lines)


def scenario_payload(s: ScenarioInput) -> Dict[str, Any]:
    second_child: Optional[Dict[str, Any]] = None
    if s.second_child_enabled:
        second_child = {
            "age": s.second_child_age,
            "intensityLevel1to10": s.second_child_intensity,
            "behaviors": s.second_child_behaviors,
        }
    return {
        "moodOwner": s.mood_owner,
        "parentMoods": s.parent_moods,
        "trigger": s.trigger,
        "goal": s.goal,
        "environmentType": s.environment_type,
        "intensityLevel1to10": s.intensity,
        "timeLimitNone": s.time_limit_none,
        "timeLimitMinutes": None if s.time_limit_none else s.time_limit_min,
        "childAge": s.child_age,
        "childBehaviors": s.child_behaviors,
        "secondChildEnabled": s.second_child_enabled,
        "secondChild": second_child,
        "constraintsNotes": s.constraints_notes,
        "triedAlready": s.tried_already,
    }


def build_full_plan_prompt(scenario: ScenarioInput, mode: FullGeneration) -> PromptBundle:
    payload = scenario_payload(scenario)
    payload["unresolvedDetails"] = mode.unresolved_details
    payload["instruction"] = REVISED_PLAN_INSTRUCTION if mode.has_feedback else FRESH_PLAN_INSTRUCTION
    return PromptBundle(
        system=plan_system_prompt(mode.has_feedback),
        payload=payload,
        schema_name=PLAN_SCHEMA_NAME,
        schema=PLAN_JSON_SCHEMA,
        max_output_tokens=settings.PLAN_MAX_OUTPUT_TOKENS,
    )


def build_step_refresh_prompt(scenario: ScenarioInput, mode: StepRefresh) -> PromptBundle:
    plan = mode.current_guidance
    payload = {
        "mode": "refresh_step_only",
        "stepToReplace": mode.step_number,
        "scenario": scenario_payload(scenario),
        "planContext": {k: plan.get(k) for k in PLAN_CONTEXT_FIELDS},
        "currentStep": mode.existing_step,
        "whatDidntWork": mode.not_working_details or DEFAULT_NOT_WORKING,
        "instruction": STEP_REFRESH_INSTRUCTION,
    }
    return PromptBundle(
        system=STEP_REFRESH_SYSTEM,
        payload=payload,
        schema_name=STEP_REFRESH_SCHEMA_NAME,
        schema=STEP_REFRESH_JSON_SCHEMA,
        max_output_tokens=settings.STEP_MAX_OUTPUT_TOKENS,
    )


def build_prompt(scenario: ScenarioInput, mode) -> PromptBundle:
    if isinstance(mode, StepRefresh):
        return build_step_refresh_prompt(scenario, mode)
    return build_full_plan_prompt(scenario, mode)
