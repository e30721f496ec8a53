"""
Checks model output before anything is returned to the caller.
What it does:
- Parses the model text as JSON (one brace-wrapping retry)
- Full plan: steps must be a list of exactly 6 well-formed steps
- Step refresh: output must carry one well-formed "step"
- Anything else -> ShapeError with a bounded excerpt

And, the main purpose:
Never hand back a partially-trusted object.
"""


import json
from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError

from app.agent.modes import PLAN_STEP_COUNT
from app.core.errors import ShapeError
from app.core.logging import get_logger, safe_snippet
from app.llm.json_parse import loads_with_brace_retry
from app.llm.schemas import GuidanceStep, StepRefreshOutput, StepsOnly

log = get_logger("agent.validator")

NOT_OBJECT_EXCERPT = 2000


def _suffix(label: str) -> str:
    return f" ({label})" if label else ""


def parse_model_json(text: str, *, label: str = "") -> Dict[str, Any]:
    try:
        parsed = loads_with_brace_retry(text)
    except json.JSONDecodeError as e:
        log.warning(f"Model JSON parse failed{_suffix(label)}: {e}. Snippet={safe_snippet(text)}")
        raise ShapeError(f"Model returned invalid JSON{_suffix(label) or ' (could not parse)'}.", raw=text) from e

    if not isinstance(parsed, dict):
        log.warning(f"Model JSON is not an object{_suffix(label)} (got {type(parsed).__name__})")
        what = f"{label} output" if label else "output"
        raise ShapeError(f"Parsed {what} was not an object.", raw=text, limit=NOT_OBJECT_EXCERPT)
    return parsed


def validate_full_plan(text: str) -> Dict[str, Any]:
    plan = parse_model_json(text)

    steps = plan.get("steps")
    if not isinstance(steps, list) or len(steps) != PLAN_STEP_COUNT:
        got = len(steps) if isinstance(steps, list) else type(steps).__name__
        log.warning(f"Plan rejected: steps={got}")
        raise ShapeError(f"Parsed output missing steps[{PLAN_STEP_COUNT}].", raw=text)

    try:
        StepsOnly.model_validate({"steps": steps})
    except PydanticValidationError as e:
        log.warning(f"Plan rejected: {e.error_count()} step field error(s). Snippet={safe_snippet(text)}")
        raise ShapeError("Parsed output has steps missing required fields.", raw=text) from e

    drifted = [i + 1 for i, s in enumerate(steps) if type(s["stepNumber"]) is not int or s["stepNumber"] != i + 1]
    if drifted:
        log.warning(f"Renumbering plan steps at positions {drifted}")
        plan = {**plan, "steps": [{**s, "stepNumber": i + 1} for i, s in enumerate(steps)]}
    return plan


def validate_step_refresh(text: str) -> GuidanceStep:
    label = "step refresh"
    parsed = parse_model_json(text, label=label)
    try:
        return StepRefreshOutput.model_validate(parsed).step
    except PydanticValidationError as e:
        log.warning(f"Step refresh rejected: {e.error_count()} field error(s). Snippet={safe_snippet(text)}")
        raise ShapeError("Step refresh output missing required step fields.", raw=text) from e
