"""
Turns one guidance request into one guidance plan.
What it does:
- Normalizes the scenario (rejects short trigger/goal)
- Routes to full generation or single-step refresh
- Builds the prompt + schema and calls the model once
- Extracts, parses and validates the model output
- Splices a refreshed step back into the caller's plan

And, the main purpose:
Request -> plan, with every failure surfaced as a GuidanceError.
"""


import json
from typing import Any, Dict

from app.agent.modes import StepRefresh, route_request
from app.agent.normalizer import normalize_scenario
from app.agent.reconciler import splice_step
from app.agent.validator import validate_full_plan, validate_step_refresh
from app.core.errors import ShapeError
from app.core.ids import new_id
from app.core.logging import get_logger, safe_snippet
from app.llm.json_parse import extract_model_text
from app.llm.prompts import build_prompt
from app.llm.router import ModelInvoker

log = get_logger("agent.planner")


def _suffix(label: str) -> str:
    return f" ({label})" if label else ""


def read_envelope(raw: str, *, label: str = "") -> str:
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as e:
        log.warning(f"OpenAI body is not JSON{_suffix(label)}. Snippet={safe_snippet(raw)}")
        what = label or "unexpected"
        raise ShapeError(f"OpenAI response was not valid JSON ({what}).", debug=raw) from e

    text = extract_model_text(envelope)
    if not text:
        log.warning(f"No model text in OpenAI envelope{_suffix(label)}. Snippet={safe_snippet(raw)}")
        raise ShapeError(
            f"Unexpected OpenAI response shape (could not extract model text){_suffix(label)}.",
            debug=raw,
        )
    return text


async def generate_guidance(body: Dict[str, Any], invoker: ModelInvoker) -> Dict[str, Any]:
    request_id = new_id("req")
    scenario = normalize_scenario(body)
    mode = route_request(body)
    prompt = build_prompt(scenario, mode)

    if isinstance(mode, StepRefresh):
        label = "step refresh"
        log.info(f"{request_id} mode=step_refresh step={mode.step_number}")
        reply = await invoker.invoke(prompt, label=label)
        step = validate_step_refresh(read_envelope(reply.text, label=label))
        return splice_step(mode.current_guidance, mode.step_number, step)

    log.info(f"{request_id} mode=full_plan feedback={mode.has_feedback}")
    reply = await invoker.invoke(prompt)
    plan = validate_full_plan(read_envelope(reply.text))
    log.info(f"{request_id} plan ok: {plan.get('planTitle')!r}")
    return plan
