"""
Decides which kind of generation a request asks for.

Step refresh needs BOTH a refreshStepNumber in 1..6 and a currentGuidance
whose steps list has exactly 6 entries. Anything less is a full generation.
"""


from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

PLAN_STEP_COUNT = 6


@dataclass(frozen=True)
class FullGeneration:
    unresolved_details: str = ""

    @property
    def has_feedback(self) -> bool:
        return bool(self.unresolved_details)


@dataclass(frozen=True)
class StepRefresh:
    step_number: int
    current_guidance: Dict[str, Any] = field(repr=False)
    not_working_details: str = ""

    @property
    def index(self) -> int:
        return self.step_number - 1

    @property
    def existing_step(self) -> Any:
        return self.current_guidance["steps"][self.index]


Mode = Union[FullGeneration, StepRefresh]


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_step_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, int) and 1 <= value <= PLAN_STEP_COUNT:
        return value
    return None


def _is_full_plan(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    steps = value.get("steps")
    return isinstance(steps, list) and len(steps) == PLAN_STEP_COUNT


def route_request(body: Dict[str, Any]) -> Mode:
    step_number = parse_step_number(body.get("refreshStepNumber"))
    current = body.get("currentGuidance")

    if step_number is not None and _is_full_plan(current):
        return StepRefresh(
            step_number=step_number,
            current_guidance=current,
            not_working_details=_text(body.get("notWorkingDetails")),
        )

    return FullGeneration(unresolved_details=_text(body.get("unresolvedDetails")))
